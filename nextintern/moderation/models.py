import copy

from django.conf import settings
from django.db import models, transaction
from django.utils import timezone

DEFAULT_SETTINGS = {
    "platform": {
        "site_name": "NextIntern 2.0",
        "platform_tagline": "Connect talent with opportunity",
        "support_email": "support@nextintern.com",
        "email_notifications": True,
        "new_user_registration": True,
        "maintenance_mode": False,
    },
    "pricing": {
        "candidate_premium_monthly": 1999,
        "industry_premium_monthly": 4999,
        "free_industry_posts": 3,
    },
    "security": {
        "session_timeout": 60,  # minutes
        "password_min_length": 8,
    },
    "compliance": {
        "terms_version": "1.0",
        "privacy_policy_version": "1.0",
        "data_retention_period": 90,
        "audit_logging": True,
        "gdpr_compliance": True,
    },
}


class PlatformSettings(models.Model):
    """
    Admin-editable platform configuration.

    Rows are never updated in place: each change appends a row with the next
    version number and the highest version is the one in force.
    """

    version = models.PositiveIntegerField(unique=True)
    data = models.JSONField(default=dict)
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name="+"
    )
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-version"]
        verbose_name_plural = "platform settings"

    def __str__(self):
        return f"Platform settings v{self.version}"

    @classmethod
    def current(cls):
        return cls.objects.order_by("-version").first()

    @classmethod
    def resolved(cls) -> dict:
        """Defaults overlaid with the current version's stored sections."""
        merged = copy.deepcopy(DEFAULT_SETTINGS)
        row = cls.current()
        if row is not None:
            for section, values in (row.data or {}).items():
                if section in merged and isinstance(values, dict):
                    merged[section].update(values)
        return merged

    @classmethod
    def get_value(cls, section, key):
        return cls.resolved()[section][key]

    @classmethod
    def publish(cls, changes: dict, user=None) -> "PlatformSettings":
        """Append a new version with ``changes`` merged over the current settings."""
        with transaction.atomic():
            merged = cls.resolved()
            for section, values in changes.items():
                merged[section].update(values)
            latest = cls.objects.select_for_update().order_by("-version").first()
            next_version = (latest.version + 1) if latest else 1
            return cls.objects.create(version=next_version, data=merged, updated_by=user)
