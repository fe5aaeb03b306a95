from django.contrib.auth.models import AbstractUser, UserManager as DjangoUserManager
from django.db import models
from django.utils import timezone


class UserManager(DjangoUserManager):
    def create_superuser(self, username, email=None, password=None, **extra_fields):
        extra_fields.setdefault("role", User.Role.ADMIN)
        return super().create_superuser(username, email, password, **extra_fields)


class User(AbstractUser):
    class Role(models.TextChoices):
        CANDIDATE = "CANDIDATE", "Candidate"
        INDUSTRY = "INDUSTRY", "Industry"
        INSTITUTE = "INSTITUTE", "Institute"
        ADMIN = "ADMIN", "Admin"

    email = models.EmailField(unique=True)
    role = models.CharField(
        max_length=20,
        choices=Role.choices,
        default=Role.CANDIDATE,
        help_text="Controls which features the account can access. Fixed at creation.",
    )
    is_premium = models.BooleanField(default=False)
    premium_expires_at = models.DateTimeField(null=True, blank=True)

    objects = UserManager()

    def save(self, *args, **kwargs):
        if self.pk is not None:
            stored_role = type(self).objects.filter(pk=self.pk).values_list("role", flat=True).first()
            if stored_role is not None and stored_role != self.role:
                raise ValueError("An account's role cannot be changed after creation.")
        super().save(*args, **kwargs)

    def is_candidate(self) -> bool:
        return self.role == self.Role.CANDIDATE

    def is_industry(self) -> bool:
        return self.role == self.Role.INDUSTRY

    def is_institute(self) -> bool:
        return self.role == self.Role.INSTITUTE

    def is_admin(self) -> bool:
        return self.role == self.Role.ADMIN

    @property
    def has_premium(self) -> bool:
        if not self.is_premium:
            return False
        return self.premium_expires_at is None or self.premium_expires_at > timezone.now()

    @property
    def role_profile(self):
        """The profile row matching this user's role, or None."""
        attr = {
            self.Role.CANDIDATE: "candidate_profile",
            self.Role.INDUSTRY: "industry_profile",
            self.Role.INSTITUTE: "institute_profile",
        }.get(self.role)
        if attr is None:
            return None
        return getattr(self, attr, None)

    @property
    def is_verified(self) -> bool:
        if self.is_admin():
            return True
        profile = self.role_profile
        return bool(getattr(profile, "is_verified", False))


class Message(models.Model):
    sender = models.ForeignKey(User, related_name="sent_messages", on_delete=models.CASCADE)
    receiver = models.ForeignKey(User, related_name="received_messages", on_delete=models.CASCADE)
    subject = models.CharField(max_length=200, blank=True)
    content = models.TextField()
    sent_at = models.DateTimeField(default=timezone.now)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["sent_at"]
        indexes = [
            models.Index(fields=["sender", "receiver"], name="message_thread_idx"),
            models.Index(fields=["receiver", "is_read"], name="message_unread_idx"),
        ]

    def __str__(self):
        return f"From {self.sender.email} to {self.receiver.email}: {self.content[:30]}"


class Notification(models.Model):
    class Kind(models.TextChoices):
        MESSAGE_RECEIVED = "MESSAGE_RECEIVED", "Message received"
        APPLICATION_UPDATE = "APPLICATION_UPDATE", "Application update"
        SYSTEM_ALERT = "SYSTEM_ALERT", "System alert"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="notifications")
    kind = models.CharField(max_length=30, choices=Kind.choices)
    title = models.CharField(max_length=200)
    message = models.TextField()
    action_url = models.CharField(max_length=300, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]
        indexes = [models.Index(fields=["user", "is_read"], name="notification_unread_idx")]

    def __str__(self):
        return f"{self.title} -> {self.user.email}"


class Subscription(models.Model):
    class Plan(models.TextChoices):
        PREMIUM_MONTHLY = "PREMIUM_MONTHLY", "Premium (monthly)"
        PREMIUM_YEARLY = "PREMIUM_YEARLY", "Premium (yearly)"

    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        ACTIVE = "ACTIVE", "Active"
        CANCELLED = "CANCELLED", "Cancelled"
        EXPIRED = "EXPIRED", "Expired"

    class BillingCycle(models.TextChoices):
        MONTHLY = "MONTHLY", "Monthly"
        YEARLY = "YEARLY", "Yearly"

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="subscriptions")
    plan = models.CharField(max_length=30, choices=Plan.choices)
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    billing_cycle = models.CharField(max_length=10, choices=BillingCycle.choices)
    price_amount = models.PositiveIntegerField()
    currency = models.CharField(max_length=3, default="INR")
    start_date = models.DateTimeField(default=timezone.now)
    end_date = models.DateTimeField()
    activated_at = models.DateTimeField(null=True, blank=True)
    cancelled_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-start_date"]

    def __str__(self):
        return f"{self.user.email} {self.plan} ({self.status})"


class AuditLog(models.Model):
    """Privacy audit trail. Written best-effort; see accounts.audit."""

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="audit_entries")
    action = models.CharField(max_length=50)
    target_user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="audit_mentions"
    )
    resource_type = models.CharField(max_length=50)
    resource_id = models.CharField(max_length=64, blank=True)
    ip_address = models.CharField(max_length=64, default="unknown")
    user_agent = models.CharField(max_length=300, default="unknown")
    legal_basis = models.CharField(max_length=300, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"{self.user.email} {self.action} {self.resource_type}:{self.resource_id}"
