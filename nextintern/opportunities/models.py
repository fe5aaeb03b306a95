from django.conf import settings
from django.db import models
from django.utils import timezone
from django.utils.text import slugify

from profiles.models import CandidateProfile, IndustryProfile

User = settings.AUTH_USER_MODEL


class Category(models.Model):
    name = models.CharField(max_length=80, unique=True)
    slug = models.SlugField(max_length=90, unique=True, blank=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "categories"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = slugify(self.name)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Location(models.Model):
    city = models.CharField(max_length=120)
    state = models.CharField(max_length=120, blank=True)
    country = models.CharField(max_length=80, default="India")

    class Meta:
        ordering = ["city"]
        unique_together = ["city", "state", "country"]

    def __str__(self):
        return ", ".join(p for p in (self.city, self.state) if p)


class Opportunity(models.Model):
    class Type(models.TextChoices):
        INTERNSHIP = "INTERNSHIP", "Internship"
        PROJECT = "PROJECT", "Project"
        FREELANCING = "FREELANCING", "Freelancing"

    class WorkType(models.TextChoices):
        REMOTE = "REMOTE", "Remote"
        ONSITE = "ONSITE", "On-site"
        HYBRID = "HYBRID", "Hybrid"

    class ModerationState(models.TextChoices):
        PENDING = "PENDING", "Pending review"
        ACTIVE = "ACTIVE", "Active"

    industry = models.ForeignKey(IndustryProfile, on_delete=models.CASCADE, related_name="opportunities")
    title = models.CharField(max_length=100)
    description = models.TextField()
    type = models.CharField(max_length=20, choices=Type.choices, default=Type.INTERNSHIP)
    work_type = models.CharField(max_length=20, choices=WorkType.choices, default=WorkType.ONSITE)
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name="opportunities")
    location = models.ForeignKey(Location, on_delete=models.SET_NULL, null=True, blank=True, related_name="opportunities")

    stipend = models.PositiveIntegerField(null=True, blank=True, help_text="Monthly stipend or fixed fee")
    currency = models.CharField(max_length=3, default="INR")
    duration = models.CharField(max_length=60, blank=True)
    application_deadline = models.DateTimeField(null=True, blank=True)

    # New listings wait for an admin to approve them
    is_active = models.BooleanField(default=False)
    is_premium_only = models.BooleanField(default=False)
    view_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]
        verbose_name_plural = "opportunities"
        indexes = [
            models.Index(fields=["is_active", "created_at"], name="opportunity_listing_idx"),
            models.Index(fields=["industry", "type", "created_at"], name="opportunity_quota_idx"),
        ]

    def __str__(self):
        return f"{self.title} ({self.get_type_display()})"

    def save(self, *args, **kwargs):
        self.is_premium_only = self.type == self.Type.FREELANCING
        super().save(*args, **kwargs)

    @property
    def moderation_state(self):
        return self.ModerationState.ACTIVE if self.is_active else self.ModerationState.PENDING

    def is_owned_by(self, user) -> bool:
        return user.is_authenticated and self.industry.user_id == user.pk


class Application(models.Model):
    class Status(models.TextChoices):
        PENDING = "PENDING", "Pending"
        REVIEWED = "REVIEWED", "Reviewed"
        SHORTLISTED = "SHORTLISTED", "Shortlisted"
        SELECTED = "SELECTED", "Selected"
        REJECTED = "REJECTED", "Rejected"

    candidate = models.ForeignKey(CandidateProfile, on_delete=models.CASCADE, related_name="applications")
    opportunity = models.ForeignKey(Opportunity, on_delete=models.CASCADE, related_name="applications")
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    cover_letter = models.TextField(blank=True)
    applied_at = models.DateTimeField(default=timezone.now)
    reviewed_at = models.DateTimeField(null=True, blank=True)
    rejection_reason = models.TextField(blank=True)

    class Meta:
        ordering = ["-applied_at"]
        unique_together = ["candidate", "opportunity"]
        indexes = [models.Index(fields=["opportunity", "status"], name="application_status_idx")]

    def __str__(self):
        return f"{self.candidate} -> {self.opportunity.title}"


class ApplicationStatusChange(models.Model):
    """History of every status an application has passed through."""

    application = models.ForeignKey(Application, on_delete=models.CASCADE, related_name="status_changes")
    old_status = models.CharField(max_length=20, choices=Application.Status.choices)
    new_status = models.CharField(max_length=20, choices=Application.Status.choices)
    changed_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name="application_status_changes")
    changed_at = models.DateTimeField(default=timezone.now)
    notes = models.TextField(blank=True)

    class Meta:
        ordering = ["-changed_at"]

    def __str__(self):
        return f"{self.application}: {self.old_status} -> {self.new_status}"


class SavedOpportunity(models.Model):
    candidate = models.ForeignKey(CandidateProfile, on_delete=models.CASCADE, related_name="saved_opportunities")
    opportunity = models.ForeignKey(Opportunity, on_delete=models.CASCADE, related_name="saved_by")
    saved_at = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ["-saved_at"]
        unique_together = ["candidate", "opportunity"]
        verbose_name_plural = "saved opportunities"

    def __str__(self):
        return f"{self.candidate} saved {self.opportunity.title}"
