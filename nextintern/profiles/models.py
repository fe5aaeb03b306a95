import uuid

from django.conf import settings
from django.db import models
from django.utils import timezone

User = settings.AUTH_USER_MODEL


def generate_anonymous_id():
    return uuid.uuid4().hex[:12].upper()


class IndustryProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="industry_profile")
    company_name = models.CharField(max_length=200)
    industry = models.CharField(max_length=120, blank=True, help_text="Sector, e.g. Technology")
    description = models.TextField(blank=True)
    website = models.URLField(blank=True)
    city = models.CharField(max_length=120, blank=True)
    state = models.CharField(max_length=120, blank=True)
    anonymous_id = models.CharField(max_length=32, unique=True, default=generate_anonymous_id, editable=False)
    show_company_name = models.BooleanField(
        default=False,
        help_text="Show the real company name to non-premium viewers.",
    )
    is_verified = models.BooleanField(default=False)
    verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.company_name


class CandidateProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="candidate_profile")
    first_name = models.CharField(max_length=80)
    last_name = models.CharField(max_length=80)
    headline = models.CharField(max_length=120, blank=True)
    location = models.CharField(max_length=120, blank=True)
    anonymous_id = models.CharField(max_length=32, unique=True, default=generate_anonymous_id, editable=False)
    show_full_name = models.BooleanField(default=False)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.first_name} {self.last_name}".strip() or self.user.email


class CandidateSkill(models.Model):
    class Proficiency(models.TextChoices):
        BEGINNER = "BEGINNER", "Beginner"
        INTERMEDIATE = "INTERMEDIATE", "Intermediate"
        ADVANCED = "ADVANCED", "Advanced"
        EXPERT = "EXPERT", "Expert"

    candidate = models.ForeignKey(CandidateProfile, on_delete=models.CASCADE, related_name="skills")
    name = models.CharField(max_length=60)
    level = models.PositiveSmallIntegerField(default=0, help_text="Self-rated 0-10")
    proficiency = models.CharField(max_length=20, choices=Proficiency.choices, default=Proficiency.BEGINNER)
    years_of_experience = models.PositiveSmallIntegerField(default=0)

    class Meta:
        ordering = ["-level", "name"]

    @classmethod
    def proficiency_for_level(cls, level):
        if level >= 9:
            return cls.Proficiency.EXPERT
        if level >= 7:
            return cls.Proficiency.ADVANCED
        if level >= 4:
            return cls.Proficiency.INTERMEDIATE
        return cls.Proficiency.BEGINNER

    def save(self, *args, **kwargs):
        self.proficiency = self.proficiency_for_level(self.level)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.name} ({self.get_proficiency_display()})"


class InstituteProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name="institute_profile")
    institute_name = models.CharField(max_length=200)
    institute_type = models.CharField(max_length=80, blank=True)
    affiliated_university = models.CharField(max_length=200, blank=True)
    is_verified = models.BooleanField(default=False)
    verified_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(default=timezone.now)

    def __str__(self):
        return self.institute_name


class InstituteStudent(models.Model):
    institute = models.ForeignKey(InstituteProfile, on_delete=models.CASCADE, related_name="students")
    candidate = models.ForeignKey(CandidateProfile, on_delete=models.CASCADE, related_name="institutes")
    is_active = models.BooleanField(default=True)
    enrolled_at = models.DateTimeField(default=timezone.now)

    class Meta:
        unique_together = ["institute", "candidate"]
        ordering = ["-enrolled_at"]

    def __str__(self):
        return f"{self.candidate} @ {self.institute}"
