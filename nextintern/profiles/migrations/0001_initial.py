import django.db.models.deletion
import django.utils.timezone
import profiles.models
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="CandidateProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("first_name", models.CharField(max_length=80)),
                ("last_name", models.CharField(max_length=80)),
                ("headline", models.CharField(blank=True, max_length=120)),
                ("location", models.CharField(blank=True, max_length=120)),
                ("anonymous_id", models.CharField(default=profiles.models.generate_anonymous_id, editable=False, max_length=32, unique=True)),
                ("show_full_name", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="candidate_profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="IndustryProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("company_name", models.CharField(max_length=200)),
                ("industry", models.CharField(blank=True, help_text="Sector, e.g. Technology", max_length=120)),
                ("description", models.TextField(blank=True)),
                ("website", models.URLField(blank=True)),
                ("city", models.CharField(blank=True, max_length=120)),
                ("state", models.CharField(blank=True, max_length=120)),
                ("anonymous_id", models.CharField(default=profiles.models.generate_anonymous_id, editable=False, max_length=32, unique=True)),
                ("show_company_name", models.BooleanField(default=False, help_text="Show the real company name to non-premium viewers.")),
                ("is_verified", models.BooleanField(default=False)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="industry_profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="InstituteProfile",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("institute_name", models.CharField(max_length=200)),
                ("institute_type", models.CharField(blank=True, max_length=80)),
                ("affiliated_university", models.CharField(blank=True, max_length=200)),
                ("is_verified", models.BooleanField(default=False)),
                ("verified_at", models.DateTimeField(blank=True, null=True)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("user", models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name="institute_profile", to=settings.AUTH_USER_MODEL)),
            ],
        ),
        migrations.CreateModel(
            name="CandidateSkill",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=60)),
                ("level", models.PositiveSmallIntegerField(default=0, help_text="Self-rated 0-10")),
                ("proficiency", models.CharField(choices=[("BEGINNER", "Beginner"), ("INTERMEDIATE", "Intermediate"), ("ADVANCED", "Advanced"), ("EXPERT", "Expert")], default="BEGINNER", max_length=20)),
                ("years_of_experience", models.PositiveSmallIntegerField(default=0)),
                ("candidate", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="skills", to="profiles.candidateprofile")),
            ],
            options={
                "ordering": ["-level", "name"],
            },
        ),
        migrations.CreateModel(
            name="InstituteStudent",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("is_active", models.BooleanField(default=True)),
                ("enrolled_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("candidate", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="institutes", to="profiles.candidateprofile")),
                ("institute", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="students", to="profiles.instituteprofile")),
            ],
            options={
                "ordering": ["-enrolled_at"],
                "unique_together": {("institute", "candidate")},
            },
        ),
    ]
