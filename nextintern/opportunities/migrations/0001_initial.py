import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ("profiles", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Category",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=80, unique=True)),
                ("slug", models.SlugField(blank=True, max_length=90, unique=True)),
            ],
            options={
                "verbose_name_plural": "categories",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Location",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("city", models.CharField(max_length=120)),
                ("state", models.CharField(blank=True, max_length=120)),
                ("country", models.CharField(default="India", max_length=80)),
            ],
            options={
                "ordering": ["city"],
                "unique_together": {("city", "state", "country")},
            },
        ),
        migrations.CreateModel(
            name="Opportunity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=100)),
                ("description", models.TextField()),
                ("type", models.CharField(choices=[("INTERNSHIP", "Internship"), ("PROJECT", "Project"), ("FREELANCING", "Freelancing")], default="INTERNSHIP", max_length=20)),
                ("work_type", models.CharField(choices=[("REMOTE", "Remote"), ("ONSITE", "On-site"), ("HYBRID", "Hybrid")], default="ONSITE", max_length=20)),
                ("stipend", models.PositiveIntegerField(blank=True, help_text="Monthly stipend or fixed fee", null=True)),
                ("currency", models.CharField(default="INR", max_length=3)),
                ("duration", models.CharField(blank=True, max_length=60)),
                ("application_deadline", models.DateTimeField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=False)),
                ("is_premium_only", models.BooleanField(default=False)),
                ("view_count", models.PositiveIntegerField(default=0)),
                ("created_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("category", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="opportunities", to="opportunities.category")),
                ("industry", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="opportunities", to="profiles.industryprofile")),
                ("location", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="opportunities", to="opportunities.location")),
            ],
            options={
                "verbose_name_plural": "opportunities",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["is_active", "created_at"], name="opportunity_listing_idx"),
                    models.Index(fields=["industry", "type", "created_at"], name="opportunity_quota_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Application",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("REVIEWED", "Reviewed"), ("SHORTLISTED", "Shortlisted"), ("SELECTED", "Selected"), ("REJECTED", "Rejected")], default="PENDING", max_length=20)),
                ("cover_letter", models.TextField(blank=True)),
                ("applied_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("reviewed_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True)),
                ("candidate", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="profiles.candidateprofile")),
                ("opportunity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="applications", to="opportunities.opportunity")),
            ],
            options={
                "ordering": ["-applied_at"],
                "indexes": [models.Index(fields=["opportunity", "status"], name="application_status_idx")],
                "unique_together": {("candidate", "opportunity")},
            },
        ),
        migrations.CreateModel(
            name="ApplicationStatusChange",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("old_status", models.CharField(choices=[("PENDING", "Pending"), ("REVIEWED", "Reviewed"), ("SHORTLISTED", "Shortlisted"), ("SELECTED", "Selected"), ("REJECTED", "Rejected")], max_length=20)),
                ("new_status", models.CharField(choices=[("PENDING", "Pending"), ("REVIEWED", "Reviewed"), ("SHORTLISTED", "Shortlisted"), ("SELECTED", "Selected"), ("REJECTED", "Rejected")], max_length=20)),
                ("changed_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("notes", models.TextField(blank=True)),
                ("application", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="status_changes", to="opportunities.application")),
                ("changed_by", models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="application_status_changes", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-changed_at"],
            },
        ),
    ]
