import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("profiles", "0001_initial"),
        ("opportunities", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="SavedOpportunity",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("saved_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("candidate", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="saved_opportunities", to="profiles.candidateprofile")),
                ("opportunity", models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name="saved_by", to="opportunities.opportunity")),
            ],
            options={
                "verbose_name_plural": "saved opportunities",
                "ordering": ["-saved_at"],
                "unique_together": {("candidate", "opportunity")},
            },
        ),
    ]
