import pytest
from django.core.management import call_command

from opportunities.models import Application, Opportunity
from profiles.models import CandidateProfile, IndustryProfile, InstituteStudent


@pytest.mark.django_db
def test_seed_marketplace_is_idempotent():
    call_command("seed_marketplace")
    call_command("seed_marketplace")

    assert IndustryProfile.objects.count() == 2
    assert CandidateProfile.objects.count() == 3
    assert InstituteStudent.objects.count() == 3
    assert Opportunity.objects.filter(is_active=True).count() == 3
    assert Opportunity.objects.get(type=Opportunity.Type.FREELANCING).is_premium_only
    assert Application.objects.get().status == Application.Status.SHORTLISTED
