import pytest

from accounts.models import Notification, User
from factories import IndustryFactory, InstituteFactory, OpportunityFactory
from moderation.transitions import Action, moderate_opportunity, verify_profile
from opportunities.models import Opportunity


@pytest.mark.django_db
class TestModerateOpportunity:
    def test_approve_activates_and_notifies(self):
        opportunity = OpportunityFactory(is_active=False)
        moderate_opportunity(opportunity, Action.APPROVE)
        opportunity.refresh_from_db()
        assert opportunity.is_active
        assert opportunity.moderation_state == Opportunity.ModerationState.ACTIVE
        assert Notification.objects.filter(user=opportunity.industry.user, title="Opportunity approved").exists()

    @pytest.mark.parametrize("action", [Action.REJECT, Action.DEACTIVATE])
    def test_reject_and_deactivate_hide_listing(self, action):
        opportunity = OpportunityFactory(is_active=True)
        moderate_opportunity(opportunity, action, "Missing stipend details")
        opportunity.refresh_from_db()
        assert not opportunity.is_active
        notification = Notification.objects.get(user=opportunity.industry.user)
        assert "Missing stipend details" in notification.message

    def test_delete_removes_row(self):
        opportunity = OpportunityFactory()
        owner = opportunity.industry.user
        moderate_opportunity(opportunity, Action.DELETE)
        assert not Opportunity.objects.exists()
        assert Notification.objects.filter(user=owner, title="Opportunity removed").exists()

    def test_unknown_action(self):
        with pytest.raises(ValueError):
            moderate_opportunity(OpportunityFactory(), "archive")


@pytest.mark.django_db
class TestVerification:
    def test_approve_sets_timestamp(self):
        profile = IndustryFactory()
        verify_profile(profile, Action.APPROVE)
        profile.refresh_from_db()
        assert profile.is_verified
        assert profile.verified_at is not None
        assert User.objects.get(pk=profile.user_id).is_verified

    def test_reject_leaves_profile_untouched(self):
        profile = InstituteFactory()
        verify_profile(profile, Action.REJECT, "Documents unreadable")
        profile.refresh_from_db()
        assert not profile.is_verified
        assert profile.verified_at is None
        notification = Notification.objects.get(user=profile.user)
        assert "institute" in notification.message
        assert "Documents unreadable" in notification.message

    def test_reject_does_not_revoke_existing_verification(self):
        profile = IndustryFactory()
        verify_profile(profile, Action.APPROVE)
        verify_profile(profile, Action.REJECT)
        profile.refresh_from_db()
        assert profile.is_verified
