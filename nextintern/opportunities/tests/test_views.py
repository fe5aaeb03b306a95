from datetime import timedelta

import pytest
from django.urls import reverse
from django.utils import timezone

from accounts.models import Notification
from factories import (
    ApplicationFactory,
    CategoryFactory,
    IndustryFactory,
    InstituteFactory,
    OpportunityFactory,
    SavedOpportunityFactory,
)
from opportunities.models import Application, ApplicationStatusChange, Opportunity, SavedOpportunity


def listed_ids(client, **params):
    resp = client.get(reverse("opportunities:list"), params)
    assert resp.status_code == 200
    return {o["id"] for o in resp.json()["opportunities"]}


@pytest.mark.django_db
class TestListing:
    def test_pending_and_premium_only_hidden_from_public(self, client):
        live = OpportunityFactory()
        OpportunityFactory(is_active=False)
        OpportunityFactory(type=Opportunity.Type.FREELANCING)
        assert listed_ids(client) == {live.pk}

    def test_premium_viewer_sees_freelancing(self, login, premium_industry):
        freelance = OpportunityFactory(type=Opportunity.Type.FREELANCING)
        client = login(premium_industry.user)
        assert freelance.pk in listed_ids(client)

    def test_institutes_never_see_freelancing(self, login):
        institute = InstituteFactory()
        institute.user.is_premium = True
        institute.user.save()
        OpportunityFactory(type=Opportunity.Type.FREELANCING)
        internship = OpportunityFactory()
        client = login(institute.user)
        assert listed_ids(client) == {internship.pk}

    def test_company_name_anonymised(self, client):
        OpportunityFactory(industry=IndustryFactory(company_name="Globex", anonymous_id="ZZZZZZ999"))
        industry = client.get(reverse("opportunities:list")).json()["opportunities"][0]["industry"]
        assert industry["company_name"] == "Company #999"

    def test_company_name_shown_when_opted_in(self, client):
        OpportunityFactory(industry=IndustryFactory(company_name="Globex", show_company_name=True))
        industry = client.get(reverse("opportunities:list")).json()["opportunities"][0]["industry"]
        assert industry["company_name"] == "Globex"

    def test_filters(self, client):
        category = CategoryFactory(name="Data Science")
        match = OpportunityFactory(category=category, stipend=20000, title="Machine Learning Intern")
        OpportunityFactory(category=category, stipend=5000)
        OpportunityFactory(stipend=30000)
        assert listed_ids(client, category="data-science", stipend_min=10000) == {match.pk}
        assert listed_ids(client, q="machine learning") == {match.pk}

    def test_bad_page_is_400(self, client):
        assert client.get(reverse("opportunities:list"), {"page": "abc"}).status_code == 400


@pytest.mark.django_db
class TestDetail:
    def test_view_count_incremented_for_visitors(self, client):
        opportunity = OpportunityFactory()
        client.get(reverse("opportunities:detail", args=[opportunity.pk]))
        opportunity.refresh_from_db()
        assert opportunity.view_count == 1

    def test_pending_hidden_from_public_but_visible_to_owner(self, client, login):
        opportunity = OpportunityFactory(is_active=False)
        url = reverse("opportunities:detail", args=[opportunity.pk])
        assert client.get(url).status_code == 404
        owner_client = login(opportunity.industry.user)
        data = owner_client.get(url).json()["opportunity"]
        assert data["status"] == "PENDING"
        assert data["application_count"] == 0

    def test_premium_only_requires_premium(self, login, candidate):
        opportunity = OpportunityFactory(type=Opportunity.Type.FREELANCING)
        client = login(candidate.user)
        assert client.get(reverse("opportunities:detail", args=[opportunity.pk])).status_code == 403

    def test_owner_can_update(self, login):
        opportunity = OpportunityFactory()
        client = login(opportunity.industry.user)
        resp = client.put(
            reverse("opportunities:detail", args=[opportunity.pk]),
            {"stipend": 25000, "duration": "3 months"},
            content_type="application/json",
        )
        assert resp.status_code == 200
        opportunity.refresh_from_db()
        assert opportunity.stipend == 25000
        assert opportunity.duration == "3 months"

    def test_type_cannot_change(self, login):
        opportunity = OpportunityFactory()
        client = login(opportunity.industry.user)
        resp = client.put(
            reverse("opportunities:detail", args=[opportunity.pk]),
            {"type": Opportunity.Type.PROJECT},
            content_type="application/json",
        )
        assert resp.status_code == 400

    def test_other_industry_cannot_modify(self, login, industry):
        opportunity = OpportunityFactory()
        client = login(industry.user)
        url = reverse("opportunities:detail", args=[opportunity.pk])
        assert client.put(url, {"stipend": 1}, content_type="application/json").status_code == 403
        assert client.delete(url).status_code == 403
        assert Opportunity.objects.filter(pk=opportunity.pk).exists()

    def test_owner_can_delete(self, login):
        opportunity = OpportunityFactory()
        client = login(opportunity.industry.user)
        assert client.delete(reverse("opportunities:detail", args=[opportunity.pk])).status_code == 200
        assert not Opportunity.objects.exists()

    def test_anonymous_delete_is_401(self, client):
        opportunity = OpportunityFactory()
        assert client.delete(reverse("opportunities:detail", args=[opportunity.pk])).status_code == 401


@pytest.mark.django_db
class TestApply:
    def test_apply_notifies_owner_and_records_history(self, login, candidate):
        opportunity = OpportunityFactory()
        client = login(candidate.user)
        resp = client.post(
            reverse("opportunities:apply", args=[opportunity.pk]),
            {"cover_letter": "  I would love to join.  "},
            content_type="application/json",
        )
        assert resp.status_code == 201
        application = Application.objects.get()
        assert application.cover_letter == "I would love to join."
        assert application.status == Application.Status.PENDING
        assert ApplicationStatusChange.objects.filter(application=application).count() == 1

        notification = Notification.objects.get(user=opportunity.industry.user)
        assert notification.kind == Notification.Kind.APPLICATION_UPDATE
        assert "Candidate #" in notification.message

    def test_second_application_conflicts(self, login, candidate):
        opportunity = OpportunityFactory()
        ApplicationFactory(candidate=candidate, opportunity=opportunity)
        client = login(candidate.user)
        resp = client.post(reverse("opportunities:apply", args=[opportunity.pk]), {}, content_type="application/json")
        assert resp.status_code == 409

    def test_pending_opportunity_is_404(self, login, candidate):
        opportunity = OpportunityFactory(is_active=False)
        client = login(candidate.user)
        resp = client.post(reverse("opportunities:apply", args=[opportunity.pk]), {}, content_type="application/json")
        assert resp.status_code == 404

    def test_deadline_passed(self, login, candidate):
        opportunity = OpportunityFactory(application_deadline=timezone.now() - timedelta(days=1))
        client = login(candidate.user)
        resp = client.post(reverse("opportunities:apply", args=[opportunity.pk]), {}, content_type="application/json")
        assert resp.status_code == 400

    def test_freelancing_requires_premium(self, login, candidate):
        opportunity = OpportunityFactory(type=Opportunity.Type.FREELANCING)
        client = login(candidate.user)
        resp = client.post(reverse("opportunities:apply", args=[opportunity.pk]), {}, content_type="application/json")
        assert resp.status_code == 403

    def test_industries_cannot_apply(self, login, industry):
        opportunity = OpportunityFactory()
        client = login(industry.user)
        resp = client.post(reverse("opportunities:apply", args=[opportunity.pk]), {}, content_type="application/json")
        assert resp.status_code == 403

    def test_candidate_lists_own_applications(self, login, candidate):
        ApplicationFactory(candidate=candidate)
        ApplicationFactory()
        client = login(candidate.user)
        data = client.get(reverse("opportunities:candidate_applications")).json()["applications"]
        assert len(data) == 1
        assert data[0]["opportunity"]["industry"]["company_name"].startswith("Company #")


@pytest.mark.django_db
class TestApplicationStatus:
    def test_shortlisting_notifies_candidate(self, login):
        application = ApplicationFactory()
        client = login(application.opportunity.industry.user)
        resp = client.put(
            reverse("opportunities:application_status", args=[application.pk]),
            {"status": "SHORTLISTED"},
            content_type="application/json",
        )
        assert resp.status_code == 200
        application.refresh_from_db()
        assert application.status == Application.Status.SHORTLISTED
        assert application.reviewed_at is not None

        notification = Notification.objects.get(user=application.candidate.user)
        assert "shortlisted" in notification.message
        change = application.status_changes.first()
        assert (change.old_status, change.new_status) == ("PENDING", "SHORTLISTED")

    def test_rejection_reason_kept(self, login):
        application = ApplicationFactory()
        client = login(application.opportunity.industry.user)
        client.put(
            reverse("opportunities:application_status", args=[application.pk]),
            {"status": "REJECTED", "rejection_reason": "Position filled"},
            content_type="application/json",
        )
        application.refresh_from_db()
        assert application.rejection_reason == "Position filled"
        assert "Position filled" in Notification.objects.get(user=application.candidate.user).message

    def test_cannot_reset_to_pending(self, login):
        application = ApplicationFactory()
        client = login(application.opportunity.industry.user)
        resp = client.put(
            reverse("opportunities:application_status", args=[application.pk]),
            {"status": "PENDING"},
            content_type="application/json",
        )
        assert resp.status_code == 400

    def test_other_industry_forbidden(self, login, industry):
        application = ApplicationFactory()
        client = login(industry.user)
        resp = client.put(
            reverse("opportunities:application_status", args=[application.pk]),
            {"status": "REVIEWED"},
            content_type="application/json",
        )
        assert resp.status_code == 403
        assert not Notification.objects.exists()

    def test_industry_application_list_anonymises_candidates(self, login):
        application = ApplicationFactory()
        ApplicationFactory(opportunity=application.opportunity, status=Application.Status.SHORTLISTED)
        industry = application.opportunity.industry
        client = login(industry.user)
        data = client.get(reverse("opportunities:industry_applications", args=[industry.pk])).json()
        assert data["counts"]["PENDING"] == 1
        assert data["counts"]["SHORTLISTED"] == 1
        assert all(a["candidate"]["name"].startswith("Candidate #") for a in data["applications"])


@pytest.mark.django_db
class TestIndustryApplicationFilters:
    url_name = "opportunities:industry_applications"

    def test_filter_by_opportunity_and_status(self, login):
        first = ApplicationFactory()
        industry = first.opportunity.industry
        other = ApplicationFactory(opportunity=OpportunityFactory(industry=industry), status=Application.Status.REVIEWED)
        client = login(industry.user)
        url = reverse(self.url_name, args=[industry.pk])

        by_opportunity = client.get(url, {"opportunity": first.opportunity.pk}).json()["applications"]
        assert [a["id"] for a in by_opportunity] == [first.pk]
        by_status = client.get(url, {"status": "REVIEWED"}).json()["applications"]
        assert [a["id"] for a in by_status] == [other.pk]

    @pytest.mark.parametrize("params", [{"opportunity": "abc"}, {"opportunity": "0"}, {"status": "LOST"}])
    def test_malformed_filters_are_400(self, login, industry, params):
        resp = login(industry.user).get(reverse(self.url_name, args=[industry.pk]), params)
        assert resp.status_code == 400
        body = resp.json()
        assert body["code"] == "validation_failed"
        assert set(body["details"]) == set(params)

    def test_candidate_status_filter_validated(self, login, candidate):
        resp = login(candidate.user).get(reverse("opportunities:candidate_applications"), {"status": "LOST"})
        assert resp.status_code == 400


@pytest.mark.django_db
class TestIndustryOpportunities:
    url_name = "opportunities:industry_opportunities"

    def test_owner_sees_every_state_with_counts(self, login, industry):
        live = OpportunityFactory(industry=industry)
        pending = OpportunityFactory(industry=industry, is_active=False)
        ApplicationFactory(opportunity=live)
        ApplicationFactory(opportunity=live)
        OpportunityFactory()

        resp = login(industry.user).get(reverse(self.url_name, args=[industry.pk]))
        assert resp.status_code == 200
        data = resp.json()
        assert data["count"] == 2
        rows = {o["id"]: o for o in data["opportunities"]}
        assert rows[live.pk]["status"] == "ACTIVE"
        assert rows[live.pk]["application_count"] == 2
        assert rows[pending.pk]["status"] == "PENDING"
        assert rows[pending.pk]["application_count"] == 0

    def test_other_industry_forbidden(self, login, industry):
        other = IndustryFactory()
        OpportunityFactory(industry=other, is_active=False)
        resp = login(industry.user).get(reverse(self.url_name, args=[other.pk]))
        assert resp.status_code == 403

    def test_admin_can_view(self, login, industry, platform_admin):
        OpportunityFactory(industry=industry, is_active=False)
        resp = login(platform_admin).get(reverse(self.url_name, args=[industry.pk]))
        assert resp.status_code == 200
        assert resp.json()["count"] == 1

    def test_candidate_forbidden(self, login, industry, candidate):
        assert login(candidate.user).get(reverse(self.url_name, args=[industry.pk])).status_code == 403


@pytest.mark.django_db
class TestSavedOpportunities:
    url_name = "opportunities:saved_opportunities"

    def test_save_list_and_remove(self, login, candidate):
        opportunity = OpportunityFactory()
        client = login(candidate.user)
        url = reverse(self.url_name, args=[candidate.pk])

        resp = client.post(url, {"opportunity_id": opportunity.pk}, content_type="application/json")
        assert resp.status_code == 201
        saved = client.get(url).json()["saved"]
        assert [s["opportunity"]["id"] for s in saved] == [opportunity.pk]

        resp = client.delete(f"{url}?opportunity_id={opportunity.pk}")
        assert resp.status_code == 200
        assert not SavedOpportunity.objects.exists()

    def test_saving_twice_is_conflict(self, login, candidate):
        saved = SavedOpportunityFactory(candidate=candidate)
        resp = login(candidate.user).post(
            reverse(self.url_name, args=[candidate.pk]),
            {"opportunity_id": saved.opportunity.pk},
            content_type="application/json",
        )
        assert resp.status_code == 409

    def test_hidden_listings_cannot_be_saved(self, login, candidate):
        client = login(candidate.user)
        url = reverse(self.url_name, args=[candidate.pk])
        pending = OpportunityFactory(is_active=False)
        premium_only = OpportunityFactory(type=Opportunity.Type.FREELANCING)
        for opportunity in (pending, premium_only):
            resp = client.post(url, {"opportunity_id": opportunity.pk}, content_type="application/json")
            assert resp.status_code == 404
        assert not SavedOpportunity.objects.exists()

    def test_other_candidates_list_is_forbidden(self, login, candidate):
        other = SavedOpportunityFactory()
        resp = login(candidate.user).get(reverse(self.url_name, args=[other.candidate.pk]))
        assert resp.status_code == 403

    def test_industry_cannot_save(self, login, industry, candidate):
        resp = login(industry.user).get(reverse(self.url_name, args=[candidate.pk]))
        assert resp.status_code == 403

    def test_delete_needs_valid_id(self, login, candidate):
        client = login(candidate.user)
        url = reverse(self.url_name, args=[candidate.pk])
        assert client.delete(url).status_code == 400
        assert client.delete(f"{url}?opportunity_id=abc").status_code == 400
        assert client.delete(f"{url}?opportunity_id=999").status_code == 404


@pytest.mark.django_db
def test_reference_data_counts_active_listings(client):
    category = CategoryFactory(name="Design")
    OpportunityFactory(category=category)
    OpportunityFactory(category=category, is_active=False)
    data = client.get(reverse("opportunities:categories")).json()["categories"]
    assert data == [{"id": category.pk, "name": "Design", "slug": "design", "opportunities": 1}]
