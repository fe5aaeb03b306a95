import pytest
from django.urls import reverse

from accounts.conversations import (
    PREVIEW_LENGTH,
    may_send_message,
    notification_preview,
    sender_display_name,
    thread_display_name,
)
from accounts.models import AuditLog, Message, Notification, User
from factories import ApplicationFactory, CandidateFactory, IndustryFactory, MessageFactory, OpportunityFactory
from nextintern.errors import ErrorKind
from opportunities.models import Application


@pytest.mark.unit
class TestConversationPolicy:
    def test_non_candidates_may_always_send(self):
        for role in (User.Role.INDUSTRY, User.Role.INSTITUTE, User.Role.ADMIN):
            assert may_send_message(role, thread_exists=False).allowed

    def test_candidate_needs_existing_thread(self):
        decision = may_send_message(User.Role.CANDIDATE, thread_exists=False)
        assert not decision
        assert decision.error == ErrorKind.CONVERSATION_NOT_ESTABLISHED

    def test_candidate_may_reply_inside_thread(self):
        assert may_send_message(User.Role.CANDIDATE, thread_exists=True).allowed


@pytest.mark.unit
class TestNotificationPreview:
    def test_101_chars_truncated_with_ellipsis(self):
        body = "x" * 101
        assert notification_preview(body) == "x" * 100 + "..."

    def test_exactly_100_chars_copied_verbatim(self):
        body = "y" * PREVIEW_LENGTH
        assert notification_preview(body) == body

    def test_short_body_copied_verbatim(self):
        assert notification_preview("Hello there") == "Hello there"


@pytest.mark.django_db
class TestDisplayNames:
    def test_industry_uses_company_name(self):
        industry = IndustryFactory(company_name="Globex")
        assert sender_display_name(industry.user) == "Globex"

    def test_candidate_name_is_trimmed(self):
        candidate = CandidateFactory(first_name=" Asha", last_name="Rao ")
        assert sender_display_name(candidate.user) == "Asha Rao"

    def test_candidate_with_blank_name_falls_back(self):
        candidate = CandidateFactory(first_name="", last_name="")
        assert sender_display_name(candidate.user) == "Candidate"

    def test_thread_hides_candidate_from_non_premium_viewer(self):
        candidate = CandidateFactory(first_name="Asha", last_name="Rao", anonymous_id="ABCDEFGH1234")
        industry = IndustryFactory()
        assert thread_display_name(candidate.user, industry.user) == "Candidate #EFGH1234"
        assert thread_display_name(candidate.user, candidate.user) == "Asha Rao"

    def test_thread_shows_candidate_to_premium_viewer(self, premium_industry):
        candidate = CandidateFactory(first_name="Asha", last_name="Rao")
        assert thread_display_name(candidate.user, premium_industry.user) == "Asha Rao"


@pytest.mark.django_db
class TestSendMessage:
    url_name = "accounts:send_message"

    def test_candidate_cannot_start_conversation(self, login, candidate, industry):
        client = login(candidate.user)
        resp = client.post(reverse(self.url_name), {"receiver_id": industry.user.pk, "content": "Hi!"}, content_type="application/json")
        assert resp.status_code == 403
        assert resp.json()["code"] == ErrorKind.CONVERSATION_NOT_ESTABLISHED.value
        assert not Message.objects.exists()

    def test_candidate_can_reply_after_industry_message(self, client, candidate, industry):
        client.force_login(industry.user)
        resp = client.post(
            reverse(self.url_name),
            {"receiver_id": candidate.user.pk, "content": "We liked your profile."},
            content_type="application/json",
        )
        assert resp.status_code == 201

        client.force_login(candidate.user)
        resp = client.post(
            reverse(self.url_name),
            {"receiver_id": industry.user.pk, "content": "Thank you, happy to talk."},
            content_type="application/json",
        )
        assert resp.status_code == 201
        assert Message.objects.count() == 2

    def test_receiver_is_notified_with_truncated_preview(self, login, candidate, industry):
        client = login(industry.user)
        body = "a" * 101
        client.post(reverse(self.url_name), {"receiver_id": candidate.user.pk, "content": body}, content_type="application/json")

        notification = Notification.objects.get(user=candidate.user)
        assert notification.kind == Notification.Kind.MESSAGE_RECEIVED
        assert notification.message == "a" * 100 + "..."
        assert industry.company_name in notification.title

    def test_cannot_message_self(self, login, industry):
        client = login(industry.user)
        resp = client.post(reverse(self.url_name), {"receiver_id": industry.user.pk, "content": "me"}, content_type="application/json")
        assert resp.status_code == 400

    def test_anonymous_gets_401(self, client, industry):
        resp = client.post(reverse(self.url_name), {"receiver_id": industry.user.pk, "content": "x"}, content_type="application/json")
        assert resp.status_code == 401

    def test_malformed_json_is_400(self, login, industry):
        client = login(industry.user)
        resp = client.post(reverse(self.url_name), "{not json", content_type="application/json")
        assert resp.status_code == 400


@pytest.mark.django_db
class TestThread:
    def test_thread_marks_received_messages_read(self, login, candidate, industry):
        MessageFactory(sender=industry.user, receiver=candidate.user)
        MessageFactory(sender=industry.user, receiver=candidate.user)
        client = login(candidate.user)

        resp = client.get(reverse("accounts:thread", args=[industry.user.pk]))
        assert resp.status_code == 200
        assert len(resp.json()["messages"]) == 2
        assert not Message.objects.filter(receiver=candidate.user, is_read=False).exists()
        assert AuditLog.objects.filter(user=candidate.user, action="VIEW_MESSAGES").exists()

    def test_audit_failure_does_not_break_thread(self, login, candidate, industry, monkeypatch):
        MessageFactory(sender=industry.user, receiver=candidate.user)

        def boom(*args, **kwargs):
            raise RuntimeError("audit store down")

        monkeypatch.setattr(AuditLog.objects, "create", boom)
        client = login(candidate.user)
        resp = client.get(reverse("accounts:thread", args=[industry.user.pk]))
        assert resp.status_code == 200
        assert len(resp.json()["messages"]) == 1

    def test_conversations_lists_partners_with_unread_counts(self, login, candidate, industry):
        MessageFactory(sender=industry.user, receiver=candidate.user, content="first")
        MessageFactory(sender=industry.user, receiver=candidate.user, content="second")
        client = login(candidate.user)

        data = client.get(reverse("accounts:conversations")).json()["conversations"]
        assert len(data) == 1
        assert data[0]["user_id"] == industry.user.pk
        assert data[0]["unread_count"] == 2
        assert data[0]["name"] == industry.company_name


@pytest.mark.django_db
class TestInitiateConversation:
    url_name = "accounts:initiate_conversation"

    def test_requires_shortlisted_application(self, login):
        application = ApplicationFactory(status=Application.Status.PENDING)
        client = login(application.opportunity.industry.user)
        resp = client.post(
            reverse(self.url_name),
            {
                "candidate_id": application.candidate.pk,
                "opportunity_id": application.opportunity.pk,
                "content": "Can we talk?",
            },
            content_type="application/json",
        )
        assert resp.status_code == 403
        assert not Message.objects.exists()

    def test_shortlisted_candidate_can_be_contacted(self, login):
        application = ApplicationFactory(status=Application.Status.SHORTLISTED)
        industry_user = application.opportunity.industry.user
        client = login(industry_user)
        resp = client.post(
            reverse(self.url_name),
            {
                "candidate_id": application.candidate.pk,
                "opportunity_id": application.opportunity.pk,
                "content": "You have been shortlisted, are you free Monday?",
            },
            content_type="application/json",
        )
        assert resp.status_code == 201
        message = Message.objects.get()
        assert message.receiver == application.candidate.user
        assert message.subject == f"Regarding {application.opportunity.title}"
        assert AuditLog.objects.filter(action="INITIATE_CONVERSATION", target_user=application.candidate.user).exists()

    def test_other_industries_opportunity_is_404(self, login, industry):
        application = ApplicationFactory(status=Application.Status.SHORTLISTED)
        client = login(industry.user)
        resp = client.post(
            reverse(self.url_name),
            {"candidate_id": application.candidate.pk, "opportunity_id": application.opportunity.pk, "content": "hi"},
            content_type="application/json",
        )
        assert resp.status_code == 404

    def test_candidates_cannot_initiate(self, login, candidate):
        opportunity = OpportunityFactory()
        client = login(candidate.user)
        resp = client.post(
            reverse(self.url_name),
            {"candidate_id": candidate.pk, "opportunity_id": opportunity.pk, "content": "hi"},
            content_type="application/json",
        )
        assert resp.status_code == 403
