import pytest
from django.contrib.auth.tokens import default_token_generator
from django.core import mail
from django.urls import reverse
from django.utils.encoding import force_bytes
from django.utils.http import urlsafe_base64_encode

from accounts.models import AuditLog, User
from factories import PASSWORD, UserFactory
from moderation.models import PlatformSettings
from profiles.models import CandidateProfile, IndustryProfile, InstituteProfile


def post_json(client, name, payload):
    return client.post(reverse(name), payload, content_type="application/json")


@pytest.mark.django_db
class TestRegister:
    def test_candidate_registration_creates_profile(self, client):
        resp = post_json(client, "accounts:register", {
            "email": "Asha@Example.com",
            "password": "secret123",
            "role": "CANDIDATE",
            "first_name": "Asha",
            "last_name": "Rao",
        })
        assert resp.status_code == 201
        body = resp.json()
        assert body["user"]["email"] == "asha@example.com"
        assert body["user"]["candidate"]["first_name"] == "Asha"
        assert "industry" not in body["user"]
        assert CandidateProfile.objects.filter(user__email="asha@example.com").exists()

    def test_industry_registration_creates_unverified_profile(self, client):
        resp = post_json(client, "accounts:register", {
            "email": "hr@globex.com",
            "password": "secret123",
            "role": "INDUSTRY",
            "company_name": "Globex",
            "industry": "Technology",
        })
        assert resp.status_code == 201
        profile = IndustryProfile.objects.get(user__email="hr@globex.com")
        assert profile.company_name == "Globex"
        assert not profile.is_verified
        assert profile.anonymous_id

    def test_institute_registration(self, client):
        resp = post_json(client, "accounts:register", {
            "email": "tpo@college.edu",
            "password": "secret123",
            "role": "INSTITUTE",
            "institute_name": "City College",
            "institute_type": "Engineering",
        })
        assert resp.status_code == 201
        assert InstituteProfile.objects.filter(institute_name="City College").exists()

    def test_admin_cannot_self_register(self, client):
        resp = post_json(client, "accounts:register", {
            "email": "root@example.com",
            "password": "secret123",
            "role": "ADMIN",
        })
        assert resp.status_code == 403
        assert not User.objects.filter(email="root@example.com").exists()

    def test_duplicate_email_is_conflict(self, client):
        UserFactory(email="taken@example.com", username="taken@example.com")
        resp = post_json(client, "accounts:register", {
            "email": "TAKEN@example.com",
            "password": "secret123",
            "role": "CANDIDATE",
            "first_name": "A",
            "last_name": "B",
        })
        assert resp.status_code == 409
        assert resp.json()["code"] == "conflict"

    def test_role_specific_fields_required(self, client):
        resp = post_json(client, "accounts:register", {
            "email": "hr@initech.com",
            "password": "secret123",
            "role": "INDUSTRY",
        })
        assert resp.status_code == 400
        assert "company_name" in resp.json()["details"]

    def test_short_password_rejected(self, client):
        resp = post_json(client, "accounts:register", {
            "email": "short@example.com",
            "password": "abc",
            "role": "CANDIDATE",
            "first_name": "A",
            "last_name": "B",
        })
        assert resp.status_code == 400
        assert "password" in resp.json()["details"]

    def test_minimum_length_follows_platform_settings(self, client):
        payload = {
            "email": "policy@example.com",
            "password": "secret123",
            "role": "CANDIDATE",
            "first_name": "A",
            "last_name": "B",
        }
        PlatformSettings.publish({"security": {"password_min_length": 10}})
        resp = post_json(client, "accounts:register", payload)
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_failed"
        assert "10 characters" in resp.json()["details"]["password"][0]

        PlatformSettings.publish({"security": {"password_min_length": 9}})
        assert post_json(client, "accounts:register", payload).status_code == 201

    def test_registration_closed_by_admin(self, client):
        PlatformSettings.publish({"platform": {"new_user_registration": False}})
        resp = post_json(client, "accounts:register", {
            "email": "late@example.com",
            "password": "secret123",
            "role": "CANDIDATE",
            "first_name": "A",
            "last_name": "B",
        })
        assert resp.status_code == 403
        assert not User.objects.filter(email="late@example.com").exists()


@pytest.mark.django_db
class TestLoginSession:
    def test_login_and_session(self, client, candidate):
        resp = post_json(client, "accounts:login", {"email": candidate.user.email, "password": PASSWORD})
        assert resp.status_code == 200

        session = client.get(reverse("accounts:session")).json()["user"]
        assert session["id"] == candidate.user.pk
        assert session["role"] == "CANDIDATE"
        assert session["is_premium"] is False

    def test_bad_password_is_401(self, client, candidate):
        resp = post_json(client, "accounts:login", {"email": candidate.user.email, "password": "wrong-one"})
        assert resp.status_code == 401

    def test_session_lifetime_follows_platform_settings(self, client, candidate):
        post_json(client, "accounts:login", {"email": candidate.user.email, "password": PASSWORD})
        assert client.session.get_expiry_age() == 60 * 60

        PlatformSettings.publish({"security": {"session_timeout": 15}})
        post_json(client, "accounts:login", {"email": candidate.user.email, "password": PASSWORD})
        assert client.session.get_expiry_age() == 15 * 60

    def test_anonymous_session_is_empty(self, client):
        assert client.get(reverse("accounts:session")).json() == {"user": None}

    def test_logout(self, login, candidate):
        client = login(candidate.user)
        client.post(reverse("accounts:logout"))
        assert client.get(reverse("accounts:session")).json() == {"user": None}


@pytest.mark.django_db
class TestPasswordReset:
    def test_response_identical_for_known_and_unknown_email(self, client, candidate):
        known = post_json(client, "accounts:forgot_password", {"email": candidate.user.email})
        unknown = post_json(client, "accounts:forgot_password", {"email": "nobody@example.com"})

        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert len(mail.outbox) == 1
        assert mail.outbox[0].to == [candidate.user.email]

    def test_mail_failure_does_not_change_response(self, client, candidate, monkeypatch):
        def broken_send(*args, **kwargs):
            raise ConnectionError("smtp down")

        monkeypatch.setattr("accounts.views.send_mail", broken_send)
        resp = post_json(client, "accounts:forgot_password", {"email": candidate.user.email})
        assert resp.status_code == 200
        assert resp.json()["success"] is True

    def test_reset_with_valid_token(self, client, candidate):
        user = candidate.user
        resp = post_json(client, "accounts:reset_password", {
            "uid": urlsafe_base64_encode(force_bytes(user.pk)),
            "token": default_token_generator.make_token(user),
            "password": "brand-new-pass",
        })
        assert resp.status_code == 200
        user.refresh_from_db()
        assert user.check_password("brand-new-pass")

    def test_reset_enforces_minimum_length(self, client, candidate):
        user = candidate.user
        resp = post_json(client, "accounts:reset_password", {
            "uid": urlsafe_base64_encode(force_bytes(user.pk)),
            "token": default_token_generator.make_token(user),
            "password": "short",
        })
        assert resp.status_code == 400
        assert "password" in resp.json()["details"]
        user.refresh_from_db()
        assert user.check_password(PASSWORD)

    def test_reset_with_bad_token(self, client, candidate):
        resp = post_json(client, "accounts:reset_password", {
            "uid": urlsafe_base64_encode(force_bytes(candidate.user.pk)),
            "token": "not-a-token",
            "password": "brand-new-pass",
        })
        assert resp.status_code == 400


@pytest.mark.django_db
def test_role_cannot_change_after_creation(candidate):
    user = candidate.user
    user.role = User.Role.INDUSTRY
    with pytest.raises(ValueError):
        user.save()


@pytest.mark.django_db
class TestChangePassword:
    url_name = "accounts:change_password"

    def put(self, client, payload):
        return client.put(reverse(self.url_name), payload, content_type="application/json")

    def test_change_keeps_session_and_writes_audit(self, login, candidate):
        client = login(candidate.user)
        resp = self.put(client, {"current_password": PASSWORD, "password": "a-better-secret"})
        assert resp.status_code == 200

        candidate.user.refresh_from_db()
        assert candidate.user.check_password("a-better-secret")
        assert client.get(reverse("accounts:session")).json()["user"]["id"] == candidate.user.pk
        assert AuditLog.objects.filter(user=candidate.user, action="CHANGE_PASSWORD").exists()

    def test_wrong_current_password(self, login, candidate):
        client = login(candidate.user)
        resp = self.put(client, {"current_password": "not-it", "password": "a-better-secret"})
        assert resp.status_code == 400
        assert "current_password" in resp.json()["details"]
        candidate.user.refresh_from_db()
        assert candidate.user.check_password(PASSWORD)

    def test_new_password_too_short(self, login, candidate):
        client = login(candidate.user)
        resp = self.put(client, {"current_password": PASSWORD, "password": "short"})
        assert resp.status_code == 400
        assert "password" in resp.json()["details"]

    def test_account_without_password(self, login):
        user = UserFactory()
        user.set_unusable_password()
        user.save()
        resp = self.put(login(user), {"current_password": "", "password": "a-better-secret"})
        assert resp.status_code == 400
        assert resp.json()["code"] == "validation_failed"

    def test_requires_login(self, client):
        assert self.put(client, {"current_password": PASSWORD, "password": "a-better-secret"}).status_code == 401

    def test_audit_failure_does_not_undo_change(self, login, candidate, monkeypatch):
        def broken_create(*args, **kwargs):
            raise RuntimeError("audit store down")

        monkeypatch.setattr(AuditLog.objects, "create", broken_create)
        resp = self.put(login(candidate.user), {"current_password": PASSWORD, "password": "a-better-secret"})
        assert resp.status_code == 200
        candidate.user.refresh_from_db()
        assert candidate.user.check_password("a-better-secret")
