from datetime import timedelta

import pytest
from django.utils import timezone

from factories import AdminUserFactory, CandidateFactory, IndustryFactory, InstituteFactory


@pytest.fixture(autouse=True)
def _locmem_email(settings):
    settings.EMAIL_BACKEND = "django.core.mail.backends.locmem.EmailBackend"


@pytest.fixture
def candidate(db):
    return CandidateFactory()


@pytest.fixture
def industry(db):
    return IndustryFactory()


@pytest.fixture
def premium_industry(db):
    profile = IndustryFactory()
    profile.user.is_premium = True
    profile.user.premium_expires_at = timezone.now() + timedelta(days=30)
    profile.user.save()
    return profile


@pytest.fixture
def institute(db):
    return InstituteFactory()


@pytest.fixture
def platform_admin(db):
    return AdminUserFactory()


@pytest.fixture
def login(client):
    """Log ``client`` in as the given user and return it."""

    def _login(user):
        client.force_login(user)
        return client

    return _login
