"""
What a viewer is allowed to see of another party's identity.

Companies post anonymously unless they opt in; premium viewers always see
real company names. Candidates stay anonymous to industries unless the
industry is premium and the candidate opted in.
"""
from __future__ import annotations

from accounts.models import User

COMPANY_PREFIX = "Company #"
CANDIDATE_PREFIX = "Candidate #"


def disclosed_company_name(company_name, anonymous_id, show_company_name, viewer_is_premium) -> str:
    if show_company_name or viewer_is_premium:
        return company_name
    # Shorter ids are used whole
    return f"{COMPANY_PREFIX}{(anonymous_id or '')[-3:]}"


def disclosed_candidate_name(first_name, last_name, anonymous_id, show_full_name, viewer_is_premium) -> str:
    if show_full_name and viewer_is_premium:
        full = f"{first_name or ''} {last_name or ''}".strip()
        if full:
            return full
    return f"{CANDIDATE_PREFIX}{(anonymous_id or '')[-8:]}"


def viewer_has_premium(user) -> bool:
    return bool(user is not None and user.is_authenticated and user.has_premium)


def project_industry(profile, viewer) -> dict:
    """Public view of an industry profile for ``viewer``."""
    return {
        "id": profile.pk,
        "company_name": disclosed_company_name(
            profile.company_name,
            profile.anonymous_id,
            profile.show_company_name,
            viewer_has_premium(viewer),
        ),
        "industry": profile.industry,
        "is_verified": profile.is_verified,
    }


def project_candidate(profile, viewer) -> dict:
    """Candidate identity as shown to an industry or institute ``viewer``."""
    return {
        "id": profile.pk,
        "name": disclosed_candidate_name(
            profile.first_name,
            profile.last_name,
            profile.anonymous_id,
            profile.show_full_name,
            viewer_has_premium(viewer),
        ),
        "headline": profile.headline,
    }


# ---------- per-role projections of a user's own profile ----------

def _industry_fields(profile):
    return {
        "id": profile.pk,
        "company_name": profile.company_name,
        "industry": profile.industry,
        "anonymous_id": profile.anonymous_id,
        "show_company_name": profile.show_company_name,
        "is_verified": profile.is_verified,
    }


def _candidate_fields(profile):
    return {
        "id": profile.pk,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "anonymous_id": profile.anonymous_id,
        "show_full_name": profile.show_full_name,
    }


def _institute_fields(profile):
    return {
        "id": profile.pk,
        "institute_name": profile.institute_name,
        "institute_type": profile.institute_type,
        "is_verified": profile.is_verified,
    }


PROFILE_PROJECTIONS = {
    User.Role.INDUSTRY: ("industry", "industry_profile", _industry_fields),
    User.Role.CANDIDATE: ("candidate", "candidate_profile", _candidate_fields),
    User.Role.INSTITUTE: ("institute", "institute_profile", _institute_fields),
}


def project_account(user) -> dict:
    """Account summary with only the profile block matching the user's role."""
    data = {
        "id": user.pk,
        "email": user.email,
        "role": user.role,
        "is_premium": user.has_premium,
        "premium_expires_at": user.premium_expires_at.isoformat() if user.premium_expires_at else None,
        "is_verified": user.is_verified,
        "is_active": user.is_active,
        "date_joined": user.date_joined.isoformat(),
    }
    projection = PROFILE_PROJECTIONS.get(user.role)
    if projection is not None:
        key, attr, fields = projection
        profile = getattr(user, attr, None)
        data[key] = fields(profile) if profile is not None else None
    return data
