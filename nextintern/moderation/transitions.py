"""
Admin moderation of opportunities and verification of industries/institutes.

Opportunities move between PENDING (is_active=False) and ACTIVE; delete is
terminal. Verification is one-way: approve stamps is_verified/verified_at,
reject leaves the profile untouched and only tells the owner.
"""
import logging

from django.db import transaction
from django.utils import timezone

from accounts.models import Notification
from accounts.notifications import notify
from profiles.models import IndustryProfile

logger = logging.getLogger(__name__)


class Action:
    APPROVE = "approve"
    REJECT = "reject"
    DEACTIVATE = "deactivate"
    DELETE = "delete"

    OPPORTUNITY = (APPROVE, REJECT, DEACTIVATE, DELETE)
    VERIFICATION = (APPROVE, REJECT)


def _set_active(opportunity, active):
    opportunity.is_active = active
    opportunity.save(update_fields=["is_active", "updated_at"])
    return opportunity


@transaction.atomic
def approve_opportunity(opportunity):
    _set_active(opportunity, True)
    notify(
        opportunity.industry.user,
        Notification.Kind.SYSTEM_ALERT,
        "Opportunity approved",
        f'Your opportunity "{opportunity.title}" has been approved and is now live.',
        action_url=f"/opportunities/{opportunity.pk}",
    )
    return opportunity


@transaction.atomic
def reject_opportunity(opportunity, reason=""):
    _set_active(opportunity, False)
    message = f'Your opportunity "{opportunity.title}" was not approved.'
    if reason:
        message += f" Reason: {reason}"
    notify(opportunity.industry.user, Notification.Kind.SYSTEM_ALERT, "Opportunity rejected", message)
    return opportunity


@transaction.atomic
def deactivate_opportunity(opportunity, reason=""):
    _set_active(opportunity, False)
    message = f'Your opportunity "{opportunity.title}" has been deactivated.'
    if reason:
        message += f" Reason: {reason}"
    notify(opportunity.industry.user, Notification.Kind.SYSTEM_ALERT, "Opportunity deactivated", message)
    return opportunity


@transaction.atomic
def delete_opportunity(opportunity, reason=""):
    owner = opportunity.industry.user
    title = opportunity.title
    opportunity.delete()
    message = f'Your opportunity "{title}" has been removed by an administrator.'
    if reason:
        message += f" Reason: {reason}"
    notify(owner, Notification.Kind.SYSTEM_ALERT, "Opportunity removed", message)
    logger.info("Opportunity %r deleted by moderation", title)


OPPORTUNITY_TRANSITIONS = {
    Action.APPROVE: lambda opportunity, reason: approve_opportunity(opportunity),
    Action.REJECT: reject_opportunity,
    Action.DEACTIVATE: deactivate_opportunity,
    Action.DELETE: delete_opportunity,
}


def moderate_opportunity(opportunity, action, reason=""):
    try:
        transition = OPPORTUNITY_TRANSITIONS[action]
    except KeyError:
        raise ValueError(f"Unknown moderation action: {action}") from None
    return transition(opportunity, reason)


def _profile_label(profile):
    if isinstance(profile, IndustryProfile):
        return "company", profile.company_name
    return "institute", profile.institute_name


@transaction.atomic
def approve_verification(profile):
    profile.is_verified = True
    profile.verified_at = timezone.now()
    profile.save(update_fields=["is_verified", "verified_at"])
    kind, name = _profile_label(profile)
    notify(
        profile.user,
        Notification.Kind.SYSTEM_ALERT,
        "Verification approved",
        f"Your {kind} profile for {name} has been verified.",
    )
    return profile


def reject_verification(profile, reason=""):
    kind, name = _profile_label(profile)
    message = f"Your {kind} verification request for {name} was not approved."
    if reason:
        message += f" Reason: {reason}"
    notify(profile.user, Notification.Kind.SYSTEM_ALERT, "Verification rejected", message)
    return profile


def verify_profile(profile, action, reason=""):
    if action == Action.APPROVE:
        return approve_verification(profile)
    if action == Action.REJECT:
        return reject_verification(profile, reason)
    raise ValueError(f"Unknown verification action: {action}")
