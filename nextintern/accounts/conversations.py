"""
Conversation rules for direct messages.

A conversation between two users is every Message whose {sender, receiver}
is that unordered pair. Industries (and admins/institutes) may start one
freely; candidates may only reply inside a conversation that already exists.
"""
from __future__ import annotations

from django.db.models import Q

from nextintern.errors import Decision, ErrorKind

from .models import Message, User

PREVIEW_LENGTH = 100
PREVIEW_SUFFIX = "..."


def conversation_filter(user_a_id, user_b_id) -> Q:
    return Q(sender_id=user_a_id, receiver_id=user_b_id) | Q(sender_id=user_b_id, receiver_id=user_a_id)


def conversation_exists(user_a_id, user_b_id) -> bool:
    return Message.objects.filter(conversation_filter(user_a_id, user_b_id)).exists()


def may_send_message(sender_role: str, thread_exists: bool) -> Decision:
    if sender_role != User.Role.CANDIDATE:
        return Decision.allow()
    if thread_exists:
        return Decision.allow()
    return Decision.deny(
        ErrorKind.CONVERSATION_NOT_ESTABLISHED,
        "No existing conversation. Candidates can only reply to companies that contacted them.",
    )


def sender_display_name(user) -> str:
    if user.role == User.Role.INDUSTRY:
        profile = getattr(user, "industry_profile", None)
        return (profile.company_name if profile else "") or "Company"
    if user.role == User.Role.CANDIDATE:
        profile = getattr(user, "candidate_profile", None)
        if profile is None:
            return "Candidate"
        full = f"{profile.first_name or ''} {profile.last_name or ''}".strip()
        return full or "Candidate"
    if user.role == User.Role.INSTITUTE:
        profile = getattr(user, "institute_profile", None)
        return (profile.institute_name if profile else "") or "Institute"
    return user.email or "User"


def notification_preview(content: str) -> str:
    if len(content) <= PREVIEW_LENGTH:
        return content
    return content[:PREVIEW_LENGTH] + PREVIEW_SUFFIX


def thread_display_name(sender, viewer) -> str:
    """
    Name shown next to a message in a thread.

    Candidates are named only to themselves and to premium viewers; everyone
    else sees their anonymous handle.
    """
    if sender.role != User.Role.CANDIDATE:
        return sender_display_name(sender)
    if sender.pk == viewer.pk or viewer.has_premium:
        return sender_display_name(sender)
    profile = getattr(sender, "candidate_profile", None)
    anonymous_id = profile.anonymous_id if profile else ""
    return f"Candidate #{anonymous_id[-8:]}"
