"""
Monthly posting allowances for industries.

Counts are always recomputed from Opportunity rows created inside the
current calendar month; nothing is reserved or decremented here. The create
view re-runs ``remaining_quota`` right before saving, so two concurrent
requests at the boundary can both pass.
"""
from __future__ import annotations

import calendar
from datetime import datetime, time

from django.db.models import Count
from django.utils import timezone

from moderation.models import PlatformSettings
from nextintern.errors import Decision, ErrorKind

from .models import Opportunity

UNLIMITED = 999
DEFAULT_ALLOWANCE = 3

# Types a non-premium industry may post, everything else gets nothing
FREE_TYPES = (Opportunity.Type.INTERNSHIP, Opportunity.Type.PROJECT)


def month_window(now=None):
    """First and last instant (23:59:59) of ``now``'s month in the server time zone."""
    now = timezone.localtime(now or timezone.now())
    last_day = calendar.monthrange(now.year, now.month)[1]
    tz = timezone.get_current_timezone()
    start = timezone.make_aware(datetime(now.year, now.month, 1), tz)
    end = timezone.make_aware(datetime.combine(now.date().replace(day=last_day), time(23, 59, 59)), tz)
    return start, end


def remaining_quota(opportunity_type, is_premium, count_this_month, allowance=DEFAULT_ALLOWANCE) -> int:
    if is_premium:
        return UNLIMITED
    if opportunity_type not in FREE_TYPES:
        return 0
    return max(0, allowance - count_this_month)


def count_posts_this_month(industry, now=None) -> dict:
    """Opportunities created by ``industry`` this month, keyed by type."""
    start, end = month_window(now)
    rows = (
        Opportunity.objects.filter(industry=industry, created_at__gte=start, created_at__lte=end)
        .values("type")
        .annotate(n=Count("id"))
    )
    counts = {t: 0 for t in Opportunity.Type.values}
    for row in rows:
        counts[row["type"]] = row["n"]
    return counts


def posting_limits(is_premium, counts, allowance=DEFAULT_ALLOWANCE) -> dict:
    limits = {}
    for opportunity_type in Opportunity.Type.values:
        limits[opportunity_type] = {
            "used": counts.get(opportunity_type, 0),
            "remaining": remaining_quota(opportunity_type, is_premium, counts.get(opportunity_type, 0), allowance),
        }
    return limits


def free_allowance() -> int:
    return int(PlatformSettings.get_value("pricing", "free_industry_posts"))


def may_create_opportunity(opportunity_type, is_premium, count_this_month, allowance=DEFAULT_ALLOWANCE) -> Decision:
    if opportunity_type == Opportunity.Type.FREELANCING and not is_premium:
        return Decision.deny(ErrorKind.FORBIDDEN, "Freelancing opportunities are only available for premium users")
    if remaining_quota(opportunity_type, is_premium, count_this_month, allowance) <= 0:
        label = Opportunity.Type(opportunity_type).label.lower()
        return Decision.deny(
            ErrorKind.QUOTA_EXCEEDED,
            f"Monthly limit reached for {label} posts. Upgrade to premium for unlimited postings.",
        )
    return Decision.allow()
