from __future__ import annotations

from typing import Iterable

from django.utils import timezone

from .models import Notification


def notify(user, kind, title, message, action_url="") -> Notification:
    return Notification.objects.create(
        user=user,
        kind=kind,
        title=title,
        message=message,
        action_url=action_url,
    )


def notify_many(users: Iterable, kind, title, message, action_url="") -> int:
    rows = [
        Notification(user=u, kind=kind, title=title, message=message, action_url=action_url)
        for u in users
    ]
    Notification.objects.bulk_create(rows)
    return len(rows)


def mark_read(queryset) -> int:
    return queryset.filter(is_read=False).update(is_read=True, read_at=timezone.now())
