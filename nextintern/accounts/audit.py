import logging

from .models import AuditLog

logger = logging.getLogger(__name__)


def client_ip(request) -> str:
    forwarded = request.META.get("HTTP_X_FORWARDED_FOR")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.META.get("REMOTE_ADDR") or "unknown"


def record_audit(request, action, resource_type, resource_id="", target_user=None, legal_basis=""):
    """
    Write a privacy audit row for the current request.

    Failures are logged and swallowed: the caller's primary action has
    already happened and must not be rolled back by the audit trail.
    """
    try:
        return AuditLog.objects.create(
            user=request.user,
            action=action,
            target_user=target_user,
            resource_type=resource_type,
            resource_id=str(resource_id),
            ip_address=client_ip(request),
            user_agent=(request.META.get("HTTP_USER_AGENT") or "unknown")[:300],
            legal_basis=legal_basis[:300],
        )
    except Exception:
        logger.exception("Audit log write failed for %s %s:%s", action, resource_type, resource_id)
        return None
