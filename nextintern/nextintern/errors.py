"""
Error kinds shared by the policies and the JSON views.

Policies never raise for a denied action; they hand back a ``Decision`` and
the view turns a denial into a response with ``error_response``.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from django.http import JsonResponse


class ErrorKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    VALIDATION_FAILED = "validation_failed"
    QUOTA_EXCEEDED = "quota_exceeded"
    CONVERSATION_NOT_ESTABLISHED = "conversation_not_established"
    CONFLICT = "conflict"


STATUS_CODES = {
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.VALIDATION_FAILED: 400,
    ErrorKind.QUOTA_EXCEEDED: 403,
    ErrorKind.CONVERSATION_NOT_ESTABLISHED: 403,
    ErrorKind.CONFLICT: 409,
}


@dataclass(frozen=True)
class Decision:
    allowed: bool
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, error: ErrorKind, message: str) -> "Decision":
        return cls(allowed=False, error=error, message=message)

    def __bool__(self):
        return self.allowed


class BadRequestBody(ValueError):
    """Raised when a request body is not a JSON object."""


def error_response(kind: ErrorKind, message: str, **extra) -> JsonResponse:
    payload = {"success": False, "error": message, "code": kind.value}
    payload.update(extra)
    return JsonResponse(payload, status=STATUS_CODES[kind])


def denied(decision: Decision, **extra) -> JsonResponse:
    return error_response(decision.error, decision.message, **extra)


def form_error_response(form) -> JsonResponse:
    """Flatten a bound form's errors into the first message plus per-field details."""
    details = {field: [str(e) for e in errors] for field, errors in form.errors.items()}
    first = next(iter(details.values()), ["Invalid input"])[0]
    return error_response(ErrorKind.VALIDATION_FAILED, first, details=details)


def json_body(request) -> dict:
    """
    Return the request payload as a dict.
    JSON bodies are decoded; form-encoded bodies fall back to request.POST.
    """
    if request.content_type == "application/json":
        if not request.body:
            return {}
        try:
            data = json.loads(request.body)
        except (ValueError, UnicodeDecodeError) as exc:
            raise BadRequestBody("Request body must be valid JSON") from exc
        if not isinstance(data, dict):
            raise BadRequestBody("Request body must be a JSON object")
        return data
    return request.POST.dict()


def query_int(request, name, default, maximum=None) -> int:
    raw = request.GET.get(name)
    if raw in (None, ""):
        return default
    try:
        value = int(raw)
    except ValueError:
        raise BadRequestBody(f"'{name}' must be an integer") from None
    if value < 1:
        raise BadRequestBody(f"'{name}' must be positive")
    return min(value, maximum) if maximum else value
