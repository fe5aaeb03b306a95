from functools import wraps

from nextintern.errors import BadRequestBody, ErrorKind, error_response


def api_login_required(view_func):
    """Like login_required, but answers 401 JSON instead of redirecting."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return error_response(ErrorKind.UNAUTHORIZED, "Authentication required")
        try:
            return view_func(request, *args, **kwargs)
        except BadRequestBody as exc:
            return error_response(ErrorKind.VALIDATION_FAILED, str(exc))

    return _wrapped


def role_required(*roles):
    """
    Restrict a view to users holding one of ``roles``.

    Anonymous requests get 401; authenticated users with another role get 403.
    """

    def decorator(view_func):
        @wraps(view_func)
        def _wrapped(request, *args, **kwargs):
            if request.user.is_authenticated and request.user.role not in roles:
                allowed = ", ".join(r.label if hasattr(r, "label") else str(r) for r in roles)
                return error_response(ErrorKind.FORBIDDEN, f"{allowed} accounts only")
            return view_func(request, *args, **kwargs)

        return api_login_required(_wrapped)

    return decorator
