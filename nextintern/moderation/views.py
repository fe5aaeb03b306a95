import logging
from datetime import timedelta

from django import forms
from django.db.models import Count, Q, Sum
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods

from accounts.audit import record_audit
from accounts.decorators import role_required
from accounts.models import Notification, Subscription, User
from accounts.notifications import notify_many
from nextintern.errors import ErrorKind, error_response, form_error_response, json_body, query_int
from opportunities.models import Application, Opportunity
from profiles.models import IndustryProfile, InstituteProfile
from profiles.visibility import project_account

from .forms import (
    IndustryVerificationForm,
    InstituteVerificationForm,
    ModerationForm,
    UserAdminForm,
    VerificationRequestForm,
    clean_settings_changes,
)
from .models import PlatformSettings
from .transitions import Action, moderate_opportunity, verify_profile

logger = logging.getLogger(__name__)

admin_only = role_required(User.Role.ADMIN)


# ---------- opportunities ----------

@admin_only
@require_http_methods(["PUT"])
def moderate(request):
    form = ModerationForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    opportunity = get_object_or_404(Opportunity.objects.select_related("industry__user"), pk=form.cleaned_data["opportunity_id"])
    action = form.cleaned_data["action"]
    reason = form.cleaned_data["reason"]

    moderate_opportunity(opportunity, action, reason)
    logger.info("Admin %s applied %s to opportunity %s", request.user.pk, action, form.cleaned_data["opportunity_id"])

    payload = {"success": True, "action": action, "opportunity_id": form.cleaned_data["opportunity_id"]}
    if action != Action.DELETE:
        payload["status"] = opportunity.moderation_state
        payload["is_active"] = opportunity.is_active
    if reason:
        payload["reason"] = reason
    return JsonResponse(payload)


@admin_only
@require_GET
def opportunity_queue(request):
    qs = Opportunity.objects.select_related("industry").annotate(application_count=Count("applications"))
    status = request.GET.get("status")
    if status == "pending":
        qs = qs.filter(is_active=False)
    elif status == "active":
        qs = qs.filter(is_active=True)
    if request.GET.get("type"):
        qs = qs.filter(type=request.GET["type"])
    limit = query_int(request, "limit", 50, maximum=200)
    return JsonResponse({
        "opportunities": [
            {
                "id": o.pk,
                "title": o.title,
                "type": o.type,
                "status": o.moderation_state,
                "company_name": o.industry.company_name,
                "industry_id": o.industry_id,
                "application_count": o.application_count,
                "created_at": o.created_at.isoformat(),
            }
            for o in qs[:limit]
        ]
    })


# ---------- profiles ----------

def _verified_filter(request, qs):
    verified = request.GET.get("verified")
    if verified in ("1", "true"):
        return qs.filter(is_verified=True)
    if verified in ("0", "false"):
        return qs.filter(is_verified=False)
    return qs


@admin_only
@require_GET
def industry_list(request):
    qs = _verified_filter(request, IndustryProfile.objects.select_related("user")).annotate(
        opportunity_count=Count("opportunities")
    )
    return JsonResponse({
        "industries": [
            {
                "id": p.pk,
                "company_name": p.company_name,
                "industry": p.industry,
                "email": p.user.email,
                "is_verified": p.is_verified,
                "verified_at": p.verified_at.isoformat() if p.verified_at else None,
                "is_premium": p.user.has_premium,
                "opportunity_count": p.opportunity_count,
            }
            for p in qs.order_by("-created_at")
        ]
    })


@admin_only
@require_GET
def institute_list(request):
    qs = _verified_filter(request, InstituteProfile.objects.select_related("user")).annotate(
        student_count=Count("students")
    )
    return JsonResponse({
        "institutes": [
            {
                "id": p.pk,
                "institute_name": p.institute_name,
                "institute_type": p.institute_type,
                "email": p.user.email,
                "is_verified": p.is_verified,
                "verified_at": p.verified_at.isoformat() if p.verified_at else None,
                "student_count": p.student_count,
            }
            for p in qs.order_by("-created_at")
        ]
    })


@admin_only
@require_GET
def user_list(request):
    qs = User.objects.select_related("candidate_profile", "industry_profile", "institute_profile").order_by("-date_joined")
    if request.GET.get("role"):
        qs = qs.filter(role=request.GET["role"])
    if request.GET.get("q"):
        qs = qs.filter(email__icontains=request.GET["q"])
    limit = query_int(request, "limit", 50, maximum=200)
    return JsonResponse({"users": [project_account(u) for u in qs[:limit]], "total": qs.count()})


@admin_only
@require_http_methods(["PUT", "DELETE"])
def user_detail(request, pk):
    account = get_object_or_404(User, pk=pk)
    if account.pk == request.user.pk:
        return error_response(ErrorKind.FORBIDDEN, "You cannot deactivate or delete your own account")

    if request.method == "DELETE":
        record_audit(
            request,
            action="ADMIN_DELETE_USER",
            resource_type="user",
            resource_id=account.pk,
            legal_basis="Platform administration",
        )
        account.delete()
        logger.info("Admin %s deleted user %s", request.user.pk, pk)
        return JsonResponse({"success": True, "message": "User deleted"})

    form = UserAdminForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    changes = {k: v for k, v in form.cleaned_data.items() if v is not None}
    if "is_active" in changes:
        account.is_active = changes["is_active"]
    if "is_premium" in changes:
        # Admin grants have no expiry
        account.is_premium = changes["is_premium"]
        account.premium_expires_at = None
    account.save(update_fields=["is_active", "is_premium", "premium_expires_at"])

    record_audit(
        request,
        action="ADMIN_UPDATE_USER",
        resource_type="user",
        resource_id=account.pk,
        target_user=account,
        legal_basis="Platform administration",
    )
    logger.info("Admin %s updated user %s: %s", request.user.pk, account.pk, changes)
    return JsonResponse({"success": True, "user": project_account(account)})


def _verify(request, model, form_class, id_field):
    form = form_class(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    profile = get_object_or_404(model.objects.select_related("user"), pk=form.cleaned_data[id_field])
    action = form.cleaned_data["action"]
    verify_profile(profile, action, form.cleaned_data["reason"])
    return JsonResponse({
        "success": True,
        "action": action,
        "is_verified": profile.is_verified,
        "verified_at": profile.verified_at.isoformat() if profile.verified_at else None,
    })


@role_required(User.Role.ADMIN, User.Role.INDUSTRY)
@require_http_methods(["PUT", "POST"])
def verify_industry(request):
    if request.method == "POST":
        return _request_verification(request)
    if not request.user.is_admin():
        return error_response(ErrorKind.FORBIDDEN, "Admin accounts only")
    return _verify(request, IndustryProfile, IndustryVerificationForm, "industry_id")


def _request_verification(request):
    """An industry asks the admins to review its profile."""
    profile = getattr(request.user, "industry_profile", None)
    if profile is None:
        return error_response(ErrorKind.FORBIDDEN, "Only industries can request verification")
    if profile.is_verified:
        return error_response(ErrorKind.CONFLICT, "Your company is already verified")
    form = VerificationRequestForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    note = form.cleaned_data["message"]
    body = f"{profile.company_name} has requested verification."
    if note:
        body += f" Note: {note}"
    admins = User.objects.filter(role=User.Role.ADMIN, is_active=True)
    notify_many(
        admins,
        Notification.Kind.SYSTEM_ALERT,
        "Verification request",
        body,
        action_url=f"/admin/industries?verified=false#{profile.pk}",
    )
    return JsonResponse({"success": True, "message": "Verification request submitted"}, status=202)


@admin_only
@require_http_methods(["PUT"])
def verify_institute(request):
    return _verify(request, InstituteProfile, InstituteVerificationForm, "institute_id")


# ---------- settings & analytics ----------

def _settings_json():
    current = PlatformSettings.current()
    return {"version": current.version if current else 0, "settings": PlatformSettings.resolved()}


@admin_only
@require_http_methods(["GET", "PUT"])
def platform_settings(request):
    if request.method == "GET":
        return JsonResponse(_settings_json())
    try:
        changes = clean_settings_changes(json_body(request))
    except forms.ValidationError as exc:
        return error_response(ErrorKind.VALIDATION_FAILED, exc.messages[0])
    row = PlatformSettings.publish(changes, user=request.user)
    logger.info("Admin %s published platform settings v%s", request.user.pk, row.version)
    return JsonResponse({"success": True, **_settings_json()})


@admin_only
@require_GET
def analytics(request):
    now = timezone.now()
    month_ago = now - timedelta(days=30)

    users_by_role = dict(User.objects.values_list("role").annotate(n=Count("id")))
    opportunities = Opportunity.objects.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        new=Count("id", filter=Q(created_at__gte=month_ago)),
    )
    by_type = dict(Opportunity.objects.values_list("type").annotate(n=Count("id")))
    by_status = dict(Application.objects.values_list("status").annotate(n=Count("id")))
    subscriptions = Subscription.objects.filter(status=Subscription.Status.ACTIVE).aggregate(
        active=Count("id"), revenue=Sum("price_amount")
    )

    return JsonResponse({
        "users": {
            "total": sum(users_by_role.values()),
            "by_role": {r: users_by_role.get(r, 0) for r in User.Role.values},
            "premium": User.objects.filter(is_premium=True).filter(
                Q(premium_expires_at__isnull=True) | Q(premium_expires_at__gt=now)
            ).count(),
            "new_last_30_days": User.objects.filter(date_joined__gte=month_ago).count(),
        },
        "opportunities": {
            "total": opportunities["total"],
            "active": opportunities["active"],
            "pending": opportunities["total"] - opportunities["active"],
            "new_last_30_days": opportunities["new"],
            "by_type": {t: by_type.get(t, 0) for t in Opportunity.Type.values},
        },
        "applications": {
            "total": sum(by_status.values()),
            "by_status": {s: by_status.get(s, 0) for s in Application.Status.values},
        },
        "verification": {
            "industries_verified": IndustryProfile.objects.filter(is_verified=True).count(),
            "industries_pending": IndustryProfile.objects.filter(is_verified=False).count(),
            "institutes_verified": InstituteProfile.objects.filter(is_verified=True).count(),
            "institutes_pending": InstituteProfile.objects.filter(is_verified=False).count(),
        },
        "subscriptions": {
            "active": subscriptions["active"],
            "revenue": subscriptions["revenue"] or 0,
        },
    })
