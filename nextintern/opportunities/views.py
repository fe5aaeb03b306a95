import logging

from django.db import transaction
from django.db.models import Count, F, Q
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from accounts.decorators import role_required
from accounts.models import Notification, User
from accounts.notifications import notify
from nextintern.errors import (
    BadRequestBody,
    ErrorKind,
    denied,
    error_response,
    form_error_response,
    json_body,
    query_int,
)
from profiles.models import CandidateProfile, IndustryProfile
from profiles.visibility import project_candidate, project_industry, viewer_has_premium

from .forms import (
    ApplicationFilterForm,
    ApplicationForm,
    ApplicationStatusForm,
    OpportunityForm,
    OpportunitySearchForm,
    SaveOpportunityForm,
)
from .models import Application, ApplicationStatusChange, Category, Location, Opportunity, SavedOpportunity
from .quotas import (
    count_posts_this_month,
    free_allowance,
    may_create_opportunity,
    month_window,
    posting_limits as compute_posting_limits,
    remaining_quota,
)

logger = logging.getLogger(__name__)


def _opportunity_json(opportunity, viewer):
    return {
        "id": opportunity.pk,
        "title": opportunity.title,
        "description": opportunity.description,
        "type": opportunity.type,
        "work_type": opportunity.work_type,
        "category": opportunity.category.name if opportunity.category_id else None,
        "location": str(opportunity.location) if opportunity.location_id else None,
        "stipend": opportunity.stipend,
        "currency": opportunity.currency,
        "duration": opportunity.duration,
        "application_deadline": (
            opportunity.application_deadline.isoformat() if opportunity.application_deadline else None
        ),
        "is_premium_only": opportunity.is_premium_only,
        "status": opportunity.moderation_state,
        "created_at": opportunity.created_at.isoformat(),
        "industry": project_industry(opportunity.industry, viewer),
    }


def visible_opportunities(viewer):
    """Active listings, minus the types this viewer may not browse."""
    qs = Opportunity.objects.filter(is_active=True).select_related("industry", "category", "location")
    if viewer.is_authenticated and viewer.is_institute():
        qs = qs.exclude(type=Opportunity.Type.FREELANCING)
    if not viewer_has_premium(viewer):
        qs = qs.exclude(is_premium_only=True)
    return qs


# ---------- listing / posting ----------

def _list_opportunities(request):
    form = OpportunitySearchForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)
    qs = form.filter(visible_opportunities(request.user))
    limit = query_int(request, "limit", 20, maximum=100)
    offset = query_int(request, "page", 1) - 1
    total = qs.count()
    page = qs[offset * limit:(offset + 1) * limit]
    return JsonResponse({
        "opportunities": [_opportunity_json(o, request.user) for o in page],
        "total": total,
        "page": offset + 1,
        "limit": limit,
    })


@role_required(User.Role.INDUSTRY)
def _create_opportunity(request):
    industry = getattr(request.user, "industry_profile", None)
    if industry is None:
        return error_response(ErrorKind.NOT_FOUND, "Industry profile not found")

    form = OpportunityForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    opportunity_type = form.cleaned_data["type"]
    is_premium = request.user.has_premium
    allowance = free_allowance()
    count = count_posts_this_month(industry)[opportunity_type]
    decision = may_create_opportunity(opportunity_type, is_premium, count, allowance)
    if not decision:
        return denied(decision, remaining=remaining_quota(opportunity_type, is_premium, count, allowance))

    opportunity = form.save(commit=False)
    opportunity.industry = industry
    opportunity.is_active = False
    opportunity.save()
    logger.info("Industry %s posted %s opportunity %s", industry.pk, opportunity_type, opportunity.pk)
    return JsonResponse({
        "success": True,
        "message": "Opportunity submitted and awaiting admin approval",
        "opportunity": _opportunity_json(opportunity, request.user),
        "remaining": remaining_quota(opportunity_type, is_premium, count + 1, allowance),
    }, status=201)


@require_http_methods(["GET", "POST"])
def opportunities(request):
    try:
        if request.method == "POST":
            return _create_opportunity(request)
        return _list_opportunities(request)
    except BadRequestBody as exc:
        return error_response(ErrorKind.VALIDATION_FAILED, str(exc))


@require_http_methods(["GET", "PUT", "DELETE"])
def opportunity_detail(request, pk):
    opportunity = get_object_or_404(Opportunity.objects.select_related("industry", "category", "location"), pk=pk)
    user = request.user
    is_owner = opportunity.is_owned_by(user)
    is_admin = user.is_authenticated and user.is_admin()

    if request.method == "GET":
        if not (opportunity.is_active or is_owner or is_admin):
            return error_response(ErrorKind.NOT_FOUND, "Opportunity not found")
        if not (is_owner or is_admin):
            if opportunity.is_premium_only and not viewer_has_premium(user):
                return error_response(ErrorKind.FORBIDDEN, "Premium subscription required to view this opportunity")
            if opportunity.type == Opportunity.Type.FREELANCING and user.is_authenticated and user.is_institute():
                return error_response(ErrorKind.NOT_FOUND, "Opportunity not found")
            Opportunity.objects.filter(pk=opportunity.pk).update(view_count=F("view_count") + 1)
        data = _opportunity_json(opportunity, user)
        if is_owner or is_admin:
            data["view_count"] = opportunity.view_count
            data["application_count"] = opportunity.applications.count()
        return JsonResponse({"opportunity": data})

    if not user.is_authenticated:
        return error_response(ErrorKind.UNAUTHORIZED, "Authentication required")
    if not is_owner:
        return error_response(ErrorKind.FORBIDDEN, "You can only modify your own opportunities")

    if request.method == "DELETE":
        opportunity.delete()
        return JsonResponse({"success": True, "message": "Opportunity deleted"})

    try:
        body = json_body(request)
    except BadRequestBody as exc:
        return error_response(ErrorKind.VALIDATION_FAILED, str(exc))
    data = {**model_to_dict(opportunity, fields=OpportunityForm.Meta.fields), **body}
    form = OpportunityForm(data, instance=opportunity)
    if not form.is_valid():
        return form_error_response(form)
    form.save()
    return JsonResponse({"success": True, "opportunity": _opportunity_json(opportunity, user)})


@role_required(User.Role.INDUSTRY)
@require_GET
def posting_limits(request):
    industry = getattr(request.user, "industry_profile", None)
    if industry is None:
        return error_response(ErrorKind.NOT_FOUND, "Industry profile not found")
    is_premium = request.user.has_premium
    counts = count_posts_this_month(industry)
    start, end = month_window()
    return JsonResponse({
        "is_premium": is_premium,
        "monthly_allowance": free_allowance(),
        "period": {"start": start.isoformat(), "end": end.isoformat()},
        "limits": compute_posting_limits(is_premium, counts, free_allowance()),
    })


@role_required(User.Role.INDUSTRY, User.Role.ADMIN)
@require_GET
def industry_opportunities(request, pk):
    """Every listing an industry has posted, whatever its moderation state."""
    industry = get_object_or_404(IndustryProfile, pk=pk)
    if industry.user_id != request.user.pk and not request.user.is_admin():
        return error_response(ErrorKind.FORBIDDEN, "You can only view your own opportunities")

    qs = (
        industry.opportunities.select_related("industry", "category", "location")
        .annotate(application_count=Count("applications"))
        .order_by("-created_at")
    )
    results = []
    for opportunity in qs:
        data = _opportunity_json(opportunity, request.user)
        data["view_count"] = opportunity.view_count
        data["application_count"] = opportunity.application_count
        results.append(data)
    return JsonResponse({"opportunities": results, "count": len(results)})


# ---------- applications ----------

def _application_json(application, viewer, for_industry=False):
    data = {
        "id": application.pk,
        "status": application.status,
        "cover_letter": application.cover_letter,
        "applied_at": application.applied_at.isoformat(),
        "reviewed_at": application.reviewed_at.isoformat() if application.reviewed_at else None,
        "rejection_reason": application.rejection_reason,
        "opportunity": {
            "id": application.opportunity_id,
            "title": application.opportunity.title,
            "type": application.opportunity.type,
        },
    }
    if for_industry:
        data["candidate"] = project_candidate(application.candidate, viewer)
    else:
        data["opportunity"]["industry"] = project_industry(application.opportunity.industry, viewer)
    return data


@role_required(User.Role.CANDIDATE)
@require_POST
def apply(request, pk):
    candidate = getattr(request.user, "candidate_profile", None)
    if candidate is None:
        return error_response(ErrorKind.NOT_FOUND, "Candidate profile not found")
    opportunity = get_object_or_404(Opportunity.objects.select_related("industry__user"), pk=pk, is_active=True)

    if opportunity.is_premium_only and not request.user.has_premium:
        return error_response(ErrorKind.FORBIDDEN, "Premium subscription required to apply")
    if opportunity.application_deadline and opportunity.application_deadline < timezone.now():
        return error_response(ErrorKind.VALIDATION_FAILED, "The application deadline has passed")
    if Application.objects.filter(candidate=candidate, opportunity=opportunity).exists():
        return error_response(ErrorKind.CONFLICT, "You have already applied to this opportunity")

    form = ApplicationForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    with transaction.atomic():
        application = form.save(commit=False)
        application.candidate = candidate
        application.opportunity = opportunity
        application.save()
        ApplicationStatusChange.objects.create(
            application=application,
            old_status=application.status,
            new_status=application.status,
            changed_by=request.user,
            notes="Application submitted",
        )
        owner = opportunity.industry.user
        notify(
            owner,
            Notification.Kind.APPLICATION_UPDATE,
            "New application received",
            f'{project_candidate(candidate, owner)["name"]} applied to "{opportunity.title}".',
            action_url=f"/industry/applications?opportunity={opportunity.pk}",
        )

    return JsonResponse({
        "success": True,
        "message": "Application submitted successfully",
        "application": _application_json(application, request.user),
    }, status=201)


@role_required(User.Role.CANDIDATE)
@require_GET
def candidate_applications(request):
    candidate = getattr(request.user, "candidate_profile", None)
    if candidate is None:
        return error_response(ErrorKind.NOT_FOUND, "Candidate profile not found")
    form = ApplicationFilterForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)
    qs = form.filter(candidate.applications.select_related("opportunity__industry"))
    return JsonResponse({"applications": [_application_json(a, request.user) for a in qs]})


@role_required(User.Role.CANDIDATE)
@require_http_methods(["GET", "POST", "DELETE"])
def saved_opportunities(request, pk):
    candidate = get_object_or_404(CandidateProfile, pk=pk)
    if candidate.user_id != request.user.pk:
        return error_response(ErrorKind.FORBIDDEN, "You can only manage your own saved opportunities")

    if request.method == "GET":
        saved = candidate.saved_opportunities.select_related(
            "opportunity__industry", "opportunity__category", "opportunity__location"
        )
        return JsonResponse({
            "saved": [
                {"saved_at": s.saved_at.isoformat(), "opportunity": _opportunity_json(s.opportunity, request.user)}
                for s in saved
            ],
        })

    if request.method == "DELETE":
        opportunity_id = query_int(request, "opportunity_id", None)
        if opportunity_id is None:
            return error_response(ErrorKind.VALIDATION_FAILED, "'opportunity_id' is required")
        deleted, _ = candidate.saved_opportunities.filter(opportunity_id=opportunity_id).delete()
        if not deleted:
            return error_response(ErrorKind.NOT_FOUND, "Opportunity is not in your saved list")
        return JsonResponse({"success": True, "message": "Opportunity removed from saved list"})

    form = SaveOpportunityForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    # Only listings this candidate could open can be bookmarked
    opportunity = get_object_or_404(visible_opportunities(request.user), pk=form.cleaned_data["opportunity_id"])
    if candidate.saved_opportunities.filter(opportunity=opportunity).exists():
        return error_response(ErrorKind.CONFLICT, "Opportunity already saved")
    saved = SavedOpportunity.objects.create(candidate=candidate, opportunity=opportunity)
    return JsonResponse({
        "success": True,
        "saved": {"saved_at": saved.saved_at.isoformat(), "opportunity": _opportunity_json(opportunity, request.user)},
    }, status=201)


@role_required(User.Role.INDUSTRY, User.Role.ADMIN)
@require_GET
def industry_applications(request, pk):
    industry = get_object_or_404(IndustryProfile, pk=pk)
    if industry.user_id != request.user.pk and not request.user.is_admin():
        return error_response(ErrorKind.FORBIDDEN, "You can only view applications to your own opportunities")

    form = ApplicationFilterForm(request.GET)
    if not form.is_valid():
        return form_error_response(form)
    qs = form.filter(
        Application.objects.filter(opportunity__industry=industry).select_related("candidate", "opportunity")
    )
    by_status = dict(
        Application.objects.filter(opportunity__industry=industry)
        .values_list("status")
        .annotate(n=Count("id"))
    )
    return JsonResponse({
        "applications": [_application_json(a, request.user, for_industry=True) for a in qs],
        "counts": {s: by_status.get(s, 0) for s in Application.Status.values},
    })


STATUS_MESSAGES = {
    Application.Status.REVIEWED: "Your application for \"{title}\" has been reviewed.",
    Application.Status.SHORTLISTED: "Good news! You have been shortlisted for \"{title}\".",
    Application.Status.SELECTED: "Congratulations! You have been selected for \"{title}\".",
    Application.Status.REJECTED: "Your application for \"{title}\" was not successful.",
}


@role_required(User.Role.INDUSTRY)
@require_http_methods(["PUT"])
def application_status(request, pk):
    application = get_object_or_404(
        Application.objects.select_related("opportunity__industry", "candidate__user"), pk=pk
    )
    if not application.opportunity.is_owned_by(request.user):
        return error_response(ErrorKind.FORBIDDEN, "You can only update applications to your own opportunities")

    form = ApplicationStatusForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    old_status = application.status
    new_status = form.cleaned_data["status"]
    if new_status != old_status:
        with transaction.atomic():
            application.status = new_status
            application.reviewed_at = timezone.now()
            application.rejection_reason = form.cleaned_data["rejection_reason"]
            application.save(update_fields=["status", "reviewed_at", "rejection_reason"])
            ApplicationStatusChange.objects.create(
                application=application,
                old_status=old_status,
                new_status=new_status,
                changed_by=request.user,
                notes=form.cleaned_data["rejection_reason"],
            )
            message = STATUS_MESSAGES[new_status].format(title=application.opportunity.title)
            if application.rejection_reason:
                message += f" Reason: {application.rejection_reason}"
            notify(
                application.candidate.user,
                Notification.Kind.APPLICATION_UPDATE,
                "Application status updated",
                message,
                action_url="/candidate/applications",
            )

    return JsonResponse({
        "success": True,
        "application": _application_json(application, request.user, for_industry=True),
    })


# ---------- reference data ----------

@require_GET
def categories(request):
    rows = Category.objects.annotate(
        active_count=Count("opportunities", filter=Q(opportunities__is_active=True))
    )
    return JsonResponse({
        "categories": [{"id": c.pk, "name": c.name, "slug": c.slug, "opportunities": c.active_count} for c in rows]
    })


@require_GET
def locations(request):
    rows = Location.objects.annotate(
        active_count=Count("opportunities", filter=Q(opportunities__is_active=True))
    )
    return JsonResponse({
        "locations": [
            {"id": loc.pk, "city": loc.city, "state": loc.state, "country": loc.country,
             "opportunities": loc.active_count}
            for loc in rows
        ]
    })
