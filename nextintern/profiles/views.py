import logging

from django.db.models import Count, Q, Sum
from django.forms.models import model_to_dict
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.views.decorators.http import require_GET, require_http_methods

from accounts.audit import record_audit
from accounts.decorators import api_login_required, role_required
from accounts.models import User
from nextintern.errors import ErrorKind, error_response, form_error_response, json_body
from opportunities.models import Application, Opportunity

from .forms import CandidateProfileForm, CandidateSkillForm, EnrollStudentForm, IndustryProfileForm
from .models import CandidateProfile, CandidateSkill, IndustryProfile, InstituteProfile, InstituteStudent
from .visibility import project_candidate, project_industry

logger = logging.getLogger(__name__)


def _owner_or_admin(user, profile) -> bool:
    return profile.user_id == user.pk or user.is_admin()


# ---------- industries ----------

def _industry_detail(profile, viewer):
    data = project_industry(profile, viewer)
    data.update({
        "description": profile.description,
        "website": profile.website,
        "city": profile.city,
        "state": profile.state,
        "active_opportunities": profile.opportunities.filter(is_active=True).count(),
    })
    if _owner_or_admin(viewer, profile):
        data.update({
            "company_name": profile.company_name,
            "anonymous_id": profile.anonymous_id,
            "show_company_name": profile.show_company_name,
            "verified_at": profile.verified_at.isoformat() if profile.verified_at else None,
        })
    return data


@api_login_required
@require_http_methods(["GET", "PUT"])
def industry_profile(request, pk):
    profile = get_object_or_404(IndustryProfile.objects.select_related("user"), pk=pk)
    if request.method == "GET":
        return JsonResponse({"industry": _industry_detail(profile, request.user)})

    if profile.user_id != request.user.pk:
        return error_response(ErrorKind.FORBIDDEN, "You can only edit your own company profile")
    data = {**model_to_dict(profile, fields=IndustryProfileForm.Meta.fields), **json_body(request)}
    form = IndustryProfileForm(data, instance=profile)
    if not form.is_valid():
        return form_error_response(form)
    form.save()
    record_audit(
        request,
        action="UPDATE_PROFILE",
        resource_type="industry_profile",
        resource_id=profile.pk,
        legal_basis="Owner updating own company profile",
    )
    return JsonResponse({"success": True, "industry": _industry_detail(profile, request.user)})


@role_required(User.Role.INDUSTRY, User.Role.ADMIN)
@require_GET
def industry_stats(request, pk):
    profile = get_object_or_404(IndustryProfile, pk=pk)
    if not _owner_or_admin(request.user, profile):
        return error_response(ErrorKind.FORBIDDEN, "You can only view your own statistics")

    opportunities = profile.opportunities.all()
    totals = opportunities.aggregate(
        total=Count("id"),
        active=Count("id", filter=Q(is_active=True)),
        views=Sum("view_count"),
    )
    applications = Application.objects.filter(opportunity__industry=profile)
    by_status = dict(applications.values_list("status").annotate(n=Count("id")))

    recent = applications.select_related("candidate", "opportunity").order_by("-applied_at")[:5]
    return JsonResponse({
        "stats": {
            "total_opportunities": totals["total"],
            "active_opportunities": totals["active"],
            "pending_opportunities": totals["total"] - totals["active"],
            "total_views": totals["views"] or 0,
            "total_applications": sum(by_status.values()),
            "applications_by_status": {s: by_status.get(s, 0) for s in Application.Status.values},
        },
        "recent_applications": [
            {
                "id": a.pk,
                "candidate": project_candidate(a.candidate, request.user),
                "opportunity": {"id": a.opportunity_id, "title": a.opportunity.title},
                "status": a.status,
                "applied_at": a.applied_at.isoformat(),
            }
            for a in recent
        ],
    })


# ---------- candidates ----------

def _skill_json(skill):
    return {
        "id": skill.pk,
        "name": skill.name,
        "level": skill.level,
        "proficiency": skill.proficiency,
        "years_of_experience": skill.years_of_experience,
    }


def _candidate_detail(profile, viewer):
    """Full record for the owner or an admin, the anonymised projection for recruiters."""
    if _owner_or_admin(viewer, profile):
        data = {
            "id": profile.pk,
            "first_name": profile.first_name,
            "last_name": profile.last_name,
            "anonymous_id": profile.anonymous_id,
            "show_full_name": profile.show_full_name,
            "email": profile.user.email,
        }
    elif viewer.is_industry() or viewer.is_institute():
        data = project_candidate(profile, viewer)
    else:
        return None

    data.update({
        "headline": profile.headline,
        "location": profile.location,
        "skills": [_skill_json(s) for s in profile.skills.all()],
    })
    return data


@api_login_required
@require_http_methods(["GET", "PUT"])
def candidate_profile(request, pk):
    profile = get_object_or_404(CandidateProfile.objects.select_related("user"), pk=pk)
    if request.method == "GET":
        data = _candidate_detail(profile, request.user)
        if data is None:
            return error_response(ErrorKind.FORBIDDEN, "You cannot view other candidates' profiles")
        return JsonResponse({"candidate": data})

    if profile.user_id != request.user.pk:
        return error_response(ErrorKind.FORBIDDEN, "You can only edit your own profile")
    data = {**model_to_dict(profile, fields=CandidateProfileForm.Meta.fields), **json_body(request)}
    form = CandidateProfileForm(data, instance=profile)
    if not form.is_valid():
        return form_error_response(form)
    form.save()
    record_audit(
        request,
        action="UPDATE_PROFILE",
        resource_type="candidate_profile",
        resource_id=profile.pk,
        legal_basis="Owner updating own candidate profile",
    )
    return JsonResponse({"success": True, "candidate": _candidate_detail(profile, request.user)})


@role_required(User.Role.CANDIDATE)
@require_http_methods(["POST"])
def candidate_skill_add(request, pk):
    profile = get_object_or_404(CandidateProfile, pk=pk)
    if profile.user_id != request.user.pk:
        return error_response(ErrorKind.FORBIDDEN, "You can only edit your own skills")
    form = CandidateSkillForm(json_body(request), candidate=profile)
    if not form.is_valid():
        return form_error_response(form)
    if form.is_duplicate:
        return error_response(ErrorKind.CONFLICT, "Skill already added")
    skill = form.save(commit=False)
    skill.candidate = profile
    skill.save()
    return JsonResponse({"success": True, "skill": _skill_json(skill)}, status=201)


@role_required(User.Role.CANDIDATE)
@require_http_methods(["DELETE"])
def candidate_skill_delete(request, pk, skill_id):
    profile = get_object_or_404(CandidateProfile, pk=pk)
    if profile.user_id != request.user.pk:
        return error_response(ErrorKind.FORBIDDEN, "You can only edit your own skills")
    skill = get_object_or_404(CandidateSkill, pk=skill_id, candidate=profile)
    skill.delete()
    return JsonResponse({"success": True})


# ---------- institutes ----------

def _student_json(enrolment):
    candidate = enrolment.candidate
    return {
        "id": enrolment.pk,
        "candidate_id": candidate.pk,
        "name": f"{candidate.first_name} {candidate.last_name}".strip(),
        "email": candidate.user.email,
        "is_active": enrolment.is_active,
        "enrolled_at": enrolment.enrolled_at.isoformat(),
        "applications": candidate.applications.count(),
    }


@role_required(User.Role.INSTITUTE, User.Role.ADMIN)
@require_http_methods(["GET", "POST"])
def institute_students(request, pk):
    institute = get_object_or_404(InstituteProfile, pk=pk)
    if not _owner_or_admin(request.user, institute):
        return error_response(ErrorKind.FORBIDDEN, "You can only manage your own students")

    if request.method == "GET":
        enrolments = institute.students.select_related("candidate__user")
        if request.GET.get("active") in ("1", "true"):
            enrolments = enrolments.filter(is_active=True)
        return JsonResponse({"students": [_student_json(e) for e in enrolments]})

    form = EnrollStudentForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    candidate = CandidateProfile.objects.filter(user__email__iexact=form.cleaned_data["candidate_email"]).first()
    if candidate is None:
        return error_response(ErrorKind.NOT_FOUND, "No candidate registered with that email")
    enrolment, created = InstituteStudent.objects.get_or_create(institute=institute, candidate=candidate)
    if not created:
        return error_response(ErrorKind.CONFLICT, "Candidate is already enrolled")
    logger.info("Institute %s enrolled candidate %s", institute.pk, candidate.pk)
    return JsonResponse({"success": True, "student": _student_json(enrolment)}, status=201)


@role_required(User.Role.INSTITUTE, User.Role.ADMIN)
@require_GET
def institute_analytics(request, pk):
    institute = get_object_or_404(InstituteProfile, pk=pk)
    if not _owner_or_admin(request.user, institute):
        return error_response(ErrorKind.FORBIDDEN, "You can only view your own analytics")

    students = institute.students.all()
    candidate_ids = students.values("candidate_id")
    applications = Application.objects.filter(candidate_id__in=candidate_ids)
    by_status = dict(applications.values_list("status").annotate(n=Count("id")))
    total_students = students.count()
    placed = applications.filter(status=Application.Status.SELECTED).values("candidate_id").distinct().count()
    by_type = dict(applications.values_list("opportunity__type").annotate(n=Count("id")))

    return JsonResponse({
        "analytics": {
            "total_students": total_students,
            "active_students": students.filter(is_active=True).count(),
            "total_applications": sum(by_status.values()),
            "applications_by_status": {s: by_status.get(s, 0) for s in Application.Status.values},
            "applications_by_type": {t: by_type.get(t, 0) for t in Opportunity.Type.values},
            "placed_students": placed,
            "placement_rate": round(placed * 100 / total_students, 1) if total_students else 0.0,
        }
    })
