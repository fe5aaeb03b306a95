import logging
from datetime import timedelta
from functools import wraps

from django.conf import settings
from django.contrib.auth import authenticate, login, logout, update_session_auth_hash
from django.contrib.auth.tokens import default_token_generator
from django.core.mail import send_mail
from django.db import transaction
from django.db.models import Count, Q
from django.http import JsonResponse
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.encoding import force_bytes, force_str
from django.utils.http import urlsafe_base64_decode, urlsafe_base64_encode
from django.views.decorators.csrf import ensure_csrf_cookie
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from nextintern.errors import (
    BadRequestBody,
    ErrorKind,
    denied,
    error_response,
    form_error_response,
    json_body,
    query_int,
)
from moderation.models import PlatformSettings
from opportunities.models import Application, Opportunity
from profiles.models import CandidateProfile, IndustryProfile, InstituteProfile
from profiles.visibility import project_account

from .audit import record_audit
from .conversations import (
    conversation_exists,
    conversation_filter,
    may_send_message,
    notification_preview,
    sender_display_name,
    thread_display_name,
)
from .decorators import api_login_required, role_required
from .forms import (
    ChangePasswordForm,
    InitiateConversationForm,
    LoginForm,
    MessageForm,
    PasswordResetRequestForm,
    PrivacySettingsForm,
    RegistrationForm,
    ResetPasswordForm,
    SubscriptionForm,
)
from .models import Message, Notification, Subscription, User
from .notifications import mark_read, notify

logger = logging.getLogger(__name__)

PASSWORD_RESET_SENT = "If an account exists with this email, a password reset link has been sent."

PLAN_TERMS = {
    Subscription.Plan.PREMIUM_MONTHLY: (Subscription.BillingCycle.MONTHLY, 4999, timedelta(days=30)),
    Subscription.Plan.PREMIUM_YEARLY: (Subscription.BillingCycle.YEARLY, 49999, timedelta(days=365)),
}


def _body_or_400(view_func):
    """Map a malformed body to a 400 on endpoints open to anonymous users."""

    @wraps(view_func)
    def _wrapped(request, *args, **kwargs):
        try:
            return view_func(request, *args, **kwargs)
        except BadRequestBody as exc:
            return error_response(ErrorKind.VALIDATION_FAILED, str(exc))

    return _wrapped


# ---------- auth ----------

def _create_role_profile(user, data):
    if user.role == User.Role.CANDIDATE:
        CandidateProfile.objects.create(user=user, first_name=data["first_name"], last_name=data["last_name"])
    elif user.role == User.Role.INDUSTRY:
        IndustryProfile.objects.create(user=user, company_name=data["company_name"], industry=data["industry"])
    elif user.role == User.Role.INSTITUTE:
        InstituteProfile.objects.create(
            user=user, institute_name=data["institute_name"], institute_type=data["institute_type"]
        )


@require_POST
@_body_or_400
def register(request):
    if not PlatformSettings.get_value("platform", "new_user_registration"):
        return error_response(ErrorKind.FORBIDDEN, "New registrations are currently closed")
    form = RegistrationForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    data = form.cleaned_data

    if data["role"] == User.Role.ADMIN:
        return error_response(ErrorKind.FORBIDDEN, "Admin accounts cannot be created through registration")
    if form.email_taken:
        return error_response(ErrorKind.CONFLICT, "User with this email already exists")

    with transaction.atomic():
        user = User.objects.create_user(
            username=data["email"],
            email=data["email"],
            password=data["password"],
            role=data["role"],
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
        )
        _create_role_profile(user, data)

    logger.info("Registered %s account %s", user.role, user.pk)
    return JsonResponse(
        {"success": True, "message": "Account created successfully", "user": project_account(user)},
        status=201,
    )


@require_POST
@_body_or_400
def login_view(request):
    form = LoginForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    account = User.objects.filter(email__iexact=form.cleaned_data["email"]).first()
    user = None
    if account is not None:
        user = authenticate(request, username=account.username, password=form.cleaned_data["password"])
    if user is None:
        return error_response(ErrorKind.UNAUTHORIZED, "Invalid email or password")
    login(request, user)
    request.session.set_expiry(PlatformSettings.get_value("security", "session_timeout") * 60)
    return JsonResponse({"success": True, "user": project_account(user)})


@require_POST
def logout_view(request):
    logout(request)
    return JsonResponse({"success": True})


@require_GET
@ensure_csrf_cookie
def session(request):
    if not request.user.is_authenticated:
        return JsonResponse({"user": None})
    return JsonResponse({"user": project_account(request.user)})


@require_POST
@_body_or_400
def forgot_password(request):
    """Always answers the same way so callers can't probe which emails are registered."""
    form = PasswordResetRequestForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)

    user = User.objects.filter(email__iexact=form.cleaned_data["email"], is_active=True).first()
    if user is not None and user.has_usable_password():
        uid = urlsafe_base64_encode(force_bytes(user.pk))
        token = default_token_generator.make_token(user)
        link = f"{settings.FRONTEND_URL}/auth/reset-password?uid={uid}&token={token}"
        try:
            send_mail(
                subject="Reset your NextIntern password",
                message=f"Use the link below to choose a new password:\n\n{link}\n",
                from_email=settings.DEFAULT_FROM_EMAIL,
                recipient_list=[user.email],
            )
        except Exception:
            logger.exception("Password reset email to user %s failed", user.pk)

    return JsonResponse({"success": True, "message": PASSWORD_RESET_SENT})


@require_POST
@_body_or_400
def reset_password(request):
    data = json_body(request)
    try:
        uid = force_str(urlsafe_base64_decode(str(data.get("uid", ""))))
        user = User.objects.get(pk=uid)
    except (TypeError, ValueError, OverflowError, User.DoesNotExist):
        user = None
    if user is None or not default_token_generator.check_token(user, str(data.get("token", ""))):
        return error_response(ErrorKind.VALIDATION_FAILED, "Reset link is invalid or has expired")

    form = ResetPasswordForm(user, data)
    if not form.is_valid():
        return form_error_response(form)
    form.save()
    return JsonResponse({"success": True, "message": "Password has been reset"})


@api_login_required
@require_http_methods(["PUT"])
def change_password(request):
    user = request.user
    if not user.has_usable_password():
        return error_response(
            ErrorKind.VALIDATION_FAILED, "This account has no password yet; use the password reset link instead"
        )
    form = ChangePasswordForm(user, json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    form.save()
    # Keep the current session signed in after the hash changes
    update_session_auth_hash(request, user)
    record_audit(
        request,
        action="CHANGE_PASSWORD",
        resource_type="user",
        resource_id=user.pk,
        legal_basis="User initiated password change",
    )
    logger.info("User %s changed their password", user.pk)
    return JsonResponse({"success": True, "message": "Password updated successfully"})


# ---------- messages ----------

def _message_json(message, viewer):
    return {
        "id": message.pk,
        "sender_id": message.sender_id,
        "sender_name": thread_display_name(message.sender, viewer),
        "receiver_id": message.receiver_id,
        "subject": message.subject,
        "content": message.content,
        "sent_at": message.sent_at.isoformat(),
        "is_read": message.is_read,
        "is_own": message.sender_id == viewer.pk,
    }


@api_login_required
@require_GET
def conversations(request):
    user = request.user
    partners = (
        User.objects.filter(Q(sent_messages__receiver=user) | Q(received_messages__sender=user))
        .exclude(pk=user.pk)
        .distinct()
        .select_related("candidate_profile", "industry_profile", "institute_profile")
    )
    unread = dict(
        Message.objects.filter(receiver=user, is_read=False)
        .values("sender")
        .annotate(n=Count("id"))
        .values_list("sender", "n")
    )

    results = []
    for partner in partners:
        last_message = Message.objects.filter(conversation_filter(user.pk, partner.pk)).order_by("-sent_at").first()
        results.append({
            "user_id": partner.pk,
            "name": thread_display_name(partner, user),
            "role": partner.role,
            "last_message": notification_preview(last_message.content) if last_message else "",
            "last_message_at": last_message.sent_at.isoformat() if last_message else None,
            "unread_count": unread.get(partner.pk, 0),
        })
    results.sort(key=lambda c: c["last_message_at"] or "", reverse=True)
    return JsonResponse({"conversations": results})


@api_login_required
@require_GET
def thread(request, user_id):
    user = request.user
    other = get_object_or_404(User, pk=user_id)
    messages_qs = (
        Message.objects.filter(conversation_filter(user.pk, other.pk))
        .select_related("sender__candidate_profile", "sender__industry_profile", "sender__institute_profile")
        .order_by("sent_at")
    )
    payload = [_message_json(m, user) for m in messages_qs]

    mark_read(Message.objects.filter(sender=other, receiver=user))
    record_audit(
        request,
        action="VIEW_MESSAGES",
        resource_type="conversation",
        resource_id=other.pk,
        target_user=other,
        legal_basis="Participant viewing own conversation",
    )
    return JsonResponse({
        "user": {"id": other.pk, "name": thread_display_name(other, user), "role": other.role},
        "messages": payload,
    })


def _deliver(sender, receiver, subject, content):
    message = Message.objects.create(sender=sender, receiver=receiver, subject=subject, content=content)
    notify(
        receiver,
        Notification.Kind.MESSAGE_RECEIVED,
        f"New message from {sender_display_name(sender)}",
        notification_preview(content),
        action_url=f"/messages/{sender.pk}",
    )
    return message


@api_login_required
@require_POST
def send_message(request):
    form = MessageForm(json_body(request), sender=request.user)
    if not form.is_valid():
        return form_error_response(form)
    receiver = get_object_or_404(User, pk=form.cleaned_data["receiver_id"], is_active=True)

    decision = may_send_message(request.user.role, conversation_exists(request.user.pk, receiver.pk))
    if not decision:
        return denied(decision)

    with transaction.atomic():
        message = _deliver(request.user, receiver, form.cleaned_data["subject"], form.cleaned_data["content"])
    return JsonResponse({"success": True, "message": _message_json(message, request.user)}, status=201)


@role_required(User.Role.INDUSTRY)
@require_POST
def initiate_conversation(request):
    """Industry opens a thread with a candidate it has shortlisted."""
    form = InitiateConversationForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    industry = getattr(request.user, "industry_profile", None)
    if industry is None:
        return error_response(ErrorKind.NOT_FOUND, "Industry profile not found")

    candidate = get_object_or_404(CandidateProfile.objects.select_related("user"), pk=form.cleaned_data["candidate_id"])
    opportunity = get_object_or_404(Opportunity, pk=form.cleaned_data["opportunity_id"], industry=industry)
    shortlisted = Application.objects.filter(
        candidate=candidate, opportunity=opportunity, status=Application.Status.SHORTLISTED
    ).exists()
    if not shortlisted:
        return error_response(
            ErrorKind.FORBIDDEN, "You can only message candidates shortlisted for one of your opportunities"
        )

    subject = form.cleaned_data["subject"] or f"Regarding {opportunity.title}"
    with transaction.atomic():
        message = _deliver(request.user, candidate.user, subject, form.cleaned_data["content"])
    record_audit(
        request,
        action="INITIATE_CONVERSATION",
        resource_type="message",
        resource_id=message.pk,
        target_user=candidate.user,
        legal_basis=f"Candidate shortlisted for opportunity {opportunity.pk}",
    )
    return JsonResponse({"success": True, "message": _message_json(message, request.user)}, status=201)


# ---------- notifications ----------

def _notification_json(n):
    return {
        "id": n.pk,
        "kind": n.kind,
        "title": n.title,
        "message": n.message,
        "action_url": n.action_url,
        "is_read": n.is_read,
        "created_at": n.created_at.isoformat(),
    }


@api_login_required
@require_GET
def notification_list(request):
    qs = request.user.notifications.all()
    if request.GET.get("unread") in ("1", "true"):
        qs = qs.filter(is_read=False)
    limit = query_int(request, "limit", 50, maximum=100)
    return JsonResponse({
        "notifications": [_notification_json(n) for n in qs[:limit]],
        "unread_count": request.user.notifications.filter(is_read=False).count(),
    })


@api_login_required
@require_POST
def notification_read(request, pk):
    notification = get_object_or_404(Notification, pk=pk, user=request.user)
    mark_read(Notification.objects.filter(pk=notification.pk))
    return JsonResponse({"success": True})


@api_login_required
@require_POST
def notification_read_all(request):
    updated = mark_read(request.user.notifications.all())
    return JsonResponse({"success": True, "updated": updated})


# ---------- subscriptions ----------

def _subscription_json(s):
    return {
        "id": s.pk,
        "plan": s.plan,
        "status": s.status,
        "billing_cycle": s.billing_cycle,
        "price_amount": s.price_amount,
        "currency": s.currency,
        "start_date": s.start_date.isoformat(),
        "end_date": s.end_date.isoformat(),
    }


@api_login_required
@require_POST
def subscription_create(request):
    form = SubscriptionForm(json_body(request))
    if not form.is_valid():
        return form_error_response(form)
    if request.user.subscriptions.filter(status=Subscription.Status.ACTIVE).exists():
        return error_response(ErrorKind.CONFLICT, "You already have an active subscription")

    plan = form.cleaned_data["plan"]
    cycle, price, term = PLAN_TERMS[plan]
    now = timezone.now()
    # No payment gateway: subscriptions go live immediately
    subscription = Subscription.objects.create(
        user=request.user,
        plan=plan,
        status=Subscription.Status.ACTIVE,
        billing_cycle=cycle,
        price_amount=price,
        start_date=now,
        end_date=now + term,
        activated_at=now,
    )
    logger.info("User %s subscribed to %s", request.user.pk, plan)
    return JsonResponse({"success": True, "subscription": _subscription_json(subscription)}, status=201)


@api_login_required
@require_POST
def subscription_cancel(request):
    subscription = request.user.subscriptions.filter(status=Subscription.Status.ACTIVE).first()
    if subscription is None:
        return error_response(ErrorKind.NOT_FOUND, "No active subscription found")
    subscription.status = Subscription.Status.CANCELLED
    subscription.cancelled_at = timezone.now()
    subscription.save(update_fields=["status", "cancelled_at"])
    return JsonResponse({
        "success": True,
        "message": "Subscription cancelled. Premium features remain available until the end of the billing period.",
        "subscription": _subscription_json(subscription),
    })


# ---------- user settings ----------

PRIVACY_FIELDS = {
    User.Role.CANDIDATE: "show_full_name",
    User.Role.INDUSTRY: "show_company_name",
}


def _privacy_json(user):
    field = PRIVACY_FIELDS.get(user.role)
    profile = user.role_profile
    privacy = {field: getattr(profile, field)} if field and profile is not None else {}
    return {"email": user.email, "role": user.role, "privacy": privacy}


@api_login_required
@require_http_methods(["GET", "PUT"])
def user_settings(request):
    user = request.user
    if request.method == "GET":
        return JsonResponse({"settings": _privacy_json(user)})

    data = json_body(request)
    form = PrivacySettingsForm(data)
    if not form.is_valid():
        return form_error_response(form)
    field = PRIVACY_FIELDS.get(user.role)
    profile = user.role_profile
    if field and profile is not None and field in data:
        setattr(profile, field, form.cleaned_data[field])
        profile.save(update_fields=[field, "updated_at"])
        record_audit(request, action="UPDATE_PRIVACY", resource_type="profile", resource_id=profile.pk)
    return JsonResponse({"success": True, "settings": _privacy_json(user)})
