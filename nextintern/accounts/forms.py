from django import forms
from django.contrib.auth.password_validation import validate_password

from moderation.models import PlatformSettings

from .models import Message, Subscription, User

# Fields each self-service role has to fill in at sign-up
ROLE_REQUIRED_FIELDS = {
    User.Role.CANDIDATE: ("first_name", "last_name"),
    User.Role.INDUSTRY: ("company_name", "industry"),
    User.Role.INSTITUTE: ("institute_name", "institute_type"),
}


def validate_account_password(password, user=None):
    """Admin-configured minimum length, then Django's password validators."""
    min_length = PlatformSettings.get_value("security", "password_min_length")
    if len(password) < min_length:
        raise forms.ValidationError(
            f"Password must be at least {min_length} characters.", code="password_too_short"
        )
    validate_password(password, user)


class RegistrationForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)
    role = forms.ChoiceField(choices=User.Role.choices)

    first_name = forms.CharField(max_length=80, required=False)
    last_name = forms.CharField(max_length=80, required=False)
    company_name = forms.CharField(max_length=200, required=False)
    industry = forms.CharField(max_length=120, required=False)
    institute_name = forms.CharField(max_length=200, required=False)
    institute_type = forms.CharField(max_length=80, required=False)

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()

    def clean_password(self):
        password = self.cleaned_data["password"]
        validate_account_password(password)
        return password

    def clean(self):
        cleaned = super().clean()
        role = cleaned.get("role")
        for field in ROLE_REQUIRED_FIELDS.get(role, ()):
            if not (cleaned.get(field) or "").strip():
                self.add_error(field, f"{field.replace('_', ' ').capitalize()} is required for {role.lower()} accounts.")
        return cleaned

    @property
    def email_taken(self) -> bool:
        email = self.cleaned_data.get("email")
        return bool(email) and User.objects.filter(email__iexact=email).exists()


class LoginForm(forms.Form):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class PasswordResetRequestForm(forms.Form):
    email = forms.EmailField()


class MessageForm(forms.ModelForm):
    receiver_id = forms.IntegerField()

    class Meta:
        model = Message
        fields = ["subject", "content"]

    def __init__(self, *args, sender=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.sender = sender

    def clean_content(self):
        content = self.cleaned_data["content"].strip()
        if not content:
            raise forms.ValidationError("Message content cannot be empty.")
        return content

    def clean_receiver_id(self):
        receiver_id = self.cleaned_data["receiver_id"]
        if self.sender is not None and receiver_id == self.sender.pk:
            raise forms.ValidationError("You can't send a message to yourself.")
        return receiver_id


class InitiateConversationForm(forms.Form):
    candidate_id = forms.IntegerField()
    opportunity_id = forms.IntegerField()
    subject = forms.CharField(max_length=200, required=False)
    content = forms.CharField()


class SubscriptionForm(forms.Form):
    plan = forms.ChoiceField(choices=Subscription.Plan.choices)


class PrivacySettingsForm(forms.Form):
    """Per-role privacy switches; only the one matching the user's role is applied."""

    show_full_name = forms.BooleanField(required=False)
    show_company_name = forms.BooleanField(required=False)


class ResetPasswordForm(forms.Form):
    password = forms.CharField(strip=False)

    def __init__(self, user, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.user = user

    def clean_password(self):
        password = self.cleaned_data["password"]
        validate_account_password(password, self.user)
        return password

    def save(self):
        self.user.set_password(self.cleaned_data["password"])
        self.user.save(update_fields=["password"])
        return self.user


class ChangePasswordForm(ResetPasswordForm):
    current_password = forms.CharField(strip=False)
    field_order = ["current_password", "password"]

    def clean_current_password(self):
        current = self.cleaned_data["current_password"]
        if not self.user.check_password(current):
            raise forms.ValidationError("Current password is incorrect.")
        return current
