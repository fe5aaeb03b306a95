from django import forms

from .models import DEFAULT_SETTINGS
from .transitions import Action


class ModerationForm(forms.Form):
    opportunity_id = forms.IntegerField()
    action = forms.ChoiceField(choices=[(a, a.capitalize()) for a in Action.OPPORTUNITY])
    reason = forms.CharField(required=False, max_length=1000)


class IndustryVerificationForm(forms.Form):
    industry_id = forms.IntegerField()
    action = forms.ChoiceField(choices=[(a, a.capitalize()) for a in Action.VERIFICATION])
    reason = forms.CharField(required=False, max_length=1000)


class InstituteVerificationForm(forms.Form):
    institute_id = forms.IntegerField()
    action = forms.ChoiceField(choices=[(a, a.capitalize()) for a in Action.VERIFICATION])
    reason = forms.CharField(required=False, max_length=1000)


class VerificationRequestForm(forms.Form):
    message = forms.CharField(required=False, max_length=1000)


def clean_settings_changes(changes):
    """
    Check a partial settings payload against the known sections and keys.

    Values must have the same type as the default they replace; ints are
    additionally required to be non-negative.
    """
    if not isinstance(changes, dict) or not changes:
        raise forms.ValidationError("Provide at least one settings section to update.")
    cleaned = {}
    for section, values in changes.items():
        defaults = DEFAULT_SETTINGS.get(section)
        if defaults is None:
            raise forms.ValidationError(f"Unknown settings section '{section}'.")
        if not isinstance(values, dict):
            raise forms.ValidationError(f"Section '{section}' must be an object.")
        cleaned[section] = {}
        for key, value in values.items():
            if key not in defaults:
                raise forms.ValidationError(f"Unknown setting '{section}.{key}'.")
            expected = type(defaults[key])
            # bool is an int subclass; keep the two apart
            if type(value) is not expected:
                raise forms.ValidationError(f"'{section}.{key}' must be a {expected.__name__}.")
            if expected is int and value < 0:
                raise forms.ValidationError(f"'{section}.{key}' cannot be negative.")
            cleaned[section][key] = value
    return cleaned


class UserAdminForm(forms.Form):
    """Partial update; a flag left out of the payload stays as it is."""

    is_active = forms.NullBooleanField(required=False)
    is_premium = forms.NullBooleanField(required=False)
