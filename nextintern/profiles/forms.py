from django import forms

from .models import CandidateProfile, CandidateSkill, IndustryProfile


class IndustryProfileForm(forms.ModelForm):
    class Meta:
        model = IndustryProfile
        fields = ("company_name", "industry", "description", "website", "city", "state", "show_company_name")

    def clean_company_name(self):
        name = self.cleaned_data["company_name"].strip()
        if len(name) < 2:
            raise forms.ValidationError("Company name must be at least 2 characters.")
        return name


class CandidateProfileForm(forms.ModelForm):
    class Meta:
        model = CandidateProfile
        fields = ("first_name", "last_name", "headline", "location", "show_full_name")


class CandidateSkillForm(forms.ModelForm):
    level = forms.IntegerField(min_value=0, max_value=10)
    years_of_experience = forms.IntegerField(min_value=0, max_value=50, required=False)

    class Meta:
        model = CandidateSkill
        fields = ("name", "level", "years_of_experience")

    def __init__(self, *args, candidate=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.candidate = candidate

    def clean_name(self):
        name = self.cleaned_data["name"].strip()
        if not name:
            raise forms.ValidationError("Skill name is required.")
        return name

    def clean_years_of_experience(self):
        return self.cleaned_data.get("years_of_experience") or 0

    @property
    def is_duplicate(self) -> bool:
        name = self.cleaned_data.get("name")
        return bool(name) and self.candidate.skills.filter(name__iexact=name).exists()


class EnrollStudentForm(forms.Form):
    candidate_email = forms.EmailField()
