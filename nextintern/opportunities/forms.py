from django import forms
from django.db.models import Q

from .models import Application, Category, Location, Opportunity


class OpportunitySearchForm(forms.Form):
    q = forms.CharField(required=False, label="Search")
    type = forms.ChoiceField(required=False, choices=[("", "Any")] + list(Opportunity.Type.choices))
    work_type = forms.ChoiceField(required=False, choices=[("", "Any")] + list(Opportunity.WorkType.choices))
    category = forms.ModelChoiceField(queryset=Category.objects.all(), required=False, to_field_name="slug")
    location = forms.ModelChoiceField(queryset=Location.objects.all(), required=False)
    stipend_min = forms.IntegerField(required=False, min_value=0)

    def filter(self, queryset):
        data = self.cleaned_data
        if data.get("q"):
            q = data["q"]
            queryset = queryset.filter(Q(title__icontains=q) | Q(description__icontains=q))
        if data.get("type"):
            queryset = queryset.filter(type=data["type"])
        if data.get("work_type"):
            queryset = queryset.filter(work_type=data["work_type"])
        if data.get("category"):
            queryset = queryset.filter(category=data["category"])
        if data.get("location"):
            queryset = queryset.filter(location=data["location"])
        if data.get("stipend_min") is not None:
            queryset = queryset.filter(stipend__gte=data["stipend_min"])
        return queryset


class OpportunityForm(forms.ModelForm):
    title = forms.CharField(min_length=10, max_length=100, error_messages={
        "min_length": "Title must be at least 10 characters",
        "max_length": "Title must be at most 100 characters",
    })
    description = forms.CharField(min_length=50, max_length=2000, error_messages={
        "min_length": "Description must be at least 50 characters",
        "max_length": "Description must be at most 2000 characters",
    })
    stipend = forms.IntegerField(required=False, min_value=0)

    class Meta:
        model = Opportunity
        fields = (
            "title", "description", "type", "work_type", "category", "location",
            "stipend", "duration", "application_deadline",
        )

    def clean_title(self):
        return self.cleaned_data["title"].strip()

    def clean(self):
        cleaned = super().clean()
        # Listed type can't change once posted; quota was charged against it
        if self.instance.pk and cleaned.get("type") and cleaned["type"] != self.instance.type:
            self.add_error("type", "Opportunity type cannot be changed after posting.")
        return cleaned


class ApplicationForm(forms.ModelForm):
    class Meta:
        model = Application
        fields = ("cover_letter",)

    def clean_cover_letter(self):
        return (self.cleaned_data.get("cover_letter") or "").strip()


class ApplicationStatusForm(forms.Form):
    status = forms.ChoiceField(choices=[c for c in Application.Status.choices if c[0] != Application.Status.PENDING])
    rejection_reason = forms.CharField(required=False, max_length=1000)

    def clean(self):
        cleaned = super().clean()
        if cleaned.get("status") != Application.Status.REJECTED:
            cleaned["rejection_reason"] = ""
        return cleaned


class ApplicationFilterForm(forms.Form):
    opportunity = forms.IntegerField(required=False, min_value=1)
    status = forms.ChoiceField(required=False, choices=[("", "Any")] + list(Application.Status.choices))

    def filter(self, queryset):
        data = self.cleaned_data
        if data.get("opportunity"):
            queryset = queryset.filter(opportunity_id=data["opportunity"])
        if data.get("status"):
            queryset = queryset.filter(status=data["status"])
        return queryset


class SaveOpportunityForm(forms.Form):
    opportunity_id = forms.IntegerField(min_value=1)
