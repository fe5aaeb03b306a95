from django.contrib import admin

from moderation.transitions import approve_verification

from .models import CandidateProfile, CandidateSkill, IndustryProfile, InstituteProfile, InstituteStudent


class CandidateSkillInline(admin.TabularInline):
    model = CandidateSkill
    extra = 0
    readonly_fields = ("proficiency",)


@admin.register(CandidateProfile)
class CandidateProfileAdmin(admin.ModelAdmin):
    list_display = ("user", "first_name", "last_name", "anonymous_id", "show_full_name", "updated_at")
    search_fields = ("first_name", "last_name", "user__email", "anonymous_id")
    readonly_fields = ("anonymous_id",)
    inlines = [CandidateSkillInline]


@admin.register(IndustryProfile)
class IndustryProfileAdmin(admin.ModelAdmin):
    list_display = ("company_name", "user", "industry", "anonymous_id", "show_company_name", "is_verified")
    list_filter = ("is_verified", "show_company_name")
    search_fields = ("company_name", "user__email", "anonymous_id")
    readonly_fields = ("anonymous_id", "verified_at")
    actions = ["verify_profiles"]

    def verify_profiles(self, request, queryset):
        count = 0
        for profile in queryset.filter(is_verified=False):
            approve_verification(profile)
            count += 1
        self.message_user(request, f"{count} industr{'y' if count == 1 else 'ies'} verified.")
    verify_profiles.short_description = "Verify selected industries"


@admin.register(InstituteProfile)
class InstituteProfileAdmin(admin.ModelAdmin):
    list_display = ("institute_name", "user", "institute_type", "is_verified")
    list_filter = ("is_verified",)
    search_fields = ("institute_name", "user__email")
    readonly_fields = ("verified_at",)
    actions = ["verify_profiles"]

    def verify_profiles(self, request, queryset):
        count = 0
        for profile in queryset.filter(is_verified=False):
            approve_verification(profile)
            count += 1
        self.message_user(request, f"{count} institute(s) verified.")
    verify_profiles.short_description = "Verify selected institutes"


@admin.register(InstituteStudent)
class InstituteStudentAdmin(admin.ModelAdmin):
    list_display = ("candidate", "institute", "is_active", "enrolled_at")
    list_filter = ("is_active",)
