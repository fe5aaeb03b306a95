from django.contrib import admin
from django.contrib.admin import SimpleListFilter
from django.utils.html import format_html

from moderation.transitions import approve_opportunity, deactivate_opportunity, reject_opportunity

from .models import Application, ApplicationStatusChange, Category, Location, Opportunity, SavedOpportunity


class ModerationStateFilter(SimpleListFilter):
    title = "moderation state"
    parameter_name = "mod_state"

    def lookups(self, request, model_admin):
        return Opportunity.ModerationState.choices

    def queryset(self, request, queryset):
        if self.value() == Opportunity.ModerationState.ACTIVE:
            return queryset.filter(is_active=True)
        if self.value() == Opportunity.ModerationState.PENDING:
            return queryset.filter(is_active=False)


@admin.register(Opportunity)
class OpportunityAdmin(admin.ModelAdmin):
    list_display = ["title", "industry", "type", "work_type", "colored_state", "is_premium_only", "created_at"]
    list_filter = [ModerationStateFilter, "type", "work_type", "category", "created_at"]
    search_fields = ["title", "description", "industry__company_name"]
    readonly_fields = ["is_active", "is_premium_only", "view_count", "created_at", "updated_at"]
    actions = ["approve_selected", "reject_selected", "deactivate_selected"]

    fieldsets = (
        ("Listing", {
            "fields": ("industry", "title", "description", "type", "work_type", "category", "location")
        }),
        ("Terms", {
            "fields": ("stipend", "currency", "duration", "application_deadline")
        }),
        ("Moderation", {
            "fields": ("is_active", "is_premium_only", "view_count", "created_at", "updated_at"),
            "classes": ("collapse",)
        }),
    )

    def colored_state(self, obj):
        color = "#10b981" if obj.is_active else "#f59e0b"
        return format_html('<span style="color: {}; font-weight: bold;">{}</span>', color, obj.moderation_state.label)
    colored_state.short_description = "State"

    def approve_selected(self, request, queryset):
        updated = 0
        for opportunity in queryset.filter(is_active=False).select_related("industry__user"):
            approve_opportunity(opportunity)
            updated += 1
        self.message_user(request, f"{updated} opportunit{'y' if updated == 1 else 'ies'} approved.")
    approve_selected.short_description = "Approve selected opportunities"

    def reject_selected(self, request, queryset):
        updated = 0
        for opportunity in queryset.select_related("industry__user"):
            reject_opportunity(opportunity, reason=f"Rejected by {request.user.email}")
            updated += 1
        self.message_user(request, f"{updated} opportunit{'y' if updated == 1 else 'ies'} rejected.")
    reject_selected.short_description = "Reject selected opportunities"

    def deactivate_selected(self, request, queryset):
        updated = 0
        for opportunity in queryset.filter(is_active=True).select_related("industry__user"):
            deactivate_opportunity(opportunity)
            updated += 1
        self.message_user(request, f"{updated} opportunit{'y' if updated == 1 else 'ies'} deactivated.")
    deactivate_selected.short_description = "Deactivate selected opportunities"


class StatusChangeInline(admin.TabularInline):
    model = ApplicationStatusChange
    extra = 0
    readonly_fields = ["old_status", "new_status", "changed_by", "changed_at", "notes"]


@admin.register(Application)
class ApplicationAdmin(admin.ModelAdmin):
    list_display = ["candidate", "opportunity", "status", "applied_at", "reviewed_at"]
    list_filter = ["status", "applied_at", "opportunity__type"]
    search_fields = ["candidate__first_name", "candidate__last_name", "candidate__user__email", "opportunity__title"]
    readonly_fields = ["applied_at", "reviewed_at"]
    inlines = [StatusChangeInline]


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ["name", "slug"]
    prepopulated_fields = {"slug": ("name",)}


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ["city", "state", "country"]
    search_fields = ["city", "state"]


@admin.register(SavedOpportunity)
class SavedOpportunityAdmin(admin.ModelAdmin):
    list_display = ["candidate", "opportunity", "saved_at"]
    search_fields = ["candidate__user__email", "opportunity__title"]
    readonly_fields = ["saved_at"]
