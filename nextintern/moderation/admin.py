from django.contrib import admin

from .models import PlatformSettings


@admin.register(PlatformSettings)
class PlatformSettingsAdmin(admin.ModelAdmin):
    list_display = ["version", "updated_by", "created_at"]
    readonly_fields = ["version", "data", "updated_by", "created_at"]

    # Versions are append-only; new ones come from the settings endpoint
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
