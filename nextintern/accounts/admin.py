from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as DjangoUserAdmin

from .models import AuditLog, Message, Notification, Subscription, User


@admin.register(User)
class UserAdmin(DjangoUserAdmin):
    fieldsets = DjangoUserAdmin.fieldsets + (
        ("Marketplace", {"fields": ("role", "is_premium", "premium_expires_at")}),
    )
    add_fieldsets = DjangoUserAdmin.add_fieldsets + (
        ("Marketplace", {"fields": ("email", "role")}),
    )
    list_display = ("username", "email", "role", "is_premium", "is_staff", "is_active")
    list_filter = ("role", "is_premium", "is_staff", "is_superuser", "is_active")

    def get_readonly_fields(self, request, obj=None):
        readonly = super().get_readonly_fields(request, obj)
        # Role is fixed once the account exists
        return tuple(readonly) + ("role",) if obj else readonly


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ["sender", "receiver", "subject", "sent_at", "is_read"]
    list_filter = ["is_read", "sent_at"]
    search_fields = ["sender__email", "receiver__email", "subject", "content"]
    readonly_fields = ["sender", "receiver", "subject", "content", "sent_at"]


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ["user", "kind", "title", "is_read", "created_at"]
    list_filter = ["kind", "is_read"]
    search_fields = ["user__email", "title"]


@admin.register(Subscription)
class SubscriptionAdmin(admin.ModelAdmin):
    list_display = ["user", "plan", "status", "price_amount", "currency", "start_date", "end_date"]
    list_filter = ["plan", "status", "billing_cycle"]
    search_fields = ["user__email"]
    readonly_fields = ["activated_at", "cancelled_at"]


@admin.register(AuditLog)
class AuditLogAdmin(admin.ModelAdmin):
    list_display = ["user", "action", "resource_type", "resource_id", "target_user", "created_at"]
    list_filter = ["action", "resource_type"]
    search_fields = ["user__email", "target_user__email", "resource_id"]

    def has_change_permission(self, request, obj=None):
        return False
