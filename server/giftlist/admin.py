from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from giftlist.models import Challenge, Credential, User


class CredentialInline(admin.TabularInline):
    model = Credential
    extra = 0
    fields = ["device_name", "credential_id", "sign_count", "flagged_for_review", "last_used_at"]
    readonly_fields = ["credential_id", "sign_count", "last_used_at"]


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin for custom User model."""

    list_display = ["display_name", "id", "has_pending_invite", "is_staff", "created_at"]
    list_filter = ["is_staff", "is_active", "created_at"]
    search_fields = ["id", "display_name", "username"]
    readonly_fields = ["id", "invite_token", "invite_expires", "created_at", "updated_at"]
    inlines = [CredentialInline]

    fieldsets = (
        (None, {"fields": ("id", "display_name", "username")}),
        ("Invite", {"fields": ("invite_token", "invite_expires")}),
        (
            "Permissions",
            {
                "fields": (
                    "is_active",
                    "is_staff",
                    "is_superuser",
                    "groups",
                    "user_permissions",
                )
            },
        ),
        ("Important Dates", {"fields": ("last_login", "created_at", "updated_at")}),
    )

    ordering = ["-created_at"]

    def has_add_permission(self, request):
        # Users are created through invites (create_invite / POST /api/admin/invite/)
        return False

    @admin.display(boolean=True, description="Pending invite")
    def has_pending_invite(self, obj):
        return obj.has_valid_invite()


@admin.register(Credential)
class CredentialAdmin(admin.ModelAdmin):
    """Admin for Credential model."""

    list_display = ["device_name", "user", "sign_count", "flagged_for_review", "created_at", "last_used_at"]
    list_filter = ["flagged_for_review", "created_at", "last_used_at"]
    search_fields = ["device_name", "user__display_name", "credential_id"]
    readonly_fields = ["credential_id", "public_key", "sign_count", "transports", "created_at", "last_used_at"]

    fieldsets = (
        (None, {"fields": ("user", "device_name", "flagged_for_review")}),
        ("Credential Data", {"fields": ("credential_id", "public_key", "sign_count", "transports")}),
        ("Timestamps", {"fields": ("created_at", "last_used_at")}),
    )

    actions = ["clear_review_flag"]

    def clear_review_flag(self, request, queryset):
        """Mark selected credentials as reviewed."""
        count = queryset.update(flagged_for_review=False)
        self.message_user(request, f"{count} credentials cleared")

    clear_review_flag.short_description = "Clear review flag"


@admin.register(Challenge)
class ChallengeAdmin(admin.ModelAdmin):
    """Read-only view of in-flight ceremony challenges."""

    list_display = ["owner_key", "created_at", "expires_at"]
    search_fields = ["owner_key"]
    readonly_fields = ["owner_key", "value", "created_at", "expires_at"]
    date_hierarchy = "created_at"

    def has_add_permission(self, request):
        return False
