from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin
from accounts.models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    """Admin panel for custom User model"""

    list_display = [
        "username",
        "role",
        "is_active",
        "is_staff",
        "date_joined",
    ]

    list_filter = [
        "role",
        "is_active",
        "is_staff",
        "date_joined",
    ]

    search_fields = [
        "username",
    ]

    ordering = ("username",)

    # Extend default Django UserAdmin fieldsets
    fieldsets = BaseUserAdmin.fieldsets + (
        ("Rideshare", {"fields": ("role",)}),
    )

    # For create user page in admin
    add_fieldsets = BaseUserAdmin.add_fieldsets + (
        ("Rideshare", {"fields": ("role",)}),
    )

    def get_readonly_fields(self, request, obj=None):
        # Username and role are fixed once the account exists
        if obj is not None:
            return ("username", "role") + tuple(super().get_readonly_fields(request, obj))
        return super().get_readonly_fields(request, obj)
