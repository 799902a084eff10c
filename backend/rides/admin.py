"""Tells what to show in the Django admin interface for rides app"""

from django.contrib import admin
from .models import Ride


@admin.register(Ride)
class RideAdmin(admin.ModelAdmin):
    """Ride admin. Read-only: rides only change through the ride lifecycle."""
    list_display = ['id', 'passenger', 'driver', 'status', 'created_at', 'accepted_at', 'completed_at']
    list_filter = ['status', 'created_at']
    search_fields = ['passenger__username', 'driver__username', 'pickup_location', 'drop_location']
    readonly_fields = ['passenger', 'driver', 'pickup_location', 'drop_location', 'status',
                       'created_at', 'accepted_at', 'completed_at']
    date_hierarchy = 'created_at'

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
