from django.urls import path
from .views import (
    PendingRideRequestsView,
    AcceptRideView,
)

app_name = "drivers"

urlpatterns = [
    path("rides/requests", PendingRideRequestsView.as_view(), name="pending-rides"),
    path("rides/<int:ride_id>/accept", AcceptRideView.as_view(), name="accept-ride"),
]
