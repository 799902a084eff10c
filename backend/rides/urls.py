from django.urls import path
from . import views

app_name = 'rides'

urlpatterns = [
    # Passenger creates a ride
    path('rides', views.RideCreateView.as_view(), name='create-ride'),

    # Passenger or driver completes a ride
    path('rides/<int:ride_id>/complete', views.RideCompleteView.as_view(), name='complete-ride'),
]
