from django.contrib import admin
from django.urls import path, include

from .views import health_check

urlpatterns = [
    path('admin/', admin.site.urls),
    path("health", health_check), # Health check endpoint

    # Authentication endpoints (at /api/auth/)
    path('api/auth/', include('accounts.urls')),  # register, login

    # Driver APIs (pending requests, accept)
    path('api/v1/driver/', include('drivers.urls')),

    # Passenger APIs (own ride list)
    path('api/v1/user/', include('passengers.urls')),

    # Ride APIs (create, complete)
    path('api/v1/', include('rides.urls')),
]

handler404 = 'rideshare.views.not_found'
handler500 = 'rideshare.views.server_error'
