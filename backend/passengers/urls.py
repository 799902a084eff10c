# passengers/urls.py

from django.urls import path

from .views import PassengerRidesView

app_name = "passengers"

urlpatterns = [
    path("rides", PassengerRidesView.as_view(), name="my-rides"),
]
