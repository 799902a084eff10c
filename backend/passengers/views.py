# passengers/views.py

from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from rides.serializers import RideSerializer
from services import ride_management

from .permissions import IsPassenger


class PassengerRidesView(APIView):
    """
    GET: Every ride the passenger has requested, in any status.
    """
    permission_classes = [IsAuthenticated, IsPassenger]

    def get(self, request):
        rides = ride_management.list_rides_for_requester(request.user.id)
        return Response(RideSerializer(rides, many=True).data)
