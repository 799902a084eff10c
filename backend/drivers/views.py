from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from rides.serializers import RideSerializer
from services import ride_management

from .permissions import IsDriver


class PendingRideRequestsView(APIView):
    """
    GET: Rides waiting for a driver (status REQUESTED).
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def get(self, request):
        rides = ride_management.list_pending_rides()
        return Response(RideSerializer(rides, many=True).data)


class AcceptRideView(APIView):
    """
    POST: Driver accepts a pending ride.
    """
    permission_classes = [IsAuthenticated, IsDriver]

    def post(self, request, ride_id: int):
        ride = ride_management.accept_ride(ride_id, driver_id=request.user.id)
        return Response(RideSerializer(ride).data)
