import logging

from django.conf import settings
from rest_framework import status
from rest_framework.views import APIView
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from passengers.permissions import IsPassenger
from common.exceptions import ForbiddenError
from services import ride_management
from services.ride_management import RideNotFoundError
from .serializers import RideSerializer, RideCreateSerializer
from .stores import get_ride_store

logger = logging.getLogger(__name__)


class RideCreateView(APIView):
    """
    POST: Passenger requests a ride.

    POST Body:
    {
        "pickupLocation": "Koramangala",
        "dropLocation": "Indiranagar"
    }
    """
    permission_classes = [IsAuthenticated, IsPassenger]

    def post(self, request):
        serializer = RideCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        ride = ride_management.create_ride(
            pickup_location=serializer.validated_data['pickupLocation'],
            drop_location=serializer.validated_data['dropLocation'],
            requester_id=request.user.id,
        )

        return Response(RideSerializer(ride).data, status=status.HTTP_200_OK)


class RideCompleteView(APIView):
    """
    POST: Complete an accepted ride.

    Open to any authenticated caller unless
    RIDESHARE["RESTRICT_COMPLETE_TO_PARTICIPANTS"] is set, in which case only
    the ride's passenger or its assigned driver may complete it.
    """
    permission_classes = [IsAuthenticated]

    def post(self, request, ride_id: int):
        if settings.RIDESHARE.get("RESTRICT_COMPLETE_TO_PARTICIPANTS"):
            self.check_participant(request, ride_id)

        ride = ride_management.complete_ride(ride_id)
        return Response(RideSerializer(ride).data, status=status.HTTP_200_OK)

    def check_participant(self, request, ride_id):
        ride = get_ride_store().get(ride_id)
        if ride is None:
            raise RideNotFoundError(f"Ride not found with id: {ride_id}")
        if request.user.id not in (ride.passenger_id, ride.driver_id):
            logger.warning("User %s tried to complete ride %s they are not part of",
                           request.user.id, ride_id)
            raise ForbiddenError("Only the ride's passenger or assigned driver can complete it")
