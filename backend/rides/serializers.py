from rest_framework import serializers

from .models import Ride


class RideSerializer(serializers.ModelSerializer):
    """Serializer for rides, using the camelCase field names of the public API"""
    pickupLocation = serializers.CharField(source='pickup_location', read_only=True)
    dropLocation = serializers.CharField(source='drop_location', read_only=True)
    userId = serializers.IntegerField(source='passenger_id', read_only=True)
    driverId = serializers.IntegerField(source='driver_id', read_only=True, allow_null=True)
    createdAt = serializers.DateTimeField(source='created_at', read_only=True)
    acceptedAt = serializers.DateTimeField(source='accepted_at', read_only=True, allow_null=True)
    completedAt = serializers.DateTimeField(source='completed_at', read_only=True, allow_null=True)

    class Meta:
        model = Ride
        fields = ['id', 'pickupLocation', 'dropLocation', 'userId', 'driverId',
                  'status', 'createdAt', 'acceptedAt', 'completedAt']
        read_only_fields = fields


class RideCreateSerializer(serializers.Serializer):
    """Serializer for creating rides"""
    pickupLocation = serializers.CharField(max_length=255)
    dropLocation = serializers.CharField(max_length=255)
