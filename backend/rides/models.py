from django.db import models
from django.conf import settings


class Ride(models.Model):
    """A passenger's trip request, tracked through REQUESTED -> ACCEPTED -> COMPLETED"""

    REQUESTED = 'REQUESTED'
    ACCEPTED = 'ACCEPTED'
    COMPLETED = 'COMPLETED'

    STATUS_CHOICES = [
        (REQUESTED, 'Requested'),
        (ACCEPTED, 'Accepted'),
        (COMPLETED, 'Completed'),
    ]

    # Requester, fixed at creation
    passenger = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='requested_rides'
    )

    # Set only once the ride is accepted
    driver = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='accepted_rides'
    )

    pickup_location = models.CharField(max_length=255)
    drop_location = models.CharField(max_length=255)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=REQUESTED, db_index=True)

    # Timestamps
    created_at = models.DateTimeField()
    accepted_at = models.DateTimeField(null=True, blank=True)
    completed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'rides'
        ordering = ['id']

    def __str__(self):
        return f"Ride #{self.id} - {self.pickup_location} -> {self.drop_location} - {self.status}"
