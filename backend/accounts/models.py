from django.db import models
from django.contrib.auth.models import AbstractUser


class User(AbstractUser):
    """Extended user model with role selection"""
    PASSENGER = 'ROLE_USER'
    DRIVER = 'ROLE_DRIVER'

    ROLE_CHOICES = [
        (PASSENGER, 'Passenger'),
        (DRIVER, 'Driver'),
    ]

    # Fixed at registration, never changed afterwards
    role = models.CharField(max_length=20, choices=ROLE_CHOICES)

    class Meta:
        db_table = 'users'

    def __str__(self):
        return f"{self.username} ({self.get_role_display()})"
