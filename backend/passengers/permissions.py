# passengers/permissions.py
from accounts.models import User
from accounts.permissions import role_required

# Allows access only to users with role == ROLE_USER (passenger).
IsPassenger = role_required(User.PASSENGER)
