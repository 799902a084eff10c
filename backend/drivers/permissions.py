# drivers/permissions.py
from accounts.models import User
from accounts.permissions import role_required

# Allows access only to users with role == ROLE_DRIVER.
IsDriver = role_required(User.DRIVER)
