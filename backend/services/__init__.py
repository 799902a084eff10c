"""
Service layer.

Business logic that sits between the API views and the stores:

    services/
    └── ride_management/    # Ride lifecycle (create, accept, complete, list)
"""
