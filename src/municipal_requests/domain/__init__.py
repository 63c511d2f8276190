"""Domain types for the request engine: service requests, priorities, statuses and IDs.

The domain layer has no IO side effects.
"""

from municipal_requests.domain.models import Priority, RequestStatus, ServiceRequest

__all__ = ["Priority", "RequestStatus", "ServiceRequest"]
