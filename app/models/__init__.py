from .tenant import Base, Tenant
from .room import Room
from .maintenance_request import MaintenanceRequest
from .guest_profile import GuestProfile

__all__ = [
    "Base",
    "Tenant",
    "Room",
    "MaintenanceRequest",
    "GuestProfile",
]
