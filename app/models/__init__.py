# app/models/__init__.py
from .base import Base
from .office import Office, Staff
from .role import Role, Permission, RolePermission
from .user import User
from .availability import OfficeAvailability
from .appointment import Appointment

__all__ = [
    "Base",
    "Office",
    "Staff",
    "Role",
    "Permission",
    "RolePermission",
    "User",
    "OfficeAvailability",
    "Appointment",
]
