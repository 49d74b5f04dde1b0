# app/schemas/__init__.py
from .availability import (
    DayScheduleSchema,
    UnavailableDateRangeSchema,
    AvailabilityUpdate,
)

from .role import (
    CustomRoleCreate,
    RoleUpdate,
    PermissionAssignment,
    CheckActionRequest,
    MenuItem,
    MenuFilterRequest,
)

__all__ = [
    "DayScheduleSchema",
    "UnavailableDateRangeSchema",
    "AvailabilityUpdate",
    "CustomRoleCreate",
    "RoleUpdate",
    "PermissionAssignment",
    "CheckActionRequest",
    "MenuItem",
    "MenuFilterRequest",
]
