# ============================================================================
# FILE: app/core/role_rules.py
# Business rules about role names. Pure functions, no database access.
# ============================================================================
from typing import FrozenSet, Iterable, List, Optional, TypeVar

from app.core.permissions import ALL_PERMISSIONS, Permission
from app.core.page_permissions import permissions_for_role_type

T = TypeVar("T")

ADMIN_ROLE_NAMES = frozenset({"admin", "administrator"})
MANAGER_ROLE_NAMES = frozenset({"manager", "office_manager"})

# Names only an administrator may create or rename a role into
RESERVED_ROLE_NAMES = ADMIN_ROLE_NAMES | MANAGER_ROLE_NAMES | frozenset({"officemanager", "office manager"})

CUSTOMER_ROLE_NAME = "customer"
STAFF_ROLE_NAME = "staff"


def normalize_role_name(name: Optional[str]) -> str:
    return (name or "").strip().lower()


def is_admin_role(name: Optional[str]) -> bool:
    return normalize_role_name(name) in ADMIN_ROLE_NAMES


def is_manager_role(name: Optional[str]) -> bool:
    return normalize_role_name(name) in MANAGER_ROLE_NAMES


def is_reserved_role_name(name: Optional[str]) -> bool:
    return normalize_role_name(name) in RESERVED_ROLE_NAMES


def role_type(name: Optional[str]) -> Optional[str]:
    """
    Dashboard the role belongs to: admin, manager, staff or customer.
    Custom office roles are staff roles. None for a missing role.
    """
    normalized = normalize_role_name(name)
    if not normalized:
        return None
    if normalized in ADMIN_ROLE_NAMES:
        return "admin"
    if normalized in MANAGER_ROLE_NAMES:
        return "manager"
    if normalized == CUSTOMER_ROLE_NAME:
        return "customer"
    return STAFF_ROLE_NAME


def widen_if_admin(
        role_name: Optional[str],
        requested_ids: Iterable[T],
        full_catalog_ids: Iterable[T]
) -> List[T]:
    """
    Final permission ids to persist for a role.

    Admin roles must always hold the whole catalog, so the request is
    unioned with it instead of being rejected. Other roles keep exactly the
    requested ids. Duplicates are dropped, first-seen order is kept.
    """
    ids = list(requested_ids)
    if is_admin_role(role_name):
        ids = list(full_catalog_ids) + ids

    seen = set()
    final = []
    for permission_id in ids:
        if permission_id not in seen:
            seen.add(permission_id)
            final.append(permission_id)
    return final


def expected_permissions(role_name: Optional[str]) -> FrozenSet[Permission]:
    """
    Permissions a role of this type needs for its dashboard.

    Admin: the whole catalog. Other role types: everything their page and
    menu tables require, so the expectation cannot drift from what is
    enforced. Custom office roles expect nothing.
    """
    normalized = normalize_role_name(role_name)
    if normalized in ADMIN_ROLE_NAMES:
        return ALL_PERMISSIONS
    if normalized in MANAGER_ROLE_NAMES:
        return permissions_for_role_type("manager")
    if normalized in (STAFF_ROLE_NAME, CUSTOMER_ROLE_NAME):
        return permissions_for_role_type(normalized)
    return frozenset()
