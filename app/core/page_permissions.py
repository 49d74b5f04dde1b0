# ============================================================================
# FILE: app/core/page_permissions.py
# Dashboard pages and menu entries -> required permission, per role type
# ============================================================================
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from app.core.route_permissions import PermissionSpec, RoutePattern, RouteRequirement


@dataclass(frozen=True)
class PagePermission:
    role: str
    path: str
    permission: PermissionSpec
    description: Optional[str] = None


@dataclass(frozen=True)
class MenuItemPermission:
    key: str
    url: str
    permission: PermissionSpec


PAGE_PERMISSIONS: Tuple[PagePermission, ...] = (
    # Admin Pages
    PagePermission("admin", "", "dashboard:admin", "Admin overview"),
    PagePermission("admin", "office", "office:read", "Office management"),
    PagePermission("admin", "office/[id]", "office:read", "Office details"),
    PagePermission("admin", "myoffice", "office:read", "My office"),
    PagePermission("admin", "userManagement", "user:read", "User management"),
    PagePermission("admin", "roles", "role:read", "Role management"),
    PagePermission("admin", "roles/create", "role:create", "Create role"),
    PagePermission("admin", "roles/[id]/edit", "role:update", "Edit role"),
    PagePermission("admin", "setPermission", "role:assign-permissions", "Assign permissions"),
    PagePermission("admin", "languages", "language:read", "Language management"),
    PagePermission("admin", "configuration/gallery", "gallery:read", "Gallery management"),
    PagePermission("admin", "configuration/about", "about:read", "About page management"),
    PagePermission("admin", "report", "report:view-all", "Report management"),
    PagePermission("admin", "requestManagement", "request:view-all", "Request management"),
    PagePermission("admin", "profile", "profile:read", "Profile"),
    PagePermission("admin", "pdf", "file:download", "PDF viewer"),

    # Manager Pages
    PagePermission("manager", "", "dashboard:manager", "Manager overview"),
    PagePermission("manager", "services", "service:read", "Service management"),
    PagePermission("manager", "services/add", "service:create", "Add service"),
    PagePermission("manager", "services/[serviceId]", "service:read", "Service details"),
    PagePermission("manager", "services/[serviceId]/edit", "service:update", "Edit service"),
    PagePermission("manager", "staff", "staff:read", "Staff management"),
    PagePermission("manager", "staff/add", "staff:create", "Add staff"),
    PagePermission("manager", "staff/[staffId]/edit", "staff:update", "Edit staff"),
    PagePermission("manager", "requestmanagement", "request:read", "Request management"),
    PagePermission("manager", "request", "request:read", "Request details"),
    PagePermission("manager", "report", "report:read", "Report management"),
    PagePermission("manager", "appointment", "appointment:read", "Appointment management"),
    PagePermission("manager", "configuration/office", "office:read", "Office configuration"),
    PagePermission("manager", "configuration/avaibility", "office:configure", "Availability configuration"),
    PagePermission("manager", "profile", "profile:read", "Profile"),

    # Staff Pages
    PagePermission("staff", "", "dashboard:staff", "Staff overview"),
    PagePermission("staff", "requestManagement", "request:read", "Request management"),
    PagePermission("staff", "appointment", "appointment:read", "Appointment management"),
    PagePermission("staff", "serviceManagement", "service:read", "Service management"),
    PagePermission("staff", "report", "report:read", "Report management"),
    PagePermission("staff", "profile", "profile:read", "Profile"),

    # Customer Pages
    PagePermission("customer", "", "dashboard:customer", "Customer overview"),
    PagePermission("customer", "applyservice", "request:create", "Apply for service"),
    PagePermission("customer", "request", "request:read", "My requests"),
    PagePermission("customer", "appointment", "appointment:read", "My appointments"),
    PagePermission("customer", "feedback", "feedback:read", "Feedback"),
    PagePermission("customer", "profile", "profile:read", "Profile"),
    PagePermission("customer", "settings", "profile:update", "Settings"),
)


MENU_PERMISSIONS: Dict[str, Tuple[MenuItemPermission, ...]] = {
    "admin": (
        MenuItemPermission("overview", "", "dashboard:admin"),
        MenuItemPermission("office", "office", "office:read"),
        MenuItemPermission("myoffice", "myoffice", "office:read"),
        MenuItemPermission("userManagement", "userManagement", "user:read"),
        MenuItemPermission("roles", "roles", "role:read"),
        MenuItemPermission("languages", "languages", "language:read"),
        MenuItemPermission("gallery", "configuration/gallery", "gallery:read"),
        MenuItemPermission("about", "configuration/about", "about:read"),
        MenuItemPermission("report", "report", "report:view-all"),
        MenuItemPermission("requestManagement", "requestManagement", "request:view-all"),
    ),
    "manager": (
        MenuItemPermission("overview", "", "dashboard:manager"),
        MenuItemPermission("services", "services", "service:read"),
        MenuItemPermission("staff", "staff", "staff:read"),
        MenuItemPermission("requestManagement", "requestmanagement", "request:read"),
        MenuItemPermission("report", "report", "report:read"),
        MenuItemPermission("configuration", "configuration/office", "office:read"),
        MenuItemPermission("availability", "configuration/avaibility", "office:configure"),
    ),
    "staff": (
        MenuItemPermission("overview", "", "dashboard:staff"),
        MenuItemPermission("requestManagement", "requestManagement", "request:read"),
        MenuItemPermission("appointment", "appointment", "appointment:read"),
        MenuItemPermission("serviceManagement", "serviceManagement", "service:read"),
        MenuItemPermission("report", "report", "report:read"),
    ),
    "customer": (
        MenuItemPermission("overview", "", "dashboard:customer"),
        MenuItemPermission("applyService", "applyservice", "request:create"),
        MenuItemPermission("request", "request", "request:read"),
        MenuItemPermission("appointment", "appointment", "appointment:read"),
        MenuItemPermission("feedback", "feedback", "feedback:create"),
        MenuItemPermission("profile", "profile", "profile:read"),
    ),
}


def _normalize_page_path(path: str) -> str:
    return path.strip().strip("/").lower()


def get_page_permission(role_type: str, path: str) -> PermissionSpec:
    """
    Get the permission for a dashboard page of a role type.
    Exact path first, then bracketed patterns. None when the page is unlisted.
    """
    role_type = (role_type or "").lower()
    normalized = _normalize_page_path(path)
    candidates = [p for p in PAGE_PERMISSIONS if p.role == role_type]

    for page in candidates:
        if page.path.lower() == normalized:
            return page.permission

    parts = tuple(normalized.split("/")) if normalized else ()
    for page in candidates:
        pattern = RoutePattern.parse(f"GET /{page.path.lower()}")
        if pattern.has_wildcards and pattern.match(parts) is not None:
            return page.permission

    return None


def get_role_page_permissions(role_type: str) -> List[PagePermission]:
    role_type = (role_type or "").lower()
    return [p for p in PAGE_PERMISSIONS if p.role == role_type]


def get_menu_permissions(role_type: str) -> Tuple[MenuItemPermission, ...]:
    return MENU_PERMISSIONS.get((role_type or "").lower(), ())


def required_permissions(spec: PermissionSpec) -> frozenset:
    """Catalog members named by a spec (empty for None)."""
    return RouteRequirement.from_spec(spec).permissions


def permissions_for_role_type(role_type: str) -> frozenset:
    """Union of every permission the role type's pages and menu entries require."""
    found = set()
    for page in get_role_page_permissions(role_type):
        found.update(required_permissions(page.permission))
    for item in get_menu_permissions(role_type):
        found.update(required_permissions(item.permission))
    return frozenset(found)


# Fail at import if a table names a permission outside the catalog
for _role in MENU_PERMISSIONS:
    permissions_for_role_type(_role)
del _role

