# ============================================================================
# FILE: app/core/permissions.py
# Closed catalog of portal permissions (resource:action)
# ============================================================================
import enum
import logging
from typing import FrozenSet, Iterable

logger = logging.getLogger(__name__)


class Permission(str, enum.Enum):
    """Every capability the portal knows about. Seeded into the permissions table."""

    USER_CREATE = "user:create"
    USER_READ = "user:read"
    USER_UPDATE = "user:update"
    USER_DELETE = "user:delete"
    USER_MANAGE = "user:manage"
    OFFICE_CREATE = "office:create"
    OFFICE_READ = "office:read"
    OFFICE_UPDATE = "office:update"
    OFFICE_DELETE = "office:delete"
    OFFICE_MANAGE = "office:manage"
    OFFICE_CONFIGURE = "office:configure"
    SERVICE_CREATE = "service:create"
    SERVICE_READ = "service:read"
    SERVICE_UPDATE = "service:update"
    SERVICE_DELETE = "service:delete"
    SERVICE_MANAGE = "service:manage"
    SERVICE_ASSIGN_STAFF = "service:assign-staff"
    REQUEST_CREATE = "request:create"
    REQUEST_READ = "request:read"
    REQUEST_UPDATE = "request:update"
    REQUEST_DELETE = "request:delete"
    REQUEST_APPROVE_STAFF = "request:approve-staff"
    REQUEST_APPROVE_MANAGER = "request:approve-manager"
    REQUEST_APPROVE_ADMIN = "request:approve-admin"
    REQUEST_VIEW_ALL = "request:view-all"
    APPOINTMENT_CREATE = "appointment:create"
    APPOINTMENT_READ = "appointment:read"
    APPOINTMENT_UPDATE = "appointment:update"
    APPOINTMENT_DELETE = "appointment:delete"
    APPOINTMENT_APPROVE = "appointment:approve"
    APPOINTMENT_MANAGE = "appointment:manage"
    STAFF_CREATE = "staff:create"
    STAFF_READ = "staff:read"
    STAFF_UPDATE = "staff:update"
    STAFF_DELETE = "staff:delete"
    STAFF_ASSIGN_OFFICE = "staff:assign-office"
    STAFF_MANAGE = "staff:manage"
    REPORT_CREATE = "report:create"
    REPORT_READ = "report:read"
    REPORT_UPDATE = "report:update"
    REPORT_DELETE = "report:delete"
    REPORT_SEND = "report:send"
    REPORT_APPROVE = "report:approve"
    REPORT_VIEW_ALL = "report:view-all"
    GALLERY_CREATE = "gallery:create"
    GALLERY_READ = "gallery:read"
    GALLERY_UPDATE = "gallery:update"
    GALLERY_DELETE = "gallery:delete"
    GALLERY_MANAGE = "gallery:manage"
    GALLERY_UPLOAD_IMAGES = "gallery:upload-images"
    ROLE_CREATE = "role:create"
    ROLE_READ = "role:read"
    ROLE_UPDATE = "role:update"
    ROLE_DELETE = "role:delete"
    ROLE_ASSIGN_PERMISSIONS = "role:assign-permissions"
    ROLE_MANAGE = "role:manage"
    PERMISSION_READ = "permission:read"
    PERMISSION_MANAGE = "permission:manage"
    LANGUAGE_READ = "language:read"
    LANGUAGE_UPDATE = "language:update"
    LANGUAGE_MANAGE = "language:manage"
    ABOUT_READ = "about:read"
    ABOUT_UPDATE = "about:update"
    ABOUT_MANAGE = "about:manage"
    ADMINISTRATION_READ = "administration:read"
    ADMINISTRATION_UPDATE = "administration:update"
    ADMINISTRATION_MANAGE = "administration:manage"
    FEEDBACK_READ = "feedback:read"
    FEEDBACK_CREATE = "feedback:create"
    FEEDBACK_MANAGE = "feedback:manage"
    FILE_UPLOAD = "file:upload"
    FILE_DOWNLOAD = "file:download"
    FILE_DELETE = "file:delete"
    FILE_MANAGE = "file:manage"
    DASHBOARD_VIEW = "dashboard:view"
    DASHBOARD_ADMIN = "dashboard:admin"
    DASHBOARD_MANAGER = "dashboard:manager"
    DASHBOARD_STAFF = "dashboard:staff"
    DASHBOARD_CUSTOMER = "dashboard:customer"
    CONFIGURATION_READ = "configuration:read"
    CONFIGURATION_UPDATE = "configuration:update"
    CONFIGURATION_MANAGE = "configuration:manage"
    PROFILE_READ = "profile:read"
    PROFILE_UPDATE = "profile:update"
    PROFILE_CHANGE_PASSWORD = "profile:change-password"
    SMS_SEND = "sms:send"
    OTP_SEND = "otp:send"
    OTP_VERIFY = "otp:verify"


PERMISSION_DESCRIPTIONS = {
    Permission.USER_CREATE: "Create new users",
    Permission.USER_READ: "View users",
    Permission.USER_UPDATE: "Update user information",
    Permission.USER_DELETE: "Delete users",
    Permission.USER_MANAGE: "Full user management (create, read, update, delete)",
    Permission.OFFICE_CREATE: "Create new offices",
    Permission.OFFICE_READ: "View offices",
    Permission.OFFICE_UPDATE: "Update office information",
    Permission.OFFICE_DELETE: "Delete offices",
    Permission.OFFICE_MANAGE: "Full office management",
    Permission.OFFICE_CONFIGURE: "Configure office settings and availability",
    Permission.SERVICE_CREATE: "Create new services",
    Permission.SERVICE_READ: "View services",
    Permission.SERVICE_UPDATE: "Update service information",
    Permission.SERVICE_DELETE: "Delete services",
    Permission.SERVICE_MANAGE: "Full service management",
    Permission.SERVICE_ASSIGN_STAFF: "Assign staff to services",
    Permission.REQUEST_CREATE: "Create service requests",
    Permission.REQUEST_READ: "View service requests",
    Permission.REQUEST_UPDATE: "Update service requests",
    Permission.REQUEST_DELETE: "Delete service requests",
    Permission.REQUEST_APPROVE_STAFF: "Approve/reject requests at staff level",
    Permission.REQUEST_APPROVE_MANAGER: "Approve/reject requests at manager level",
    Permission.REQUEST_APPROVE_ADMIN: "Approve/reject requests at admin level",
    Permission.REQUEST_VIEW_ALL: "View all requests across offices",
    Permission.APPOINTMENT_CREATE: "Create appointments",
    Permission.APPOINTMENT_READ: "View appointments",
    Permission.APPOINTMENT_UPDATE: "Update appointments",
    Permission.APPOINTMENT_DELETE: "Delete appointments",
    Permission.APPOINTMENT_APPROVE: "Approve/reject appointments",
    Permission.APPOINTMENT_MANAGE: "Full appointment management",
    Permission.STAFF_CREATE: "Create staff members",
    Permission.STAFF_READ: "View staff members",
    Permission.STAFF_UPDATE: "Update staff information",
    Permission.STAFF_DELETE: "Delete staff members",
    Permission.STAFF_ASSIGN_OFFICE: "Assign staff to offices",
    Permission.STAFF_MANAGE: "Full staff management",
    Permission.REPORT_CREATE: "Create reports",
    Permission.REPORT_READ: "View reports",
    Permission.REPORT_UPDATE: "Update reports",
    Permission.REPORT_DELETE: "Delete reports",
    Permission.REPORT_SEND: "Send reports to other users",
    Permission.REPORT_APPROVE: "Approve/reject reports",
    Permission.REPORT_VIEW_ALL: "View all reports across offices",
    Permission.GALLERY_CREATE: "Create galleries",
    Permission.GALLERY_READ: "View galleries",
    Permission.GALLERY_UPDATE: "Update galleries",
    Permission.GALLERY_DELETE: "Delete galleries",
    Permission.GALLERY_MANAGE: "Full gallery management",
    Permission.GALLERY_UPLOAD_IMAGES: "Upload images to galleries",
    Permission.ROLE_CREATE: "Create roles",
    Permission.ROLE_READ: "View roles",
    Permission.ROLE_UPDATE: "Update roles",
    Permission.ROLE_DELETE: "Delete roles",
    Permission.ROLE_ASSIGN_PERMISSIONS: "Assign permissions to roles",
    Permission.ROLE_MANAGE: "Full role management",
    Permission.PERMISSION_READ: "View permissions",
    Permission.PERMISSION_MANAGE: "Manage permissions",
    Permission.LANGUAGE_READ: "View languages and translations",
    Permission.LANGUAGE_UPDATE: "Update translations",
    Permission.LANGUAGE_MANAGE: "Full language management",
    Permission.ABOUT_READ: "View about page content",
    Permission.ABOUT_UPDATE: "Update about page content",
    Permission.ABOUT_MANAGE: "Full about page management",
    Permission.ADMINISTRATION_READ: "View administration page content",
    Permission.ADMINISTRATION_UPDATE: "Update administration page content",
    Permission.ADMINISTRATION_MANAGE: "Full administration page management",
    Permission.FEEDBACK_READ: "View feedback and ratings",
    Permission.FEEDBACK_CREATE: "Submit feedback and ratings",
    Permission.FEEDBACK_MANAGE: "Full feedback management",
    Permission.FILE_UPLOAD: "Upload files",
    Permission.FILE_DOWNLOAD: "Download files",
    Permission.FILE_DELETE: "Delete files",
    Permission.FILE_MANAGE: "Full file management",
    Permission.DASHBOARD_VIEW: "View dashboard overview",
    Permission.DASHBOARD_ADMIN: "View admin dashboard with system-wide stats",
    Permission.DASHBOARD_MANAGER: "View manager dashboard with office stats",
    Permission.DASHBOARD_STAFF: "View staff dashboard",
    Permission.DASHBOARD_CUSTOMER: "View customer dashboard",
    Permission.CONFIGURATION_READ: "View system configuration",
    Permission.CONFIGURATION_UPDATE: "Update system configuration",
    Permission.CONFIGURATION_MANAGE: "Full configuration management",
    Permission.PROFILE_READ: "View own profile",
    Permission.PROFILE_UPDATE: "Update own profile",
    Permission.PROFILE_CHANGE_PASSWORD: "Change password",
    Permission.SMS_SEND: "Send SMS messages",
    Permission.OTP_SEND: "Send OTP codes",
    Permission.OTP_VERIFY: "Verify OTP codes",
}

ALL_PERMISSIONS: FrozenSet[Permission] = frozenset(Permission)


def to_permission(name: str) -> Permission:
    """
    Resolve a permission name to its catalog member.

    Raises:
        ValueError: If the name is not part of the catalog
    """
    try:
        return Permission(name.strip())
    except ValueError:
        raise ValueError(f"Unknown permission '{name}'")


def parse_permission_names(names: Iterable[str]) -> FrozenSet[Permission]:
    """
    Convert stored permission names into catalog members.
    Names that are not in the catalog are skipped (and logged) so a stale
    row never grants anything.
    """
    permissions = set()
    for name in names:
        try:
            permissions.add(to_permission(name))
        except ValueError:
            logger.warning(f"Ignoring permission '{name}' that is not in the catalog")
    return frozenset(permissions)
