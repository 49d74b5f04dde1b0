# ============================================================================
# FILE: app/core/route_permissions.py
# API route -> required permission table
#
# Keys are "METHOD /api/path" where a bracketed segment ([id]) matches any
# single path segment. Values are:
#   "resource:action"           one permission
#   ["a:read", "a:manage"]      any one of these (OR)
#   None                        public route
# ============================================================================
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Optional, Tuple, Union

from app.core.permissions import Permission, to_permission

PermissionSpec = Union[str, List[str], None]

API_PERMISSIONS: Dict[str, PermissionSpec] = {
    # User Management
    "GET /api/allUser": "user:read",
    "POST /api/allUser": "user:create",
    "GET /api/allUser/[id]": "user:read",
    "PATCH /api/allUser/[id]": "user:update",
    "DELETE /api/allUser/[id]": "user:delete",
    "GET /api/user/me": "profile:read",
    "GET /api/user/profile": "profile:read",
    "PUT /api/user/profile": "profile:update",
    "POST /api/user/change-password": "profile:change-password",

    # Office Management
    "GET /api/office": ["office:read", "office:manage"],
    "POST /api/office": "office:create",
    "GET /api/office/[officeId]": "office:read",
    "PATCH /api/office/[officeId]": "office:update",
    "DELETE /api/office/[officeId]": "office:delete",
    "GET /api/office/[officeId]/availability": "office:read",
    "PUT /api/office/[officeId]/availability": "office:configure",
    "GET /api/office/[officeId]/availability/slots": "office:read",
    "GET /api/office/[officeId]/stats": "office:read",
    "GET /api/office/[officeId]/manager": "office:read",
    "GET /api/admin/office": "office:read",
    "POST /api/admin/office": "office:manage",
    "DELETE /api/admin/office": "office:manage",

    # Service Management
    "GET /api/service": ["service:read"],
    "POST /api/service": "service:create",
    "GET /api/service/[serviceId]": "service:read",
    "PATCH /api/service/[serviceId]": "service:update",
    "DELETE /api/service/[serviceId]": "service:delete",
    "GET /api/service/[serviceId]/stats": "service:read",
    "GET /api/service/[serviceId]/staff": "service:read",
    "POST /api/service/[serviceId]/staff": "service:assign-staff",
    "DELETE /api/service/[serviceId]/staff": "service:assign-staff",

    # Request Management
    "GET /api/request": ["request:read", "request:view-all"],
    "POST /api/request": "request:create",
    "GET /api/request/[id]": "request:read",
    "PATCH /api/request/[id]": "request:update",
    "DELETE /api/request/[id]": "request:delete",
    "POST /api/request/[id]/approve": "request:approve-manager",
    "POST /api/request/[id]/approve-staff": "request:approve-staff",
    "GET /api/request/[id]/can-approve-staff": "request:approve-staff",

    # Appointment Management
    "GET /api/appointment": "appointment:read",
    "POST /api/appointment": "appointment:create",
    "GET /api/appointment/[id]": "appointment:read",
    "PATCH /api/appointment/[id]": "appointment:update",
    "DELETE /api/appointment/[id]": "appointment:delete",
    "GET /api/staff/appointment": "appointment:read",
    "POST /api/staff/appointment/[id]/approve": "appointment:approve",

    # Staff Management
    "GET /api/staff": "staff:read",
    "POST /api/staff": "staff:create",
    "GET /api/staff/[staffId]": "staff:read",
    "PATCH /api/staff/[staffId]": "staff:update",
    "DELETE /api/staff/[staffId]": "staff:delete",
    "GET /api/staff/available-users": "staff:create",
    "GET /api/staff/service": "service:read",
    "GET /api/staff/manager": "staff:read",
    "GET /api/admin/staff": "staff:read",

    # Report Management
    "GET /api/report": "report:read",
    "POST /api/report": "report:create",
    "GET /api/report/[id]": "report:read",
    "PATCH /api/report/[id]": "report:update",
    "DELETE /api/report/[id]": "report:delete",
    "POST /api/report/[id]/approve": "report:approve",
    "GET /api/manager/report": "report:read",
    "POST /api/manager/report": "report:create",
    "GET /api/manager/report/[id]": "report:read",
    "GET /api/staff/report": "report:read",
    "POST /api/staff/report": "report:create",
    "GET /api/staff/report/[id]": "report:read",

    # Gallery Management
    "GET /api/gallery": "gallery:read",
    "POST /api/gallery": "gallery:create",
    "GET /api/gallery/[galleryId]": "gallery:read",
    "PATCH /api/gallery/[galleryId]": "gallery:update",
    "DELETE /api/gallery/[galleryId]": "gallery:delete",

    # Role & Permission Management
    "GET /api/role": "role:read",
    "POST /api/role": "role:create",
    "PATCH /api/role/[roleId]": "role:update",
    "DELETE /api/role/[roleId]": "role:delete",
    "GET /api/role/[roleId]/permissions": "role:read",
    "POST /api/role/[roleId]/permissions": "role:assign-permissions",
    "POST /api/role/[roleId]/permissions/assign-full": "role:assign-permissions",
    "GET /api/customRole": "role:read",
    "POST /api/customRole": "role:create",
    "GET /api/permission": "permission:read",

    # Language & Translation Management
    "GET /api/languages": "language:read",
    "POST /api/languages": "language:manage",
    "GET /api/languages/keys": "language:read",
    "GET /api/languages/[langCode]/[key]": "language:read",
    "PUT /api/languages/[langCode]/[key]": "language:update",
    "GET /api/translations/[lang]": "language:read",

    # About Page Management
    "GET /api/about": "about:read",
    "POST /api/about": "about:manage",
    "GET /api/about/[id]": "about:read",
    "PATCH /api/about/[id]": "about:update",
    "DELETE /api/about/[id]": "about:manage",

    # Administration Page Management
    "GET /api/administration": "administration:read",
    "POST /api/administration": "administration:manage",
    "GET /api/administration/[id]": "administration:read",
    "PATCH /api/administration/[id]": "administration:update",
    "DELETE /api/administration/[id]": "administration:manage",

    # Feedback Management
    "GET /api/feedback/[requestId]": "feedback:read",
    "POST /api/feedback/[requestId]": "feedback:create",

    # File Management
    "POST /api/upload": "file:upload",
    "POST /api/upload/logo": "file:upload",
    "POST /api/upload/logo/[file]": "file:upload",
    "POST /api/upload/request-file": "file:upload",
    "GET /api/filedata/[file]": "file:download",

    # Dashboard & Overview
    "GET /api/admin/overview": "dashboard:admin",
    "GET /api/manager/overview": "dashboard:manager",
    "GET /api/staff/overview": "dashboard:staff",

    # Guest/Public APIs
    "GET /api/guest/data": None,
}


# ============================================================================
# Pattern AST
# ============================================================================

@dataclass(frozen=True)
class Literal:
    value: str

    def matches(self, segment: str) -> bool:
        return segment == self.value


@dataclass(frozen=True)
class Wildcard:
    """A bracketed segment such as [officeId]"""
    name: str

    def matches(self, segment: str) -> bool:
        return segment != ""


Segment = Union[Literal, Wildcard]


def _split_path(path: str) -> Tuple[str, ...]:
    return tuple(path.strip("/").split("/")) if path.strip("/") else ()


@dataclass(frozen=True)
class RoutePattern:
    method: str
    segments: Tuple[Segment, ...]
    source: str

    @classmethod
    def parse(cls, key: str) -> "RoutePattern":
        """Parse a table key like "GET /api/office/[officeId]/stats"."""
        method, _, path = key.strip().partition(" ")
        if not method or not path.startswith("/"):
            raise ValueError(f"Malformed route key '{key}'")

        segments = []
        for part in _split_path(path):
            if part.startswith("[") and part.endswith("]") and len(part) > 2:
                segments.append(Wildcard(part[1:-1]))
            else:
                segments.append(Literal(part))

        return cls(method=method.upper(), segments=tuple(segments), source=path)

    @property
    def has_wildcards(self) -> bool:
        return any(isinstance(s, Wildcard) for s in self.segments)

    def match(self, path_parts: Tuple[str, ...]) -> Optional[Dict[str, str]]:
        """Return captured wildcard values, or None if the path does not match."""
        if len(path_parts) != len(self.segments):
            return None

        params = {}
        for segment, part in zip(self.segments, path_parts):
            if not segment.matches(part):
                return None
            if isinstance(segment, Wildcard):
                params[segment.name] = part
        return params


@dataclass(frozen=True)
class RouteRequirement:
    """What a route needs: any one of `permissions`, or nothing when public."""
    permissions: FrozenSet[Permission]
    public: bool = False
    spec: PermissionSpec = None

    @classmethod
    def from_spec(cls, spec: PermissionSpec) -> "RouteRequirement":
        if spec is None:
            return cls(permissions=frozenset(), public=True, spec=None)
        names = [spec] if isinstance(spec, str) else list(spec)
        if not names:
            raise ValueError("Permission list must not be empty; use None for public routes")
        return cls(permissions=frozenset(to_permission(n) for n in names), spec=spec)

    def is_satisfied_by(self, granted: FrozenSet[Permission]) -> bool:
        if self.public:
            return True
        return not self.permissions.isdisjoint(granted)


@dataclass(frozen=True)
class RouteMatch:
    pattern: RoutePattern
    requirement: RouteRequirement
    params: Dict[str, str]


class RoutePermissionTable:
    """
    Immutable lookup built once from a route -> permission mapping.
    Exact keys win; otherwise the first wildcard pattern (in declaration
    order) for the method that matches the concrete path.
    """

    def __init__(self, table: Dict[str, PermissionSpec]):
        exact = {}
        patterns: Dict[str, List[Tuple[RoutePattern, RouteRequirement]]] = {}

        for key, spec in table.items():
            pattern = RoutePattern.parse(key)
            requirement = RouteRequirement.from_spec(spec)
            exact[(pattern.method, "/" + "/".join(_split_path(pattern.source)))] = (pattern, requirement)
            if pattern.has_wildcards:
                patterns.setdefault(pattern.method, []).append((pattern, requirement))

        self._exact = MappingProxyType(exact)
        self._patterns = MappingProxyType({m: tuple(p) for m, p in patterns.items()})

    def __len__(self) -> int:
        return len(self._exact)

    def lookup(self, method: str, path: str) -> Optional[RouteMatch]:
        method = method.upper()
        parts = _split_path(path.split("?", 1)[0])
        normalized = "/" + "/".join(parts)

        hit = self._exact.get((method, normalized))
        if hit is not None:
            pattern, requirement = hit
            return RouteMatch(pattern=pattern, requirement=requirement, params={})

        for pattern, requirement in self._patterns.get(method, ()):
            params = pattern.match(parts)
            if params is not None:
                return RouteMatch(pattern=pattern, requirement=requirement, params=params)

        return None

    def permissions(self) -> FrozenSet[Permission]:
        """Every permission referenced by the table."""
        found = set()
        for _, requirement in self._exact.values():
            found.update(requirement.permissions)
        return frozenset(found)


ROUTE_PERMISSIONS = RoutePermissionTable(API_PERMISSIONS)


def get_required_permission(method: str, path: str) -> PermissionSpec:
    """
    Get the permission spec for a concrete request path.

    Returns:
        A permission name, a list of names (any one suffices), or None when
        the route is public or not in the table
    """
    match = ROUTE_PERMISSIONS.lookup(method, path)
    if match is None:
        return None
    return match.requirement.spec
