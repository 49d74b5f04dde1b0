# ============================================================================
# FILE: app/services/permission/permission_service.py
# Permission decisions: user -> role -> permissions -> allow / deny
# ============================================================================
from dataclasses import dataclass, asdict
from sqlalchemy.orm import Session
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Tuple, Union
from uuid import UUID
import logging

from app.config.settings import get_settings
from app.core.permissions import Permission, parse_permission_names, to_permission
from app.core.page_permissions import get_menu_permissions, get_page_permission, required_permissions
from app.core.role_rules import role_type
from app.core.route_permissions import (
    ROUTE_PERMISSIONS,
    PermissionSpec,
    RouteRequirement,
)
from app.models.user import User
from app.services.user.user_service import UserService

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized"
INACTIVE_MESSAGE = "User is inactive"


@dataclass
class PermissionCheckResult:
    allowed: bool
    user_id: Optional[UUID] = None
    role_id: Optional[UUID] = None
    role_name: Optional[str] = None
    error: Optional[str] = None
    permission: PermissionSpec = None


@dataclass
class AccessDecision:
    """Outcome of an authorization check, shaped like an HTTP answer."""
    allowed: bool
    status_code: int
    message: str
    user_id: Optional[UUID] = None
    required: PermissionSpec = None

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["user_id"] = str(self.user_id) if self.user_id else None
        return data


def _spec_names(spec: PermissionSpec) -> List[str]:
    if spec is None:
        return []
    return [spec] if isinstance(spec, str) else list(spec)


def missing_permission_message(spec: PermissionSpec) -> str:
    names = _spec_names(spec)
    if len(names) == 1:
        return f"Permission '{names[0]}' required"
    return f"At least one of these permissions required: {', '.join(names)}"


class PermissionService:
    """Resolves what a user may do. Never raises for missing users or roles."""

    @staticmethod
    def get_user_permissions(user: Optional[User]) -> FrozenSet[Permission]:
        """Effective permission set of a user (empty without an active role)."""
        if user is None or user.role is None:
            return frozenset()
        return parse_permission_names(user.role.permission_names)

    @staticmethod
    def get_user_with_permissions(
            db: Session,
            user_id: Union[str, UUID]
    ) -> Tuple[Optional[User], FrozenSet[Permission]]:
        user = UserService.get_user_by_id(db, user_id)
        return user, PermissionService.get_user_permissions(user)

    @staticmethod
    def _account_problem(user: Optional[User]) -> Optional[str]:
        if user is None:
            return "User not found"
        if not user.is_active:
            return INACTIVE_MESSAGE
        if user.role_id is None or user.role is None:
            return "User has no role assigned"
        return None

    @staticmethod
    def _check(
            db: Session,
            user_id: Union[str, UUID],
            names: List[str],
            require_all: bool
    ) -> PermissionCheckResult:
        user = UserService.get_user_by_id(db, user_id)

        problem = PermissionService._account_problem(user)
        if problem:
            return PermissionCheckResult(
                allowed=False,
                user_id=user.id if user else None,
                role_id=user.role_id if user else None,
                role_name=user.role_name if user else None,
                error=problem
            )

        result = PermissionCheckResult(
            allowed=False,
            user_id=user.id,
            role_id=user.role_id,
            role_name=user.role_name
        )

        try:
            wanted = [to_permission(n) for n in names]
        except ValueError as e:
            result.error = str(e)
            return result

        granted = PermissionService.get_user_permissions(user)

        if require_all:
            missing = [p for p in wanted if p not in granted]
            if missing:
                result.error = f"Permission '{missing[0].value}' required"
                return result
        elif not any(p in granted for p in wanted):
            result.error = missing_permission_message(names if len(names) != 1 else names[0])
            return result

        result.allowed = True
        return result

    @staticmethod
    def check_permission(db: Session, user_id: Union[str, UUID], permission_name: str) -> PermissionCheckResult:
        """Does the user hold this exact permission?"""
        return PermissionService._check(db, user_id, [permission_name], require_all=True)

    @staticmethod
    def check_any_permission(
            db: Session,
            user_id: Union[str, UUID],
            permission_names: List[str]
    ) -> PermissionCheckResult:
        """OR semantics: at least one of the names."""
        if not permission_names:
            return PermissionCheckResult(allowed=False, error="No permissions specified")
        return PermissionService._check(db, user_id, list(permission_names), require_all=False)

    @staticmethod
    def check_all_permissions(
            db: Session,
            user_id: Union[str, UUID],
            permission_names: List[str]
    ) -> PermissionCheckResult:
        """AND semantics: every one of the names."""
        if not permission_names:
            return PermissionCheckResult(allowed=False, error="No permissions specified")
        return PermissionService._check(db, user_id, list(permission_names), require_all=True)

    # ========================================================================
    # Request authorization
    # ========================================================================

    @staticmethod
    def authorize(user: Optional[User], requirement: RouteRequirement) -> AccessDecision:
        """Decide a requirement for an already resolved (or missing) user."""
        user_id = user.id if user else None

        if requirement.public:
            return AccessDecision(allowed=True, status_code=200, message="OK", user_id=user_id)

        if user is None:
            return AccessDecision(allowed=False, status_code=401, message=UNAUTHORIZED_MESSAGE,
                                  required=requirement.spec)

        if not user.is_active:
            return AccessDecision(allowed=False, status_code=403, message=INACTIVE_MESSAGE,
                                  user_id=user_id, required=requirement.spec)

        if user.role_id is None or user.role is None:
            return AccessDecision(allowed=False, status_code=403, message="User has no role assigned",
                                  user_id=user_id, required=requirement.spec)

        if not requirement.permissions:
            return AccessDecision(allowed=True, status_code=200, message="OK", user_id=user_id)

        if requirement.is_satisfied_by(PermissionService.get_user_permissions(user)):
            return AccessDecision(allowed=True, status_code=200, message="OK", user_id=user_id,
                                  required=requirement.spec)

        return AccessDecision(
            allowed=False,
            status_code=403,
            message=missing_permission_message(requirement.spec),
            user_id=user_id,
            required=requirement.spec
        )

    @staticmethod
    def authorize_permissions(user: Optional[User], permission_spec: PermissionSpec) -> AccessDecision:
        """authorize() for an explicit name or list of names (OR)."""
        if permission_spec is None:
            requirement = RouteRequirement(permissions=frozenset())
        else:
            requirement = RouteRequirement.from_spec(permission_spec)
        return PermissionService.authorize(user, requirement)

    @staticmethod
    def check_action(
            user: Optional[User],
            method: str,
            path: str,
            unmatched_policy: Optional[str] = None
    ) -> AccessDecision:
        """
        Authorize `METHOD path` against the route permission table.

        Routes missing from the table follow `unmatched_policy`:
        "authenticated" (any active user) or "public".
        """
        policy = unmatched_policy or get_settings().UNMATCHED_ROUTE_POLICY
        match = ROUTE_PERMISSIONS.lookup(method, path)

        if match is None:
            if policy == "public":
                return AccessDecision(allowed=True, status_code=200, message="OK",
                                      user_id=user.id if user else None)
            if user is None:
                return AccessDecision(allowed=False, status_code=401, message=UNAUTHORIZED_MESSAGE)
            if not user.is_active:
                return AccessDecision(allowed=False, status_code=403, message=INACTIVE_MESSAGE,
                                      user_id=user.id)
            return AccessDecision(allowed=True, status_code=200, message="OK", user_id=user.id)

        decision = PermissionService.authorize(user, match.requirement)
        if not decision.allowed:
            logger.info(
                f"Denied {method.upper()} {path} for user {decision.user_id}: {decision.message}"
            )
        return decision

    # ========================================================================
    # Dashboard pages and menus
    # ========================================================================

    @staticmethod
    def check_page_permission(user: Optional[User], path: str) -> PermissionCheckResult:
        """Dashboard page guard for the user's role type."""
        problem = PermissionService._account_problem(user)
        if problem:
            return PermissionCheckResult(allowed=False, user_id=user.id if user else None, error=problem)

        required = get_page_permission(role_type(user.role_name), path)
        result = PermissionCheckResult(
            allowed=True,
            user_id=user.id,
            role_id=user.role_id,
            role_name=user.role_name,
            permission=required
        )

        if required is None:
            return result

        if not required_permissions(required).isdisjoint(PermissionService.get_user_permissions(user)):
            return result

        result.allowed = False
        result.error = f"Permission required: {' or '.join(_spec_names(required))}"
        return result

    @staticmethod
    def default_menu(role_name: Optional[str]) -> List[List[Dict[str, Any]]]:
        """The dashboard menu of a role type as a single group."""
        items = get_menu_permissions(role_type(role_name))
        return [[{"key": i.key, "url": i.url, "permission": i.permission} for i in items]]

    @staticmethod
    def filter_menu(
            db: Session,
            user_id: Union[str, UUID],
            role_name: Optional[str],
            menu_groups: Iterable[Iterable[Dict[str, Any]]]
    ) -> List[List[Dict[str, Any]]]:
        """
        Keep the menu entries the user may open, group structure intact.

        An entry's own "permission" tag wins; otherwise the role type's menu
        table is consulted by key; entries with no requirement stay visible.
        Unknown, inactive or role-less users get an empty menu.
        """
        user = UserService.get_user_by_id(db, user_id)
        if PermissionService._account_problem(user):
            return []

        granted = PermissionService.get_user_permissions(user)
        by_key = {i.key: i.permission for i in get_menu_permissions(role_type(role_name))}

        filtered = []
        for group in menu_groups:
            kept = []
            for item in group:
                spec = item.get("permission")
                if spec is None:
                    spec = by_key.get(item.get("key"))

                if spec is None:
                    kept.append(item)
                    continue

                try:
                    needed = required_permissions(spec)
                except ValueError:
                    logger.warning(f"Menu entry {item.get('key')} names an unknown permission: {spec}")
                    continue

                if not needed.isdisjoint(granted):
                    kept.append(item)
            filtered.append(kept)

        return filtered
