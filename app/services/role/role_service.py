# ============================================================================
# FILE: app/services/role/role_service.py
# Role lifecycle and role -> permission assignment
# ============================================================================
from dataclasses import dataclass
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Any, Dict, List, Optional
from uuid import UUID
import logging

from app.core.role_rules import (
    CUSTOMER_ROLE_NAME,
    expected_permissions,
    is_admin_role,
    is_reserved_role_name,
    widen_if_admin,
)
from app.models.office import Office
from app.models.role import Permission, Role, RolePermission
from app.models.user import User
from app.services.user.user_service import UserService

logger = logging.getLogger(__name__)

RESERVED_NAME_MESSAGE = "Manager and Admin roles can only be created by administrators"
MANAGE_SCOPE_MESSAGE = "Managers can only manage roles for their own office"


@dataclass
class RoleOperationResult:
    success: bool
    status_code: int = 200
    message: str = ""
    data: Optional[Any] = None


@dataclass
class AssignmentResult:
    success: bool
    assigned_count: int = 0
    status_code: int = 200
    message: str = ""
    role_id: Optional[UUID] = None


def _dedupe(ids: List[UUID]) -> List[UUID]:
    seen = set()
    return [i for i in ids if not (i in seen or seen.add(i))]


class RoleService:
    """Role management. Failures come back as results, not exceptions."""

    @staticmethod
    def serialize_role(role: Role) -> Dict[str, Any]:
        return {
            "id": str(role.id),
            "name": role.name,
            "officeId": str(role.office_id) if role.office_id else None,
            "permissions": sorted(role.permission_names),
            "createdAt": role.created_at.isoformat() if role.created_at else None,
        }

    @staticmethod
    def _find_duplicate(db: Session, name: str, office_id: Optional[UUID], exclude_id: Optional[UUID] = None):
        query = db.query(Role).filter(func.upper(Role.name) == name.upper())
        if office_id is None:
            query = query.filter(Role.office_id.is_(None))
        else:
            query = query.filter(Role.office_id == office_id)
        if exclude_id is not None:
            query = query.filter(Role.id != exclude_id)
        return query.first()

    @staticmethod
    def _check_office_scope(
            db: Session,
            actor: User,
            name: str,
            office_id: Optional[UUID],
            cross_office_message: str
    ) -> Optional[RoleOperationResult]:
        """Denial for a non-admin acting outside their own office, else None."""
        if is_admin_role(actor.role_name):
            return None

        if is_reserved_role_name(name):
            return RoleOperationResult(success=False, status_code=403, message=RESERVED_NAME_MESSAGE)

        if office_id is None:
            return RoleOperationResult(
                success=False, status_code=403, message="Only administrators can manage global roles"
            )

        actor_office_id = UserService.get_staff_office_id(db, actor.id)
        if actor_office_id is None:
            return RoleOperationResult(
                success=False, status_code=403, message="Manager must be assigned to an office"
            )

        if actor_office_id != office_id:
            return RoleOperationResult(success=False, status_code=403, message=cross_office_message)

        return None

    @staticmethod
    def _load_permissions(db: Session, permission_ids: List[UUID]) -> Optional[List[Permission]]:
        """All requested catalog rows, or None if any id is unknown."""
        if not permission_ids:
            return []
        permissions = db.query(Permission).filter(Permission.id.in_(permission_ids)).all()
        if len(permissions) != len(permission_ids):
            return None
        return permissions

    @staticmethod
    def _catalog_ids(db: Session) -> List[UUID]:
        return [row.id for row in db.query(Permission.id).order_by(Permission.name).all()]

    @staticmethod
    def create_custom_role(
            db: Session,
            actor: User,
            name: Optional[str],
            office_id: Optional[UUID],
            permission_ids: Optional[List[UUID]] = None
    ) -> RoleOperationResult:
        """
        Create an office role and its permission set in one transaction.

        The stored name is upper-cased. Reserved names (admin, manager and
        their synonyms) are for administrators only; everybody else may only
        create roles for the office they are assigned to.
        """
        if not name or not name.strip():
            return RoleOperationResult(success=False, status_code=400, message="Role name is required")

        if office_id is None:
            return RoleOperationResult(success=False, status_code=400, message="Office ID is required")

        office = db.query(Office).filter(Office.id == office_id).first()
        if not office:
            return RoleOperationResult(success=False, status_code=404, message="Office not found")

        denial = RoleService._check_office_scope(
            db, actor, name, office_id, "Managers can only create roles for their own office"
        )
        if denial:
            logger.warning(f"User {actor.id} denied creating role '{name}' for office {office_id}: {denial.message}")
            return denial

        role_name = name.strip().upper()

        if RoleService._find_duplicate(db, role_name, office_id):
            return RoleOperationResult(
                success=False,
                status_code=400,
                message=f'Role "{role_name}" already exists for this office'
            )

        requested = _dedupe(list(permission_ids or []))
        if RoleService._load_permissions(db, requested) is None:
            return RoleOperationResult(success=False, status_code=400, message="One or more permissions not found")

        final_ids = widen_if_admin(role_name, requested, RoleService._catalog_ids(db))

        try:
            role = Role(name=role_name, office_id=office_id)
            db.add(role)
            db.flush()

            db.add_all(RolePermission(role_id=role.id, permission_id=pid) for pid in final_ids)
            db.commit()
            db.refresh(role)

        except SQLAlchemyError as e:
            logger.error(f"Failed to create role '{role_name}' for office {office_id}: {e}", exc_info=True)
            db.rollback()
            return RoleOperationResult(success=False, status_code=500, message="Failed to create custom role")

        logger.info(f"Created role {role.id} ({role_name}) for office {office_id} with {len(final_ids)} permissions")

        return RoleOperationResult(
            success=True,
            status_code=201,
            message="Custom role created successfully",
            data=RoleService.serialize_role(role)
        )

    @staticmethod
    def rename_role(
            db: Session,
            actor: User,
            role_id: UUID,
            new_name: Optional[str]
    ) -> RoleOperationResult:
        """Rename a role under the same office and reserved-name rules as creation."""
        if not new_name or not new_name.strip():
            return RoleOperationResult(success=False, status_code=400, message="Role name is required")

        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            return RoleOperationResult(success=False, status_code=404, message="Role not found")

        for name in (role.name, new_name):
            denial = RoleService._check_office_scope(
                db, actor, name, role.office_id, MANAGE_SCOPE_MESSAGE
            )
            if denial:
                return denial

        role_name = new_name.strip().upper()

        if RoleService._find_duplicate(db, role_name, role.office_id, exclude_id=role.id):
            return RoleOperationResult(
                success=False,
                status_code=400,
                message=f'Role "{role_name}" already exists for this office'
            )

        old_name = role.name
        try:
            role.name = role_name
            if is_admin_role(role_name):
                held = {rp.permission_id for rp in role.role_permissions}
                widened = widen_if_admin(role_name, list(held), RoleService._catalog_ids(db))
                db.add_all(
                    RolePermission(role_id=role.id, permission_id=pid) for pid in widened if pid not in held
                )
            db.commit()
            db.refresh(role)
        except SQLAlchemyError as e:
            logger.error(f"Failed to rename role {role_id}: {e}", exc_info=True)
            db.rollback()
            return RoleOperationResult(success=False, status_code=500, message="Failed to update role")

        logger.info(f"Renamed role {role.id} from {old_name} to {role_name}")

        return RoleOperationResult(
            success=True,
            message="Role updated successfully",
            data=RoleService.serialize_role(role)
        )

    # ========================================================================
    # Permission assignment
    # ========================================================================

    @staticmethod
    def _assignment_denial(db: Session, actor: Optional[User], role: Role) -> Optional[AssignmentResult]:
        """Scope denial for a permission change by this actor, else None (no actor: internal caller)."""
        if actor is None:
            return None
        denial = RoleService._check_office_scope(db, actor, role.name, role.office_id, MANAGE_SCOPE_MESSAGE)
        if denial is None:
            return None
        logger.warning(f"User {actor.id} denied changing permissions of role {role.id}: {denial.message}")
        return AssignmentResult(
            success=False, status_code=denial.status_code, message=denial.message, role_id=role.id
        )

    @staticmethod
    def assign_permissions(
            db: Session,
            role_id: UUID,
            permission_ids: List[UUID],
            actor: Optional[User] = None
    ) -> AssignmentResult:
        """
        Replace a role's permission set.

        Admin roles are widened to the whole catalog first, so an admin role
        can never lose a permission. Delete and insert run in one transaction.
        With an actor, non-admins may only touch roles of their own office;
        without one (seed scripts) no scope applies.
        """
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            return AssignmentResult(success=False, status_code=404, message="Role not found")

        denial = RoleService._assignment_denial(db, actor, role)
        if denial:
            return denial

        final_ids = _dedupe(list(permission_ids))
        admin = is_admin_role(role.name)
        if admin:
            final_ids = widen_if_admin(role.name, final_ids, RoleService._catalog_ids(db))

        if RoleService._load_permissions(db, final_ids) is None:
            return AssignmentResult(
                success=False, status_code=400, message="One or more permissions not found", role_id=role.id
            )

        try:
            db.query(RolePermission).filter(RolePermission.role_id == role.id).delete(synchronize_session=False)
            db.expire(role, ["role_permissions"])

            db.add_all(RolePermission(role_id=role.id, permission_id=pid) for pid in final_ids)
            db.commit()

        except SQLAlchemyError as e:
            logger.error(f"Failed to assign permissions to role {role_id}: {e}", exc_info=True)
            db.rollback()
            return AssignmentResult(
                success=False, status_code=500, message="Failed to assign permissions", role_id=role.id
            )

        logger.info(f"Assigned {len(final_ids)} permissions to role {role.id} ({role.name})")

        if admin:
            message = "Admin role permissions updated (admin roles always hold every permission)"
        else:
            message = "Permissions assigned successfully"

        return AssignmentResult(
            success=True,
            assigned_count=len(final_ids),
            message=message,
            role_id=role.id
        )

    @staticmethod
    def assign_default_permissions(db: Session, role_id: UUID, actor: Optional[User] = None) -> AssignmentResult:
        """Give a role everything its dashboard needs (whole catalog for admin)."""
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            return AssignmentResult(success=False, status_code=404, message="Role not found")

        denial = RoleService._assignment_denial(db, actor, role)
        if denial:
            return denial

        expected = {p.value for p in expected_permissions(role.name)}
        if not expected:
            return AssignmentResult(
                success=False,
                status_code=400,
                message=f"No default permissions defined for role '{role.name}'",
                role_id=role.id
            )

        ids = [row.id for row in db.query(Permission.id).filter(Permission.name.in_(expected)).all()]
        if len(ids) < len(expected):
            logger.warning(f"{len(expected) - len(ids)} expected permissions for {role.name} are not seeded")

        return RoleService.assign_permissions(db, role.id, ids)

    # ========================================================================
    # Queries
    # ========================================================================

    @staticmethod
    def get_role_permissions(db: Session, role_id: UUID) -> RoleOperationResult:
        """Catalog view of a role: assigned and expected flags per permission."""
        role = db.query(Role).filter(Role.id == role_id).first()
        if not role:
            return RoleOperationResult(success=False, status_code=404, message="Role not found")

        assigned_names = role.permission_names
        expected_names = {p.value for p in expected_permissions(role.name)}
        catalog = db.query(Permission).order_by(Permission.name).all()

        all_permissions = [
            {
                "id": str(p.id),
                "name": p.name,
                "description": p.description,
                "assigned": p.name in assigned_names,
                "expected": p.name in expected_names,
            }
            for p in catalog
        ]

        assigned = [p for p in all_permissions if p["assigned"]]
        expected = [p for p in all_permissions if p["expected"]]
        has_full = bool(expected) and all(p["assigned"] for p in expected)

        return RoleOperationResult(
            success=True,
            data={
                "role": {
                    "id": str(role.id),
                    "name": role.name,
                    "officeId": str(role.office_id) if role.office_id else None,
                },
                "assignedPermissions": assigned,
                "allPermissions": all_permissions,
                "hasFullPermissions": has_full,
                "expectedPermissionCount": len(expected),
                "assignedPermissionCount": len(assigned),
                "assignedCount": len(assigned),
                "totalCount": len(catalog),
                "expectedCount": len(expected_names),
            }
        )

    @staticmethod
    def list_permissions(db: Session) -> List[Dict[str, Any]]:
        """Whole catalog with the roles currently holding each permission."""
        permissions = db.query(Permission).order_by(Permission.name).all()
        return [
            {
                "id": str(p.id),
                "name": p.name,
                "description": p.description,
                "roles": [
                    {"id": str(rp.role.id), "name": rp.role.name}
                    for rp in p.role_permissions
                ],
            }
            for p in permissions
        ]

    @staticmethod
    def list_roles(db: Session, actor: User, office_id: Optional[UUID] = None) -> List[Dict[str, Any]]:
        """Roles visible to the actor: all for admins, own office otherwise."""
        query = db.query(Role)

        if not is_admin_role(actor.role_name):
            actor_office_id = UserService.get_staff_office_id(db, actor.id)
            if actor_office_id is None:
                return []
            office_id = actor_office_id

        if office_id is not None:
            query = query.filter(Role.office_id == office_id)

        return [RoleService.serialize_role(r) for r in query.order_by(Role.name).all()]

    @staticmethod
    def _find_customer_role(db: Session) -> Optional[Role]:
        return db.query(Role).filter(
            func.lower(Role.name) == CUSTOMER_ROLE_NAME,
            Role.office_id.is_(None)
        ).first()

    @staticmethod
    def get_or_create_customer_role(db: Session) -> Role:
        """Global customer role, created with its dashboard permissions if missing."""
        role = RoleService._find_customer_role(db)
        if role:
            return role

        try:
            role = Role(name=CUSTOMER_ROLE_NAME, office_id=None)
            db.add(role)
            db.flush()

            expected = {p.value for p in expected_permissions(CUSTOMER_ROLE_NAME)}
            for permission in db.query(Permission).filter(Permission.name.in_(expected)).all():
                db.add(RolePermission(role_id=role.id, permission_id=permission.id))

            db.commit()
        except IntegrityError:
            # Created concurrently
            db.rollback()
            return RoleService._find_customer_role(db)

        db.refresh(role)
        logger.info(f"Created global customer role {role.id}")
        return role
