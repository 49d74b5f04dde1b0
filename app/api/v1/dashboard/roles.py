# app/api/v1/dashboard/roles.py
"""
Role and permission management endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional
from uuid import UUID
import logging

from app.api.dependencies import enforce_route_permission, get_current_active_user
from app.config.database import get_db
from app.models.user import User
from app.schemas.role import CustomRoleCreate, PermissionAssignment, RoleUpdate
from app.services.role.role_service import AssignmentResult, RoleOperationResult, RoleService

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Roles"], dependencies=[Depends(enforce_route_permission)])


def _raise_if_failed(result) -> None:
    if not result.success:
        raise HTTPException(status_code=result.status_code, detail=result.message)


def _assignment_response(result: AssignmentResult) -> dict:
    _raise_if_failed(result)
    return {
        "success": True,
        "message": result.message,
        "roleId": str(result.role_id),
        "assignedCount": result.assigned_count,
    }


# ============================================================================
# Permission catalog
# ============================================================================

@router.get("/permission")
async def list_permissions(db: Session = Depends(get_db)):
    """Every permission with the roles that currently hold it"""
    permissions = RoleService.list_permissions(db)
    return {"permissions": permissions, "total": len(permissions)}


# ============================================================================
# Custom (office) roles
# ============================================================================

@router.get("/customRole")
async def list_custom_roles(
        office_id: Optional[UUID] = Query(None, alias="officeId"),
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Roles visible to the caller plus the permission catalog for role forms"""
    return {
        "roles": RoleService.list_roles(db, current_user, office_id),
        "permissions": RoleService.list_permissions(db),
    }


@router.post("/customRole", status_code=status.HTTP_201_CREATED)
async def create_custom_role(
        payload: CustomRoleCreate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    result: RoleOperationResult = RoleService.create_custom_role(
        db=db,
        actor=current_user,
        name=payload.name,
        office_id=payload.office_id,
        permission_ids=payload.permission_ids
    )
    _raise_if_failed(result)
    return {"success": True, "message": result.message, "role": result.data}


# ============================================================================
# Single role
# ============================================================================

@router.patch("/role/{role_id}")
async def rename_role(
        role_id: UUID,
        payload: RoleUpdate,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    result = RoleService.rename_role(db, current_user, role_id, payload.name)
    _raise_if_failed(result)
    return {"success": True, "message": result.message, "role": result.data}


@router.get("/role/{role_id}/permissions")
async def get_role_permissions(role_id: UUID, db: Session = Depends(get_db)):
    result = RoleService.get_role_permissions(db, role_id)
    _raise_if_failed(result)
    return {"success": True, **result.data}


@router.post("/role/{role_id}/permissions")
async def assign_role_permissions(
        role_id: UUID,
        payload: PermissionAssignment,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Replace the role's permission set (admin roles keep the full catalog)"""
    result = RoleService.assign_permissions(db, role_id, payload.permission_ids, actor=current_user)
    return _assignment_response(result)


@router.post("/role/{role_id}/permissions/assign-full")
async def assign_full_permissions(
        role_id: UUID,
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Assign every permission the role's dashboard needs"""
    return _assignment_response(RoleService.assign_default_permissions(db, role_id, actor=current_user))
