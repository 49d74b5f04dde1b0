# app/api/v1/dashboard/user_access.py
"""
Current-user access endpoints: profile with permissions, dashboard page
guard, filtered menu and ad-hoc action checks
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
import logging

from app.api.dependencies import enforce_route_permission, get_current_active_user, require_permission
from app.config.database import get_db
from app.models.user import User
from app.schemas.role import CheckActionRequest, MenuFilterRequest
from app.services.permission.permission_service import PermissionService
from app.core.role_rules import role_type

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/user",
    tags=["User Access"],
    dependencies=[Depends(enforce_route_permission)]
)


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_active_user)):
    """Current user with role and effective permissions"""
    permissions = PermissionService.get_user_permissions(current_user)
    return {
        "id": str(current_user.id),
        "username": current_user.username,
        "fullName": current_user.full_name,
        "phoneNumber": current_user.phone_number,
        "isActive": current_user.is_active,
        "role": {
            "id": str(current_user.role_id),
            "name": current_user.role_name,
            "type": role_type(current_user.role_name),
        } if current_user.role else None,
        "permissions": sorted(p.value for p in permissions),
    }


@router.get("/permissions/check-page")
async def check_page(
        path: str = Query("", description="Dashboard page path, e.g. roles/create"),
        current_user: User = Depends(get_current_active_user)
):
    result = PermissionService.check_page_permission(current_user, path)
    return {
        "success": True,
        "allowed": result.allowed,
        "error": result.error,
        "permission": result.permission,
    }


@router.get("/menu")
async def get_menu(
        current_user: User = Depends(get_current_active_user),
        db: Session = Depends(get_db)
):
    """Dashboard menu of the user's role type, filtered by permission"""
    groups = PermissionService.default_menu(current_user.role_name)
    menu = PermissionService.filter_menu(db, current_user.id, current_user.role_name, groups)
    return {"menu": menu}


@router.post("/menu/filter")
async def filter_menu(
        payload: MenuFilterRequest,
        current_user: User = Depends(require_permission()),
        db: Session = Depends(get_db)
):
    """Filter a client-supplied menu; entries without a permission tag use the role table"""
    groups = [[item.model_dump() for item in group] for group in payload.menu]
    menu = PermissionService.filter_menu(db, current_user.id, current_user.role_name, groups)
    return {"menu": menu}


@router.post("/check-action")
async def check_action(
        payload: CheckActionRequest,
        current_user: User = Depends(get_current_active_user)
):
    """Would the current user be allowed to call METHOD path?"""
    decision = PermissionService.check_action(current_user, payload.method, payload.path)
    return {
        "allowed": decision.allowed,
        "statusCode": decision.status_code,
        "message": decision.message,
        "required": decision.required,
    }
