"""
Pydantic schemas for roles and permission assignment
"""
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional, List, Union
from uuid import UUID


class CustomRoleCreate(BaseModel):
    """Request body for creating an office role"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    office_id: Optional[UUID] = None
    permission_ids: List[UUID] = Field(default_factory=list)


class RoleUpdate(BaseModel):
    name: Optional[str] = None


class PermissionAssignment(BaseModel):
    """Full replacement set of permission ids for a role"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    permission_ids: List[UUID]


class CheckActionRequest(BaseModel):
    method: str = Field(..., min_length=1, max_length=10)
    path: str = Field(..., min_length=1)


class MenuItem(BaseModel):
    key: str
    url: str = ""
    permission: Optional[Union[str, List[str]]] = None


class MenuFilterRequest(BaseModel):
    """Menu groups as the dashboard renders them"""
    menu: List[List[MenuItem]]
