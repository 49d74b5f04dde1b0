# ============================================================================
# FILE: app/models/role.py
# RBAC tables: roles, permissions and the role <-> permission join table
# ============================================================================
from sqlalchemy import Column, String, DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import uuid

from app.models.base import Base


class Role(Base):
    """
    A named role. Office roles carry an office_id; global roles
    (admin, customer, ...) have none.
    """
    __tablename__ = "roles"
    __table_args__ = (
        UniqueConstraint("name", "office_id", name="uq_roles_name_office"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False, index=True)
    office_id = Column(Uuid(as_uuid=True), ForeignKey("offices.id", ondelete="CASCADE"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    office = relationship("Office", back_populates="roles")
    role_permissions = relationship(
        "RolePermission",
        back_populates="role",
        cascade="all, delete-orphan",
        lazy="selectin"
    )
    users = relationship("User", back_populates="role")

    @property
    def permission_names(self) -> set:
        return {rp.permission.name for rp in self.role_permissions}

    def __repr__(self):
        return f"<Role {self.name} (office={self.office_id})>"


# NULL office_ids never collide in uq_roles_name_office
Index(
    "uq_roles_global_name",
    func.lower(Role.name),
    unique=True,
    postgresql_where=Role.office_id.is_(None),
    sqlite_where=Role.office_id.is_(None),
)


class Permission(Base):
    """Static catalog entry, e.g. office:read"""
    __tablename__ = "permissions"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    role_permissions = relationship("RolePermission", back_populates="permission")

    def __repr__(self):
        return f"<Permission {self.name}>"


class RolePermission(Base):
    __tablename__ = "role_permissions"
    __table_args__ = (
        UniqueConstraint("role_id", "permission_id", name="uq_role_permissions_pair"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    role_id = Column(Uuid(as_uuid=True), ForeignKey("roles.id", ondelete="CASCADE"), nullable=False, index=True)
    permission_id = Column(Uuid(as_uuid=True), ForeignKey("permissions.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    role = relationship("Role", back_populates="role_permissions")
    permission = relationship("Permission", back_populates="role_permissions", lazy="joined")
