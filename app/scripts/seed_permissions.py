# app/scripts/seed_permissions.py
"""
Seed the permission catalog and the default global roles.

Run: python -m app.scripts.seed_permissions
Safe to re-run: existing rows are kept, descriptions refreshed, default
roles get their expected permission sets (re)assigned.
"""
from sqlalchemy import func
from sqlalchemy.orm import Session

from app.config.database import SessionLocal
from app.core.permissions import PERMISSION_DESCRIPTIONS, Permission as PermissionName
from app.core.role_rules import CUSTOMER_ROLE_NAME, STAFF_ROLE_NAME
from app.models.role import Permission, Role
from app.services.role.role_service import RoleService

DEFAULT_ROLES = ("admin", "manager", STAFF_ROLE_NAME, CUSTOMER_ROLE_NAME)


def seed_catalog(db: Session) -> int:
    """Insert missing catalog permissions. Returns how many were created."""
    existing = {p.name: p for p in db.query(Permission).all()}
    created = 0

    for name in PermissionName:
        description = PERMISSION_DESCRIPTIONS.get(name)
        row = existing.get(name.value)
        if row is None:
            db.add(Permission(name=name.value, description=description))
            created += 1
        elif description and row.description != description:
            row.description = description

    db.commit()
    return created


def seed_default_roles(db: Session) -> dict:
    """Create the global default roles and assign their expected permissions."""
    assigned = {}
    for role_name in DEFAULT_ROLES:
        role = db.query(Role).filter(
            func.lower(Role.name) == role_name,
            Role.office_id.is_(None)
        ).first()

        if role is None:
            role = Role(name=role_name, office_id=None)
            db.add(role)
            db.commit()
            db.refresh(role)
            print(f"  + created role {role_name}")

        result = RoleService.assign_default_permissions(db, role.id)
        if not result.success:
            raise RuntimeError(f"Failed to assign permissions to {role_name}: {result.message}")
        assigned[role_name] = result.assigned_count

    return assigned


def main():
    db = SessionLocal()
    try:
        created = seed_catalog(db)
        print(f"✅ Permission catalog: {created} new, {len(PermissionName)} total")

        for role_name, count in seed_default_roles(db).items():
            print(f"✅ {role_name}: {count} permissions")
    finally:
        db.close()


if __name__ == "__main__":
    main()
