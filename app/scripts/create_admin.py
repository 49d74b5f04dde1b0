# app/scripts/create_admin.py
"""
Create an administrator account bound to the global admin role.

Run: python -m app.scripts.create_admin <username> <password> ["Full Name"]
Run seed_permissions first so the admin role holds the whole catalog.
"""
import sys

from sqlalchemy import func

from app.config.database import SessionLocal
from app.models.role import Role
from app.models.user import User
from app.services.role.role_service import RoleService
from app.services.user.user_service import UserService


def main(argv):
    if len(argv) < 2:
        print("Usage: python -m app.scripts.create_admin <username> <password> [full name]")
        return 1

    username, password = argv[0], argv[1]
    full_name = argv[2] if len(argv) > 2 else None

    db = SessionLocal()
    try:
        role = db.query(Role).filter(func.lower(Role.name) == "admin", Role.office_id.is_(None)).first()
        if role is None:
            role = Role(name="admin", office_id=None)
            db.add(role)
            db.commit()
            db.refresh(role)
            result = RoleService.assign_default_permissions(db, role.id)
            print(f"Created admin role with {result.assigned_count} permissions")

        existing = db.query(User).filter(User.username == username.lower().strip()).first()
        if existing:
            print(f"User already exists: {existing.username}")
            return 1

        admin = UserService.create_user(
            db=db,
            username=username,
            password=password,
            full_name=full_name,
            role_id=role.id
        )
        print(f"✅ Admin user created: {admin.username}")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
