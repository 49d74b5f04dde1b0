# ============================================================================
# FILE: app/services/user/user_service.py
# User business logic - authentication, registration, office lookup
# ============================================================================
from sqlalchemy.orm import Session
from typing import Optional, Union
from uuid import UUID
from datetime import datetime, timezone
import logging

from app.models.user import User
from app.models.office import Staff

logger = logging.getLogger(__name__)


def coerce_uuid(value: Union[str, UUID, None]) -> Optional[UUID]:
    """UUID from a string or UUID, None when it cannot be parsed."""
    if value is None or isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError:
        return None


class UserService:
    """Service layer for user operations."""

    @staticmethod
    def create_user(
            db: Session,
            username: str,
            password: str,
            full_name: Optional[str] = None,
            phone_number: Optional[str] = None,
            role_id: Optional[UUID] = None
    ) -> User:
        """
        Create a new user with hashed password.
        Raises ValueError if username already exists.
        """
        username = username.lower().strip()

        existing_user = db.query(User).filter(User.username == username).first()
        if existing_user:
            raise ValueError("Username already registered")

        user = User(
            username=username,
            hashed_password=User.hash_password(password),
            full_name=full_name,
            phone_number=phone_number,
            role_id=role_id,
            is_active=True
        )

        db.add(user)
        db.commit()
        db.refresh(user)

        logger.info(f"Created user {user.id} ({username})")
        return user

    @staticmethod
    def register_customer(
            db: Session,
            username: str,
            password: str,
            full_name: Optional[str] = None,
            phone_number: Optional[str] = None
    ) -> User:
        """
        Self-registration. The global customer role is created on first use.
        Raises ValueError if username already exists.
        """
        from app.services.role.role_service import RoleService

        customer_role = RoleService.get_or_create_customer_role(db)

        return UserService.create_user(
            db=db,
            username=username,
            password=password,
            full_name=full_name,
            phone_number=phone_number,
            role_id=customer_role.id
        )

    @staticmethod
    def authenticate_user(
            db: Session,
            username: str,
            password: str
    ) -> Optional[User]:
        """
        Authenticate a user by username and password.
        Returns User if valid, None if invalid credentials.
        """
        user = UserService.get_user_by_username(db, username)

        if not user:
            return None

        if not user.is_active:
            return None

        if not user.verify_password(password):
            return None

        # Update last login timestamp
        user.last_login_at = datetime.now(timezone.utc)
        db.commit()

        return user

    @staticmethod
    def get_user_by_id(
            db: Session,
            user_id: Union[str, UUID]
    ) -> Optional[User]:
        """Get a user by their ID. Malformed ids resolve to None."""
        user_id = coerce_uuid(user_id)
        if user_id is None:
            return None
        return db.query(User).filter(User.id == user_id).first()

    @staticmethod
    def get_user_by_username(
            db: Session,
            username: str
    ) -> Optional[User]:
        return db.query(User).filter(User.username == username.lower().strip()).first()

    @staticmethod
    def get_staff_office_id(
            db: Session,
            user_id: UUID
    ) -> Optional[UUID]:
        """Office the user is assigned to as staff or manager, if any."""
        staff = db.query(Staff).filter(Staff.user_id == user_id).first()
        return staff.office_id if staff else None
