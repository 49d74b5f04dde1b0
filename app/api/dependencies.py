# ============================================================================
# FILE: app/api/dependencies.py
# Authentication and permission dependencies for JWT-protected routes
# ============================================================================
from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session
from typing import Optional, Union, List
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from uuid import UUID
import logging

from app.config.database import get_db
from app.config.settings import get_settings
from app.models.user import User
from app.services.permission.permission_service import INACTIVE_MESSAGE, AccessDecision, PermissionService

logger = logging.getLogger(__name__)

# ============================================================================
# Security Schemes
# ============================================================================

# JWT security for user authentication
jwt_security = HTTPBearer(
    scheme_name="JWT Bearer Token",
    description="Enter your JWT access token",
    auto_error=False
)


# ============================================================================
# JWT Token Functions
# ============================================================================

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary with claims (should include 'sub' with user_id)
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    settings = get_settings()
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

    to_encode.update({
        "exp": expire,
        "iat": datetime.now(timezone.utc),
        "type": "access"
    })

    return jwt.encode(
        to_encode,
        settings.JWT_SECRET_KEY,
        algorithm=settings.JWT_ALGORITHM
    )


def verify_access_token(token: str) -> dict:
    """
    Verify and decode a JWT access token.

    Raises:
        HTTPException: If token is invalid, expired or not an access token
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM]
        )
    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Could not validate credentials: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return payload


def _user_from_token(db: Session, token: str) -> User:
    payload = verify_access_token(token)

    user_id_str: Optional[str] = payload.get("sub")
    if user_id_str is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        user_id = UUID(user_id_str)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user ID in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user


def raise_for_decision(decision: AccessDecision) -> None:
    """Turn a denied AccessDecision into the matching HTTPException."""
    if decision.allowed:
        return
    headers = {"WWW-Authenticate": "Bearer"} if decision.status_code == 401 else None
    raise HTTPException(status_code=decision.status_code, detail=decision.message, headers=headers)


# ============================================================================
# JWT Authentication Dependencies
# ============================================================================

async def optional_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(jwt_security),
        db: Session = Depends(get_db)
) -> Optional[User]:
    """
    Returns User if a valid token was provided, None when no token was sent.
    A token that is sent but invalid is still rejected with 401.
    """
    if not credentials:
        return None
    return _user_from_token(db, credentials.credentials)


async def get_current_user(
        user: Optional[User] = Depends(optional_current_user)
) -> User:
    """
    Dependency to get the current authenticated user from JWT access token.

    Raises:
        HTTPException 401: If token is missing, invalid or user not found
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def get_current_active_user(
        current_user: User = Depends(get_current_user)
) -> User:
    """Dependency to ensure the current user is active."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=INACTIVE_MESSAGE
        )

    return current_user


# ============================================================================
# Permission Dependencies
# ============================================================================

async def enforce_route_permission(
        request: Request,
        user: Optional[User] = Depends(optional_current_user)
) -> Optional[User]:
    """
    Router-level guard: authorizes METHOD + path against the route table.

    Usage:
        router = APIRouter(dependencies=[Depends(enforce_route_permission)])
    """
    decision = PermissionService.check_action(user, request.method, request.url.path)
    raise_for_decision(decision)
    request.state.user = user
    return user


def require_permission(*permission_names: Union[str, List[str]]):
    """
    Dependency factory: the user must hold at least one of the names.

    Usage in routes:
        @router.get("/roles")
        async def list_roles(user: User = Depends(require_permission("role:read"))):
            pass
    """
    names = []
    for name in permission_names:
        names.extend([name] if isinstance(name, str) else name)
    # No names: any active user with a role
    spec = None if not names else (names[0] if len(names) == 1 else names)

    async def permission_checker(
            user: Optional[User] = Depends(optional_current_user)
    ) -> User:
        decision = PermissionService.authorize_permissions(user, spec)
        raise_for_decision(decision)
        return user

    return permission_checker
