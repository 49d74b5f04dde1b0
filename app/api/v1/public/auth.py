# ============================================================================
# FILE: app/api/v1/public/auth.py
# Public authentication endpoints - login and customer registration
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional
import logging

from app.api.dependencies import get_db, create_access_token
from app.services.user.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])


# ============================================================================
# Pydantic Schemas
# ============================================================================

class RegisterRequest(BaseModel):
    """Request body for customer self-registration."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "username": "jdoe",
                "password": "SecurePass123!",
                "fullName": "John Doe",
                "phoneNumber": "+15551234567"
            }
        }
    )

    username: str = Field(..., min_length=3, max_length=100)
    password: str = Field(..., min_length=8, description="Password must be at least 8 characters")
    full_name: Optional[str] = None
    phone_number: Optional[str] = Field(None, max_length=20)


class LoginRequest(BaseModel):
    """Request body for login."""
    username: str
    password: str


class TokenResponse(BaseModel):
    """Response with the access token and who it belongs to."""
    access_token: str
    token_type: str = "bearer"
    user_id: str
    username: str
    full_name: Optional[str] = None
    role: Optional[str] = None


class MessageResponse(BaseModel):
    """Generic message response."""
    message: str
    details: Optional[dict] = None


# ============================================================================
# Registration & Login Endpoints
# ============================================================================

@router.post("/register", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def register(
        request: RegisterRequest,
        db: Session = Depends(get_db)
):
    """
    Register a customer account. The global customer role is created
    with its default permissions the first time somebody registers.
    """
    try:
        user = UserService.register_customer(
            db=db,
            username=request.username,
            password=request.password,
            full_name=request.full_name,
            phone_number=request.phone_number
        )

    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Registration failed for {request.username}: {e}", exc_info=True)
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Registration failed"
        )

    return MessageResponse(
        message="Registration successful",
        details={
            "user_id": str(user.id),
            "username": user.username,
            "role": user.role_name
        }
    )


@router.post("/login", response_model=TokenResponse)
async def login(
        request: LoginRequest,
        db: Session = Depends(get_db)
):
    """Login with username and password."""
    user = UserService.authenticate_user(
        db=db,
        username=request.username,
        password=request.password
    )

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    access_token = create_access_token(
        data={"sub": str(user.id), "role": user.role_name}
    )

    return TokenResponse(
        access_token=access_token,
        user_id=str(user.id),
        username=user.username,
        full_name=user.full_name,
        role=user.role_name
    )
