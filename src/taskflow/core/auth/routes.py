"""Authentication API routes.

Provides endpoints for:
- Account registration
- Login
- Current user profile
"""

from fastapi import APIRouter, status

from taskflow.core.auth.dependencies import CurrentUser
from taskflow.core.auth.service import AuthSvc
from taskflow.modules.users.schemas import (
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UserResponse,
)


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
)
async def register(data: RegisterRequest, service: AuthSvc) -> UserResponse:
    """Register a new account."""
    user = await service.register(email=data.email, password=data.password)
    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="Authenticate with email and password to receive a bearer token.",
)
async def login(data: LoginRequest, service: AuthSvc) -> TokenResponse:
    """Login with email and password."""
    return await service.login(email=data.email.lower(), password=data.password)


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
)
async def get_me(current_user: CurrentUser) -> UserResponse:
    """Get current user profile."""
    return UserResponse.model_validate(current_user)
