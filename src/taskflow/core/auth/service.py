"""Authentication service for registration and login."""

from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy.exc import IntegrityError

from taskflow.config import settings
from taskflow.core.auth.backend import create_access_token, hash_password, verify_password
from taskflow.core.errors import ConflictError, UnauthorizedError
from taskflow.modules.users.models import User
from taskflow.modules.users.repos import UserRepo
from taskflow.modules.users.schemas import TokenResponse


logger = structlog.get_logger()


class AuthService:
    """Service for account registration and credential exchange."""

    def __init__(self, repo: UserRepo) -> None:
        self.repo = repo

    async def register(self, email: str, password: str) -> User:
        """Register a new account.

        Args:
            email: Login email (already normalized to lower case)
            password: Plain text password

        Returns:
            The created user

        Raises:
            ConflictError: If the email is already registered
        """
        if await self.repo.get_by_email(email):
            raise ConflictError("user already exists", error_code="user_exists")

        try:
            user = await self.repo.create(
                User(email=email, password_hash=hash_password(password))
            )
        except IntegrityError as exc:
            # Concurrent registration with the same email
            raise ConflictError("user already exists", error_code="user_exists") from exc

        logger.info("user_registered", user_id=str(user.id))
        return user

    async def login(self, email: str, password: str) -> TokenResponse:
        """Exchange email and password for an access token.

        Raises:
            UnauthorizedError: If the credentials do not match an account
        """
        user = await self.repo.get_by_email(email)
        if not user or not verify_password(password, user.password_hash):
            raise UnauthorizedError(
                "invalid credentials",
                error_code="invalid_credentials",
            )

        logger.info("user_logged_in", user_id=str(user.id))
        return TokenResponse(
            access_token=create_access_token(user.id),
            expires_in=settings.access_token_expire_minutes * 60,
        )


AuthSvc = Annotated[AuthService, Depends(AuthService)]
