"""FastAPI dependencies for authenticated routes.

The authentication gate has already verified the token by the time these
run; they only turn the identity it left in ``request.state`` into the
values route handlers need.
"""

from typing import Annotated, Any
from uuid import UUID

from fastapi import Depends, Request

from taskflow.api.dependencies import DBSession
from taskflow.core.auth.middleware import (
    MISSING_CREDENTIALS_MESSAGE,
    UNAUTHORIZED_MESSAGE,
    USER_ID_STATE_KEY,
)
from taskflow.core.errors import UnauthorizedError


async def get_current_user_id(request: Request) -> UUID:
    """Get the caller's user ID set by the authentication gate.

    Args:
        request: The current request

    Returns:
        The authenticated user's UUID

    Raises:
        UnauthorizedError: If the route is not behind the gate or the
            token subject is not a user ID issued by this service
    """
    subject = getattr(request.state, USER_ID_STATE_KEY, None)
    if not subject:
        raise UnauthorizedError(MISSING_CREDENTIALS_MESSAGE, error_code="missing_token")

    try:
        return UUID(str(subject))
    except ValueError as exc:
        raise UnauthorizedError(UNAUTHORIZED_MESSAGE, error_code="unknown_subject") from exc


async def get_current_user(
    user_id: Annotated[UUID, Depends(get_current_user_id)],
    db: DBSession,
) -> Any:  # Returns User, but use Any to avoid circular import
    """Load the authenticated user.

    Raises:
        UnauthorizedError: If the user no longer exists
    """
    from taskflow.modules.users.repos import UserRepository  # noqa: PLC0415

    user = await UserRepository(db).get_by_id(user_id)
    if not user:
        raise UnauthorizedError(UNAUTHORIZED_MESSAGE, error_code="user_not_found")
    return user


CurrentUserId = Annotated[UUID, Depends(get_current_user_id)]
CurrentUser = Annotated[Any, Depends(get_current_user)]
