"""Authentication schemas for token handling."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class IdentityClaim(BaseModel):
    """Identity decoded from a verified access token.

    Only the claims the application relies on are exposed; everything
    else in the token payload is ignored.

    Attributes:
        subject: Stable, opaque identifier of the caller (the ``sub`` claim)
        expires_at: When the token stops being accepted
    """

    model_config = ConfigDict(frozen=True)

    subject: str
    expires_at: datetime
