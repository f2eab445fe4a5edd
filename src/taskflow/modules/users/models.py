"""User database models."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from taskflow.core.constants import MAX_EMAIL_LENGTH
from taskflow.core.database.base import Base, TimestampMixin, UUIDMixin


class User(Base, UUIDMixin, TimestampMixin):
    """A registered account that owns tasks.

    Attributes:
        email: Unique login email address
        password_hash: Bcrypt-hashed password
    """

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(
        String(MAX_EMAIL_LENGTH),
        nullable=False,
        unique=True,
        index=True,
    )
    password_hash: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"
