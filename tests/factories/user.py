"""User factories for tests."""

from uuid import uuid4

from polyfactory.factories.pydantic_factory import ModelFactory
from polyfactory.factories.sqlalchemy_factory import SQLAlchemyFactory

from taskflow.modules.users.models import User
from taskflow.modules.users.schemas import RegisterRequest


TEST_PASSWORD = "correct-horse-battery"


class UserFactory(SQLAlchemyFactory[User]):
    """Factory for creating test User instances."""

    __model__ = User

    @classmethod
    def id(cls):
        """Generate a user ID."""
        return uuid4()

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def password_hash(cls) -> str:
        """Generate a password hash (bcrypt)."""
        # Bcrypt hash that matches no password used in the tests
        return "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.xzQvGxRGlKHOHO"


class RegisterRequestFactory(ModelFactory[RegisterRequest]):
    """Factory for creating RegisterRequest schemas."""

    __model__ = RegisterRequest

    @classmethod
    def email(cls) -> str:
        """Generate a unique email."""
        return f"user-{uuid4().hex[:8]}@example.com"

    @classmethod
    def password(cls) -> str:
        """Generate a password."""
        return "testpassword123"
