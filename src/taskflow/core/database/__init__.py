"""Database layer - session management and base models."""

from taskflow.core.database.base import Base, SoftDeleteMixin, TimestampMixin, UUIDMixin
from taskflow.core.database.session import (
    async_engine,
    async_session_factory,
    build_engine,
    get_db,
)


__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDMixin",
    "async_engine",
    "async_session_factory",
    "build_engine",
    "get_db",
]
