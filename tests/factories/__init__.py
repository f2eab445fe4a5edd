"""Test factories for generating test data."""

from tests.factories.task import TaskCreateFactory, TaskFactory
from tests.factories.user import TEST_PASSWORD, RegisterRequestFactory, UserFactory


__all__ = [
    "TEST_PASSWORD",
    "RegisterRequestFactory",
    "TaskCreateFactory",
    "TaskFactory",
    "UserFactory",
]
