"""Tasks module: per-user task management."""

from fastapi import APIRouter


router = APIRouter(prefix="/tasks", tags=["tasks"])

# Import routes to register them (must be after router is defined)
from taskflow.modules.tasks import routes  # noqa: F401, E402
