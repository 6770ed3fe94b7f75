"""Pydantic models for planning tasks and the workflow registry."""

import uuid
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field

TaskStatus = Literal["backlog", "in_progress", "blocked", "done", "paused"]
TaskCategory = Literal["infrastructure", "agent", "workflow", "integration", "optimization"]
WorkflowStatus = Literal["draft", "active", "testing", "paused"]

TASK_STATUSES: tuple[str, ...] = ("backlog", "in_progress", "blocked", "done", "paused")


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class PlanningTask(BaseModel):
    """A follow-up task on the planning board."""

    id: str = Field(default_factory=_new_id)
    title: str
    description: str | None = None
    category: TaskCategory
    status: TaskStatus = "backlog"
    priority: int = Field(5, ge=1, le=10)
    metadata: dict[str, Any] = {}
    created_at: datetime = Field(default_factory=_now)


class ChatInteraction(BaseModel):
    """One message of a chat session kept for later recall."""

    id: str = Field(default_factory=_new_id)
    session_id: str
    role: Literal["user", "assistant"]
    content: str
    created_at: datetime = Field(default_factory=_now)


class WorkflowRecord(BaseModel):
    """A compiled workflow graph registered for review and activation."""

    id: str = Field(default_factory=_new_id)
    workflow_name: str
    description: str = ""
    trigger_type: str = "manual"
    status: WorkflowStatus = "draft"
    config: dict[str, Any] = {}
    related_tasks: list[str] = []
    created_at: datetime = Field(default_factory=_now)
