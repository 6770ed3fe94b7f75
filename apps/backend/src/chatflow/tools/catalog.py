"""MCP tool descriptors and their argument models."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field

from ..planning.schema import TaskCategory

TOOLS_VERSION = "1.0.0"


class CreateWorkflowArgs(BaseModel):
    user_request: str = Field(..., min_length=1)
    priority: Optional[int] = Field(None, ge=1, le=10)


class PlanningStatusArgs(BaseModel):
    status_filter: Literal["all", "backlog", "in_progress", "blocked", "done", "paused"] = "all"


class SaveTaskArgs(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category: TaskCategory
    priority: int = Field(5, ge=1, le=10)


class TriggerWorkflowArgs(BaseModel):
    workflow_name: str = Field(..., min_length=1)
    data: dict[str, Any] = {}


class SaveContextArgs(BaseModel):
    session_id: str = Field(..., min_length=1)
    user_message: str = Field(..., min_length=1)
    assistant_response: str = Field(..., min_length=1)


class InjectContextArgs(BaseModel):
    session_id: Optional[str] = None


class SearchMemoryArgs(BaseModel):
    query: str = Field(..., min_length=1)
    limit: int = Field(5, ge=1, le=50)


TOOLS: list[dict[str, Any]] = [
    {
        "name": "create_workflow_from_chat",
        "description": (
            "Convert a natural language request into a draft n8n workflow "
            "and add review tasks to the planning board"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "user_request": {
                    "type": "string",
                    "description": "Natural language description of desired workflow",
                },
                "priority": {
                    "type": "number",
                    "description": "Priority of the review task (1-10)",
                    "default": 7,
                },
            },
            "required": ["user_request"],
        },
    },
    {
        "name": "get_planning_status",
        "description": "Get current status of all planning tasks",
        "inputSchema": {
            "type": "object",
            "properties": {
                "status_filter": {
                    "type": "string",
                    "description": "Filter by task status",
                    "enum": ["all", "backlog", "in_progress", "blocked", "done", "paused"],
                },
            },
            "required": [],
        },
    },
    {
        "name": "save_task",
        "description": "Save a new backlog task to the planning board",
        "inputSchema": {
            "type": "object",
            "properties": {
                "title": {"type": "string", "description": "Task title"},
                "description": {"type": "string", "description": "Detailed description"},
                "category": {
                    "type": "string",
                    "enum": ["infrastructure", "agent", "workflow", "integration", "optimization"],
                },
                "priority": {"type": "number", "description": "Priority 1-10", "default": 5},
            },
            "required": ["title", "category"],
        },
    },
    {
        "name": "trigger_workflow",
        "description": "Trigger an n8n workflow by name and pass data",
        "inputSchema": {
            "type": "object",
            "properties": {
                "workflow_name": {
                    "type": "string",
                    "description": "Name of the workflow to trigger",
                },
                "data": {"type": "object", "description": "Input data for the workflow"},
            },
            "required": ["workflow_name"],
        },
    },
    {
        "name": "save_context",
        "description": "Save one chat exchange to memory so it can be recalled later",
        "inputSchema": {
            "type": "object",
            "properties": {
                "session_id": {"type": "string", "description": "Chat session ID"},
                "user_message": {"type": "string", "description": "User message"},
                "assistant_response": {"type": "string", "description": "Assistant response"},
            },
            "required": ["session_id", "user_message", "assistant_response"],
        },
    },
    {
        "name": "inject_context",
        "description": (
            "Load memory context for the current session "
            "(recent conversation summary and active goals)"
        ),
        "inputSchema": {
            "type": "object",
            "properties": {
                "session_id": {
                    "type": "string",
                    "description": "Session ID (optional, uses the latest messages if omitted)",
                },
            },
            "required": [],
        },
    },
    {
        "name": "search_memory",
        "description": "Full-text search through past chat interactions",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "What to search for"},
                "limit": {"type": "number", "description": "Number of results", "default": 5},
            },
            "required": ["query"],
        },
    },
]

TOOL_NAMES = [tool["name"] for tool in TOOLS]
