"""Routes MCP tool calls to the compiler, the plan store and n8n."""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, ValidationError

from ..connectors.n8n import N8nConnector
from ..planning.schema import TASK_STATUSES, ChatInteraction, PlanningTask
from ..planning.store import PlanStore
from ..workflow.analyzer import IntentAnalyzer
from ..workflow.persister import REVIEW_TASK_PRIORITY, PlanPersister
from ..workflow.pipeline import compile_request
from .catalog import (
    CreateWorkflowArgs,
    InjectContextArgs,
    PlanningStatusArgs,
    SaveContextArgs,
    SaveTaskArgs,
    SearchMemoryArgs,
    TriggerWorkflowArgs,
)

logger = logging.getLogger(__name__)

FRESH_SESSION_SUMMARY = "Starting fresh session"
ACTIVE_GOAL_LIMIT = 5
SUMMARY_MESSAGE_LIMIT = 6
SUMMARY_SNIPPET_CHARS = 200


class ToolError(Exception):
    """Raised when a tool call cannot be served."""


class UnknownToolError(ToolError):
    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")


class ToolArgumentError(ToolError):
    """Raised when tool arguments fail validation."""


def _parse_args(model: type[BaseModel], arguments: dict[str, Any] | None) -> Any:
    try:
        return model.model_validate(arguments or {})
    except ValidationError as e:
        raise ToolArgumentError(f"Invalid arguments: {e}") from e


class ToolDispatcher:
    """Executes tool calls against explicitly provided collaborators."""

    def __init__(
        self,
        analyzer: IntentAnalyzer,
        store: PlanStore,
        n8n: N8nConnector | None = None,
    ):
        self.analyzer = analyzer
        self.store = store
        self.persister = PlanPersister(store)
        self.n8n = n8n
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]] = {
            "create_workflow_from_chat": self.create_workflow_from_chat,
            "get_planning_status": self.get_planning_status,
            "save_task": self.save_task,
            "trigger_workflow": self.trigger_workflow,
            "save_context": self.save_context,
            "inject_context": self.inject_context,
            "search_memory": self.search_memory,
        }

    async def call(self, tool_name: str, arguments: dict[str, Any] | None = None) -> dict[str, Any]:
        handler = self._handlers.get(tool_name)
        if handler is None:
            raise UnknownToolError(tool_name)
        logger.info("Calling tool: %s", tool_name)
        return await handler(arguments or {})

    async def create_workflow_from_chat(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(CreateWorkflowArgs, arguments)
        priority = args.priority if args.priority is not None else REVIEW_TASK_PRIORITY
        result = await compile_request(
            args.user_request,
            self.analyzer,
            self.persister,
            review_priority=priority,
        )
        persisted = result.persisted
        return {
            "success": True,
            "workflow_id": persisted.record.id,
            "workflow_name": result.graph.name,
            "intent": result.analysis.intent,
            "required_services": result.analysis.required_services,
            "complexity": result.analysis.complexity,
            "nodes": len(result.graph.nodes),
            "connections": result.graph.edge_count,
            "task_ids": [task.id for task in persisted.tasks],
            "message": (
                f"Workflow created in draft status with {len(persisted.tasks)} "
                f"planning task(s) at priority {priority}"
            ),
        }

    async def get_planning_status(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(PlanningStatusArgs, arguments)
        tasks = self.store.list_tasks(args.status_filter)
        statuses = {status: 0 for status in TASK_STATUSES}
        for task in tasks:
            statuses[task.status] += 1
        return {
            "total": len(tasks),
            "tasks": [task.model_dump(mode="json") for task in tasks],
            "statuses": statuses,
        }

    async def save_task(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(SaveTaskArgs, arguments)
        task = PlanningTask(
            title=args.title,
            description=args.description,
            category=args.category,
            priority=args.priority,
            status="backlog",
        )
        task_id = self.store.insert_task(task)
        return {
            "success": True,
            "task_id": task_id,
            "message": f"Task saved: {task.title}",
        }

    async def trigger_workflow(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(TriggerWorkflowArgs, arguments)
        if self.n8n is None:
            raise ToolError("n8n is not configured (set N8N_API_KEY)")
        return await self.n8n.trigger_workflow(args.workflow_name, args.data)

    async def save_context(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(SaveContextArgs, arguments)
        user = ChatInteraction(session_id=args.session_id, role="user", content=args.user_message)
        assistant = ChatInteraction(
            session_id=args.session_id, role="assistant", content=args.assistant_response
        )
        self.store.save_interaction(user)
        self.store.save_interaction(assistant)
        return {
            "success": True,
            "session_id": args.session_id,
            "interaction_ids": [user.id, assistant.id],
        }

    async def inject_context(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(InjectContextArgs, arguments)
        recent = self.store.recent_interactions(args.session_id, limit=SUMMARY_MESSAGE_LIMIT)
        active = self.store.list_tasks("in_progress")[:ACTIVE_GOAL_LIMIT]
        return {
            "session_summary": summarize_interactions(recent),
            "active_goals": [task.title for task in active],
            "context_ready": True,
        }

    async def search_memory(self, arguments: dict[str, Any]) -> dict[str, Any]:
        args = _parse_args(SearchMemoryArgs, arguments)
        matches = self.store.search_interactions(args.query, limit=args.limit)
        return {
            "query": args.query,
            "results": [match.model_dump(mode="json") for match in matches],
            "count": len(matches),
        }


def summarize_interactions(interactions: list[ChatInteraction]) -> str:
    """Render newest-first messages as a short oldest-first transcript."""
    if not interactions:
        return FRESH_SESSION_SUMMARY
    lines = []
    for interaction in reversed(interactions):
        content = " ".join(interaction.content.split())
        if len(content) > SUMMARY_SNIPPET_CHARS:
            content = content[:SUMMARY_SNIPPET_CHARS] + "..."
        lines.append(f"{interaction.role}: {content}")
    return "\n".join(lines)
