"""Compile pipeline: request -> analyzer -> synthesizer -> persister."""

from __future__ import annotations

import logging
from typing import Any, AsyncGenerator

from pydantic import BaseModel

from .analyzer import IntentAnalyzer
from .errors import CompilerError
from .persister import REVIEW_TASK_PRIORITY, PersistedPlan, PlanPersister
from .schema import Graph, PlanAnalysis
from .synthesizer import synthesize_graph

logger = logging.getLogger(__name__)


class CompilationResult(BaseModel):
    analysis: PlanAnalysis
    graph: Graph
    persisted: PersistedPlan | None = None


async def compile_request(
    request: str,
    analyzer: IntentAnalyzer,
    persister: PlanPersister | None = None,
    review_priority: int = REVIEW_TASK_PRIORITY,
) -> CompilationResult:
    """Compile a request end to end, raising compiler errors to the caller.

    The graph is fully synthesized before anything is persisted, so an
    analyzer failure leaves the store untouched.
    """
    analysis = await analyzer.analyze(request)
    graph = synthesize_graph(analysis.plan)
    persisted = (
        persister.persist(analysis.plan, graph, review_priority) if persister else None
    )
    return CompilationResult(analysis=analysis, graph=graph, persisted=persisted)


async def compile_workflow(
    request: str,
    analyzer: IntentAnalyzer,
    persister: PlanPersister | None = None,
) -> AsyncGenerator[dict[str, Any], None]:
    """Compile a request and yield progress events.

    Yields dicts with:
      - type: "text" | "analysis" | "workflow" | "workflow_saved" | "tasks_created" | "error"
      - content: the relevant payload
    """
    yield {"type": "text", "content": "Analyzing request..."}

    try:
        analysis = await analyzer.analyze(request)
    except (CompilerError, ValueError) as e:
        logger.warning("Workflow analysis failed: %s", e)
        yield {"type": "error", "content": f"{type(e).__name__}: {e}"}
        return

    yield {
        "type": "analysis",
        "content": {
            "intent": analysis.intent,
            "requiredServices": analysis.required_services,
            "complexity": analysis.complexity,
            "plan": analysis.plan.model_dump(mode="json", by_alias=True),
        },
    }

    graph = synthesize_graph(analysis.plan)
    yield {
        "type": "workflow",
        "content": graph.to_n8n(),
    }
    yield {
        "type": "text",
        "content": f"Workflow {graph.name!r}: {len(graph.nodes)} node(s), "
        f"{graph.edge_count} connection(s)",
    }

    if persister is None:
        return

    try:
        persisted = persister.persist(analysis.plan, graph)
    except Exception as e:
        logger.exception("Failed to save workflow plan %r", graph.name)
        yield {"type": "error", "content": f"Failed to save workflow plan: {e}"}
        return

    yield {
        "type": "workflow_saved",
        "content": {
            "workflow_id": persisted.record.id,
            "workflow_name": persisted.record.workflow_name,
            "status": persisted.record.status,
        },
    }
    yield {
        "type": "tasks_created",
        "content": {
            "task_ids": [task.id for task in persisted.tasks],
            "count": len(persisted.tasks),
        },
    }
    yield {
        "type": "text",
        "content": "Workflow is in 'draft' status. Review it, then activate it in n8n.",
    }
