"""Records compiled graphs and derives their review checklist."""

from __future__ import annotations

import logging

from pydantic import BaseModel

from ..planning.schema import PlanningTask, WorkflowRecord
from ..planning.store import DuplicateWorkflowError, PlanStore
from .schema import Graph, WorkflowPlan

logger = logging.getLogger(__name__)

REVIEW_TASK_PRIORITY = 7
STEP_TASK_PRIORITY = 5


class PersistedPlan(BaseModel):
    record: WorkflowRecord
    tasks: list[PlanningTask]


def build_registry_record(plan: WorkflowPlan, graph: Graph) -> WorkflowRecord:
    return WorkflowRecord(
        workflow_name=plan.name,
        description=plan.description,
        trigger_type=plan.triggers[0] if plan.triggers else "manual",
        status="draft",
        config=graph.to_n8n(),
        related_tasks=[],
    )


def build_review_tasks(
    plan: WorkflowPlan, review_priority: int = REVIEW_TASK_PRIORITY
) -> list[PlanningTask]:
    """One top-level review task followed by one configuration task per step."""
    tasks = [
        PlanningTask(
            title=f"Review workflow: {plan.name}",
            description=plan.description,
            category="workflow",
            status="in_progress",
            priority=review_priority,
            metadata={"workflow_plan": plan.model_dump(mode="json", by_alias=True)},
        )
    ]
    for step in plan.steps:
        tasks.append(
            PlanningTask(
                title=f"Configure: {step.name}",
                description=f"Set up {step.type} node for workflow",
                category="workflow",
                status="backlog",
                priority=STEP_TASK_PRIORITY,
                metadata={"step_id": step.id, "step_name": step.name},
            )
        )
    return tasks


class PlanPersister:
    """Writes a fully built (plan, graph) pair to the plan store."""

    def __init__(self, store: PlanStore):
        self.store = store

    def persist(
        self,
        plan: WorkflowPlan,
        graph: Graph,
        review_priority: int = REVIEW_TASK_PRIORITY,
    ) -> PersistedPlan:
        record = build_registry_record(plan, graph)
        tasks = build_review_tasks(plan, review_priority)

        try:
            self.store.insert_workflow(record)
        except DuplicateWorkflowError:
            # Registry names are unique.
            unique_name = f"{record.workflow_name} ({record.id[:8]})"
            logger.warning(
                "Workflow name %r already registered, saving as %r", record.workflow_name, unique_name
            )
            record = record.model_copy(update={"workflow_name": unique_name})
            self.store.insert_workflow(record)

        for task in tasks:
            self.store.insert_task(task)

        task_ids = [task.id for task in tasks]
        self.store.link_tasks(record.id, task_ids)
        record = record.model_copy(update={"related_tasks": task_ids})

        logger.info("Saved draft workflow %r with %d planning task(s)", plan.name, len(tasks))
        return PersistedPlan(record=record, tasks=tasks)
