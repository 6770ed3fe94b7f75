from .schema import ChatInteraction, PlanningTask, WorkflowRecord
from .store import DuplicateWorkflowError, PlanStore
from .database import init_db

__all__ = [
    "ChatInteraction",
    "PlanningTask",
    "WorkflowRecord",
    "PlanStore",
    "DuplicateWorkflowError",
    "init_db",
]
