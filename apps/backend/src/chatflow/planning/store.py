"""SQLite-backed store for planning tasks and registered workflows."""

from __future__ import annotations

import json
import logging
import re
import sqlite3
import threading
from pathlib import Path
from typing import Optional

from .database import init_db
from .schema import ChatInteraction, PlanningTask, WorkflowRecord

logger = logging.getLogger(__name__)


class DuplicateWorkflowError(Exception):
    """Raised when a workflow name is already registered."""


class PlanStore:
    """Persists the workflow registry and the planning board in one SQLite file."""

    def __init__(self, db_path: Path):
        self._conn = init_db(db_path)
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Workflow registry
    # ------------------------------------------------------------------

    def insert_workflow(self, record: WorkflowRecord) -> str:
        """Register a workflow. Returns the record ID."""
        with self._lock:
            try:
                self._conn.execute(
                    """INSERT INTO workflow_registry
                       (id, workflow_name, description, trigger_type, status, config,
                        related_tasks, created_at)
                       VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                    (
                        record.id,
                        record.workflow_name,
                        record.description,
                        record.trigger_type,
                        record.status,
                        json.dumps(record.config),
                        json.dumps(record.related_tasks),
                        record.created_at.isoformat(),
                    ),
                )
            except sqlite3.IntegrityError as e:
                self._conn.rollback()
                raise DuplicateWorkflowError(
                    f"Workflow '{record.workflow_name}' is already registered"
                ) from e
            self._conn.commit()
        logger.info("Registered workflow %r (%s)", record.workflow_name, record.id)
        return record.id

    def link_tasks(self, workflow_id: str, task_ids: list[str]) -> bool:
        """Append task IDs to a workflow's related tasks."""
        with self._lock:
            row = self._conn.execute(
                "SELECT related_tasks FROM workflow_registry WHERE id = ?",
                (workflow_id,),
            ).fetchone()
            if row is None:
                return False
            related = json.loads(row["related_tasks"])
            related.extend(task_id for task_id in task_ids if task_id not in related)
            self._conn.execute(
                "UPDATE workflow_registry SET related_tasks = ? WHERE id = ?",
                (json.dumps(related), workflow_id),
            )
            self._conn.commit()
        return True

    def get_workflow(self, workflow_id: str) -> Optional[WorkflowRecord]:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM workflow_registry WHERE id = ?", (workflow_id,)
            ).fetchone()
        return _row_to_workflow(row) if row is not None else None

    def get_workflow_by_name(self, workflow_name: str) -> Optional[WorkflowRecord]:
        with self._lock:
            row = self._conn.execute(
                "SELECT * FROM workflow_registry WHERE workflow_name = ?", (workflow_name,)
            ).fetchone()
        return _row_to_workflow(row) if row is not None else None

    def list_workflows(self, status: Optional[str] = None) -> list[WorkflowRecord]:
        """List registered workflows, newest first."""
        with self._lock:
            if status is not None:
                rows = self._conn.execute(
                    "SELECT * FROM workflow_registry WHERE status = ? ORDER BY created_at DESC",
                    (status,),
                ).fetchall()
            else:
                rows = self._conn.execute(
                    "SELECT * FROM workflow_registry ORDER BY created_at DESC"
                ).fetchall()
        return [_row_to_workflow(row) for row in rows]

    # ------------------------------------------------------------------
    # Planning tasks
    # ------------------------------------------------------------------

    def insert_task(self, task: PlanningTask) -> str:
        """Persist a planning task. Returns the task ID."""
        with self._lock:
            self._conn.execute(
                """INSERT INTO planning_tasks
                   (id, title, description, category, status, priority, metadata, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    task.id,
                    task.title,
                    task.description,
                    task.category,
                    task.status,
                    task.priority,
                    json.dumps(task.metadata, default=str),
                    task.created_at.isoformat(),
                ),
            )
            self._conn.commit()
        return task.id

    def list_tasks(self, status: Optional[str] = None) -> list[PlanningTask]:
        """List tasks by priority (highest first), optionally filtered by status."""
        with self._lock:
            if status is not None and status != "all":
                rows = self._conn.execute(
                    """SELECT * FROM planning_tasks WHERE status = ?
                       ORDER BY priority DESC, created_at, rowid""",
                    (status,),
                ).fetchall()
            else:
                rows = self._conn.execute(
                    "SELECT * FROM planning_tasks ORDER BY priority DESC, created_at, rowid"
                ).fetchall()
        return [_row_to_task(row) for row in rows]

    # ------------------------------------------------------------------
    # Chat interactions
    # ------------------------------------------------------------------

    def save_interaction(self, interaction: ChatInteraction) -> str:
        """Persist a chat message. Returns the interaction ID."""
        with self._lock:
            self._conn.execute(
                """INSERT INTO chat_interactions (id, session_id, role, content, created_at)
                   VALUES (?, ?, ?, ?, ?)""",
                (
                    interaction.id,
                    interaction.session_id,
                    interaction.role,
                    interaction.content,
                    interaction.created_at.isoformat(),
                ),
            )
            self._conn.commit()
        return interaction.id

    def recent_interactions(
        self, session_id: Optional[str] = None, limit: int = 10
    ) -> list[ChatInteraction]:
        """Most recent messages first, for one session or across all sessions."""
        with self._lock:
            if session_id is not None:
                rows = self._conn.execute(
                    """SELECT * FROM chat_interactions WHERE session_id = ?
                       ORDER BY created_at DESC, rowid DESC LIMIT ?""",
                    (session_id, limit),
                ).fetchall()
            else:
                rows = self._conn.execute(
                    """SELECT * FROM chat_interactions
                       ORDER BY created_at DESC, rowid DESC LIMIT ?""",
                    (limit,),
                ).fetchall()
        return [_row_to_interaction(row) for row in rows]

    def search_interactions(self, query: str, limit: int = 5) -> list[ChatInteraction]:
        """Full-text search over past messages, newest first."""
        fts_query = _build_fts_query(query)
        if not fts_query:
            return []

        with self._lock:
            rows = self._conn.execute(
                """SELECT c.* FROM chat_interactions c
                   JOIN chat_interactions_fts ON chat_interactions_fts.rowid = c.rowid
                   WHERE chat_interactions_fts MATCH ?
                   ORDER BY c.created_at DESC, c.rowid DESC
                   LIMIT ?""",
                (fts_query, limit),
            ).fetchall()
        return [_row_to_interaction(row) for row in rows]


def _row_to_workflow(row: sqlite3.Row) -> WorkflowRecord:
    return WorkflowRecord(
        id=row["id"],
        workflow_name=row["workflow_name"],
        description=row["description"],
        trigger_type=row["trigger_type"],
        status=row["status"],
        config=json.loads(row["config"]),
        related_tasks=json.loads(row["related_tasks"]),
        created_at=row["created_at"],
    )


def _row_to_task(row: sqlite3.Row) -> PlanningTask:
    return PlanningTask(
        id=row["id"],
        title=row["title"],
        description=row["description"],
        category=row["category"],
        status=row["status"],
        priority=row["priority"],
        metadata=json.loads(row["metadata"]),
        created_at=row["created_at"],
    )


def _row_to_interaction(row: sqlite3.Row) -> ChatInteraction:
    return ChatInteraction(
        id=row["id"],
        session_id=row["session_id"],
        role=row["role"],
        content=row["content"],
        created_at=row["created_at"],
    )


def _build_fts_query(query: str) -> str:
    """Convert a natural language query to an FTS5 OR query."""
    tokens = re.findall(r"[a-z0-9]+", query.lower())
    if not tokens:
        return ""
    return " OR ".join(tokens)
