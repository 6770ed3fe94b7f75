"""SQLite database setup for the planning board and workflow registry."""

from __future__ import annotations

import sqlite3
from pathlib import Path

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS workflow_registry (
    id TEXT PRIMARY KEY,
    workflow_name TEXT NOT NULL UNIQUE,
    description TEXT NOT NULL DEFAULT '',
    trigger_type TEXT NOT NULL DEFAULT 'manual',
    status TEXT NOT NULL DEFAULT 'draft',
    config TEXT NOT NULL DEFAULT '{}',
    related_tasks TEXT NOT NULL DEFAULT '[]',
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_workflow_registry_status ON workflow_registry(status);

CREATE TABLE IF NOT EXISTS planning_tasks (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT,
    category TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'backlog',
    priority INTEGER NOT NULL DEFAULT 5,
    metadata TEXT NOT NULL DEFAULT '{}',
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_planning_tasks_status ON planning_tasks(status);
CREATE INDEX IF NOT EXISTS idx_planning_tasks_priority ON planning_tasks(priority DESC);

CREATE TABLE IF NOT EXISTS chat_interactions (
    id TEXT PRIMARY KEY,
    session_id TEXT NOT NULL,
    role TEXT NOT NULL,
    content TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_chat_interactions_session
    ON chat_interactions(session_id, created_at DESC);

CREATE VIRTUAL TABLE IF NOT EXISTS chat_interactions_fts USING fts5(
    content,
    content='chat_interactions',
    content_rowid='rowid'
);

CREATE TRIGGER IF NOT EXISTS chat_interactions_fts_insert AFTER INSERT ON chat_interactions BEGIN
    INSERT INTO chat_interactions_fts(rowid, content) VALUES (new.rowid, new.content);
END;

CREATE TRIGGER IF NOT EXISTS chat_interactions_fts_delete AFTER DELETE ON chat_interactions BEGIN
    INSERT INTO chat_interactions_fts(chat_interactions_fts, rowid, content)
    VALUES ('delete', old.rowid, old.content);
END;
"""


def init_db(db_path: Path) -> sqlite3.Connection:
    """Initialize a SQLite database with WAL mode and create schema.

    Safe to call multiple times, all schema objects use IF NOT EXISTS.
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path), check_same_thread=False)
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA busy_timeout=5000")
    conn.row_factory = sqlite3.Row
    conn.executescript(_SCHEMA)
    return conn
