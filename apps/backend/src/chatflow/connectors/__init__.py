"""Connectors for external automation services."""

from .n8n import N8nConnector, N8nError, WorkflowNotFoundError

__all__ = ["N8nConnector", "N8nError", "WorkflowNotFoundError"]
