"""n8n REST API connector."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


class N8nError(Exception):
    """Raised when an n8n call fails."""

    def __init__(self, message: str, error_type: str = "n8n_error"):
        self.error_type = error_type
        super().__init__(message)


class WorkflowNotFoundError(N8nError):
    def __init__(self, workflow_name: str):
        super().__init__(f"Workflow not found: {workflow_name}", "not_found")


class N8nConnector:
    """Finds and triggers n8n workflows.

    Required settings: N8N_URL, N8N_API_KEY
    """

    def __init__(self, base_url: str, api_key: str, http_client: httpx.AsyncClient) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http_client
        self._headers = {"X-N8N-API-KEY": api_key}

    @classmethod
    def from_settings(cls, settings: Settings, http_client: httpx.AsyncClient) -> N8nConnector:
        return cls(settings.n8n_url, settings.n8n_api_key or "", http_client)

    @classmethod
    def is_configured(cls, settings: Settings) -> bool:
        return bool(settings.n8n_api_key)

    async def find_workflow(self, workflow_name: str) -> dict[str, Any]:
        """Return the first n8n workflow whose name matches."""
        try:
            resp = await self.http.get(
                f"{self.base_url}/api/v1/workflows",
                headers=self._headers,
                params={"filter": json.dumps({"name": workflow_name})},
            )
        except httpx.HTTPError as e:
            raise N8nError(f"n8n request failed: {e}", "connection_error") from e
        self._raise_for_status(resp)

        workflows = resp.json().get("data") or []
        if not workflows:
            raise WorkflowNotFoundError(workflow_name)
        return workflows[0]

    async def trigger_workflow(
        self, workflow_name: str, data: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Trigger a workflow through its webhook and pass ``data`` as the body."""
        workflow = await self.find_workflow(workflow_name)
        webhook_path = workflow.get("webhookPath")
        if not webhook_path:
            raise N8nError(
                f"Workflow {workflow_name} has no webhook path", "not_triggerable"
            )

        try:
            resp = await self.http.post(
                f"{self.base_url}/webhook-test/{webhook_path}",
                json=data or {},
            )
        except httpx.HTTPError as e:
            raise N8nError(f"n8n request failed: {e}", "connection_error") from e
        self._raise_for_status(resp)

        logger.info("Triggered n8n workflow %r (%s)", workflow_name, workflow.get("id"))
        return {
            "success": True,
            "workflow_id": workflow.get("id"),
            "message": f"Workflow triggered: {workflow_name}",
        }

    @staticmethod
    def _raise_for_status(resp: httpx.Response) -> None:
        if resp.status_code == 401:
            raise N8nError("n8n rejected the API key", "auth_error")
        if resp.status_code == 429:
            raise N8nError("n8n rate limit exceeded", "rate_limited")
        if resp.is_error:
            raise N8nError(f"n8n error: {resp.status_code}", "http_error")
