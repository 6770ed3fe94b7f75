"""Lookup tables mapping plan vocabulary onto n8n node types.

Adding a trigger or step kind means adding an enum member and a table
row here; the synthesizer never branches on kind names itself.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class TriggerKind(str, Enum):
    EMAIL = "email"
    SCHEDULE = "schedule"
    WEBHOOK = "webhook"
    SLACK = "slack"
    GITHUB = "github"
    MANUAL = "manual"


class StepKind(str, Enum):
    HTTP = "http"
    AI = "ai"
    DATABASE = "database"
    EMAIL = "email"
    SLACK = "slack"
    CONDITIONAL = "conditional"
    CODE = "code"


TRIGGER_NODE_TYPES: dict[TriggerKind, str] = {
    TriggerKind.EMAIL: "n8n-nodes-base.emailTrigger",
    TriggerKind.SCHEDULE: "n8n-nodes-base.scheduleTrigger",
    TriggerKind.WEBHOOK: "n8n-nodes-base.webhookTrigger",
    TriggerKind.SLACK: "n8n-nodes-slack.slackTrigger",
    TriggerKind.GITHUB: "n8n-nodes-github.githubTrigger",
    TriggerKind.MANUAL: "n8n-nodes-base.manualTrigger",
}
DEFAULT_TRIGGER_NODE_TYPE = TRIGGER_NODE_TYPES[TriggerKind.WEBHOOK]

TRIGGER_DEFAULT_PARAMETERS: dict[TriggerKind, dict[str, Any]] = {
    TriggerKind.SCHEDULE: {"interval": [1], "unit": "hours"},
    TriggerKind.WEBHOOK: {"path": "workflow-trigger", "responseMode": "onReceived"},
}

STEP_NODE_TYPES: dict[StepKind, str] = {
    StepKind.HTTP: "n8n-nodes-base.httpRequest",
    StepKind.AI: "n8n-nodes-openai.chatGPT",
    StepKind.DATABASE: "n8n-nodes-postgres.postgres",
    StepKind.EMAIL: "n8n-nodes-base.emailSend",
    StepKind.SLACK: "n8n-nodes-slack.slack",
    StepKind.CONDITIONAL: "n8n-nodes-base.if",
    StepKind.CODE: "n8n-nodes-base.code",
}
DEFAULT_STEP_NODE_TYPE = STEP_NODE_TYPES[StepKind.HTTP]


def _lookup(enum_cls: type[Enum], raw: str) -> Enum | None:
    try:
        return enum_cls(raw)
    except ValueError:
        return None


def trigger_node_type(trigger: str) -> str:
    """Return the n8n node type for a trigger kind, falling back to a webhook trigger."""
    kind = _lookup(TriggerKind, trigger.lower())
    if kind is None:
        return DEFAULT_TRIGGER_NODE_TYPE
    return TRIGGER_NODE_TYPES[kind]


def trigger_parameters(trigger: str) -> dict[str, Any]:
    """Return a fresh copy of the default parameters for a trigger kind."""
    kind = _lookup(TriggerKind, trigger.lower())
    defaults = TRIGGER_DEFAULT_PARAMETERS.get(kind, {}) if kind is not None else {}
    return {
        key: list(value) if isinstance(value, list) else value
        for key, value in defaults.items()
    }


def step_node_type(step_type: str) -> str:
    """Return the n8n node type for a step type, falling back to an HTTP request."""
    kind = _lookup(StepKind, step_type)
    if kind is None:
        return DEFAULT_STEP_NODE_TYPE
    return STEP_NODE_TYPES[kind]
