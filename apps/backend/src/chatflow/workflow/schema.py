"""Pydantic models for workflow plans and the n8n graphs compiled from them."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

StepConfigValue = str | int | float | bool
Complexity = Literal["simple", "moderate", "complex"]


class WorkflowStep(BaseModel):
    """A single abstract step of a plan."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str  # "http" | "ai" | "database" | "conditional" | "email" | "slack" | "code" | ...
    config: dict[str, StepConfigValue] = {}


class WorkflowPlan(BaseModel):
    """The structured plan extracted from a natural-language request."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str
    description: str = ""
    triggers: list[str] = []
    steps: list[WorkflowStep] = []
    expected_outputs: list[str] = Field(default=[], alias="expectedOutputs")


class PlanAnalysis(BaseModel):
    """Full analyzer output: the plan plus intent metadata."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    intent: str
    required_services: list[str] = Field(alias="requiredServices")
    complexity: Complexity
    plan: WorkflowPlan


class GraphNode(BaseModel):
    """One typed, parameterised node of an n8n graph."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    type: str
    position: tuple[int, int]
    parameters: dict[str, Any] = {}


class Edge(BaseModel):
    """A connection from a source node into one input of a target node."""

    model_config = ConfigDict(frozen=True)

    target_node_id: str
    channel: str = "main"
    input_index: int = 0


class Graph(BaseModel):
    """A complete n8n workflow graph. Always created inactive."""

    model_config = ConfigDict(frozen=True)

    name: str
    active: bool = False
    nodes: list[GraphNode] = []
    edges: dict[str, list[Edge]] = {}

    @property
    def edge_count(self) -> int:
        return sum(len(targets) for targets in self.edges.values())

    def to_n8n(self) -> dict[str, Any]:
        """Render in the n8n workflow JSON shape stored as registry config."""
        return {
            "name": self.name,
            "active": self.active,
            "nodes": [
                {
                    "id": node.id,
                    "name": node.name,
                    "type": node.type,
                    "position": list(node.position),
                    "parameters": node.parameters,
                }
                for node in self.nodes
            ],
            "connections": {
                source: [
                    {"node": edge.target_node_id, "type": edge.channel, "index": edge.input_index}
                    for edge in targets
                ]
                for source, targets in self.edges.items()
            },
        }
