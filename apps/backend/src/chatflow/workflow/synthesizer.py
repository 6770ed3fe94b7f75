"""Deterministic plan -> n8n graph synthesis."""

from __future__ import annotations

from .schema import Edge, Graph, GraphNode, WorkflowPlan
from .tables import step_node_type, trigger_node_type, trigger_parameters

TRIGGER_NODE_ID = "trigger"
TRIGGER_COLUMN_X = 0
STEP_COLUMN_X = 400
ROW_HEIGHT = 150


def step_node_id(index: int) -> str:
    return f"node_{index}"


def synthesize_graph(plan: WorkflowPlan) -> Graph:
    """Compile a plan into a linear n8n graph.

    The first trigger (if any) becomes node ``trigger`` and every step
    becomes ``node_<i>`` in plan order. Nodes are chained one after the
    other on the ``main`` channel; conditional steps do not branch.
    """
    nodes: list[GraphNode] = []
    edges: dict[str, list[Edge]] = {}
    y_offset = 0
    previous: str | None = None

    if plan.triggers:
        trigger = plan.triggers[0].lower()
        nodes.append(
            GraphNode(
                id=TRIGGER_NODE_ID,
                name=f"{trigger.title()} Trigger",
                type=trigger_node_type(trigger),
                position=(TRIGGER_COLUMN_X, y_offset),
                parameters=trigger_parameters(trigger),
            )
        )
        previous = TRIGGER_NODE_ID
        y_offset += ROW_HEIGHT

    for index, step in enumerate(plan.steps):
        node_id = step_node_id(index)
        nodes.append(
            GraphNode(
                id=node_id,
                name=step.name,
                type=step_node_type(step.type),
                position=(STEP_COLUMN_X, y_offset),
                parameters=dict(step.config),
            )
        )
        if previous is not None:
            edges[previous] = [Edge(target_node_id=node_id)]
        previous = node_id
        y_offset += ROW_HEIGHT

    return Graph(name=plan.name, active=False, nodes=nodes, edges=edges)
