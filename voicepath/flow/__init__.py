"""Numbered-step parsing and step/diagram conversion."""

from .steps import Step, parse_steps, placeholder_step, steps_to_text
from .diagram import (
    DiagramEdge,
    DiagramNode,
    Flow,
    VERTICAL_NODE_SPACING,
    duplicate_node_ids,
    flow_to_steps,
    flowchart_to_flow,
    parse_json_flow,
    steps_to_flow,
    subtasks_to_flow,
)

__all__ = [
    "Step",
    "parse_steps",
    "placeholder_step",
    "steps_to_text",
    "DiagramEdge",
    "DiagramNode",
    "Flow",
    "VERTICAL_NODE_SPACING",
    "duplicate_node_ids",
    "flow_to_steps",
    "flowchart_to_flow",
    "parse_json_flow",
    "steps_to_flow",
    "subtasks_to_flow",
]
