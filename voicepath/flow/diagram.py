"""Step sequence <-> node/edge diagram conversion.

The diagram format mirrors what graph canvases such as React Flow consume::

    {"nodes": [{"id": "1", "type": "stepNode", "position": {"x": 0, "y": 0},
                "data": {"title": "...", "label": "...", "details": [], "completed": false}}],
     "edges": [{"id": "e-1-2", "source": "1", "target": "2", "type": "default"}]}

Generated diagrams are a simple path: step i is wired to step i + 1 by array
position. Any other edge comes from an explicit :meth:`Flow.connect`.
"""
from __future__ import annotations

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from voicepath.flow.steps import Step, steps_to_text
from voicepath.utils.value_parsing import finite_float, safe_int

logger = logging.getLogger(__name__)

NODE_TYPE = "stepNode"
EDGE_TYPE = "default"
VERTICAL_NODE_SPACING = 140

ToggleCallback = Callable[[str], Any]


def edge_id(source: str, target: str) -> str:
    return f"e-{source}-{target}"


def _row_position(index: int) -> Dict[str, float]:
    return {"x": 0, "y": index * VERTICAL_NODE_SPACING}


@dataclass(slots=True)
class DiagramNode:
    id: str
    title: str
    details: List[str] = field(default_factory=list)
    completed: bool = False
    context: Optional[str] = None
    position: Dict[str, float] = field(default_factory=lambda: {"x": 0, "y": 0})
    type: str = NODE_TYPE
    # Presentation hook; never serialised
    on_toggle_complete: Optional[ToggleCallback] = field(default=None, repr=False, compare=False)

    @property
    def label(self) -> str:
        return self.title

    def request_toggle(self) -> Any:
        """Ask the owner of this node to flip its completion flag."""
        if self.on_toggle_complete is None:
            self.completed = not self.completed
            return self.completed
        return self.on_toggle_complete(self.id)

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "title": self.title,
            "label": self.title,
            "details": list(self.details),
            "completed": self.completed,
        }
        if self.context:
            data["context"] = self.context
        return {
            "id": self.id,
            "type": self.type,
            "position": dict(self.position),
            "data": data,
        }


@dataclass(slots=True)
class DiagramEdge:
    source: str
    target: str
    id: str = ""
    type: str = EDGE_TYPE

    def __post_init__(self) -> None:
        if not self.id:
            self.id = edge_id(self.source, self.target)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "source": self.source, "target": self.target, "type": self.type}


@dataclass
class Flow:
    nodes: List[DiagramNode] = field(default_factory=list)
    edges: List[DiagramEdge] = field(default_factory=list)

    # ------------- Lookups -------------

    def node(self, node_id: str) -> Optional[DiagramNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def node_ids(self) -> List[str]:
        return [n.id for n in self.nodes]

    def labels(self) -> List[str]:
        return [n.title for n in self.nodes]

    def duplicate_node_ids(self) -> List[str]:
        counts = Counter(self.node_ids())
        return sorted((nid for nid, cnt in counts.items() if cnt > 1), key=lambda v: (safe_int(v, 0), v))

    def dangling_edges(self) -> List[DiagramEdge]:
        known = set(self.node_ids())
        return [e for e in self.edges if e.source not in known or e.target not in known]

    # ------------- Edits -------------

    def next_node_id(self) -> str:
        highest = 0
        for n in self.nodes:
            try:
                highest = max(highest, int(n.id))
            except ValueError:
                continue
        return str(highest + 1)

    def add_node(
        self,
        title: Optional[str] = None,
        details: Optional[List[str]] = None,
        position: Optional[Dict[str, float]] = None,
    ) -> DiagramNode:
        new_id = self.next_node_id()
        node = DiagramNode(
            id=new_id,
            title=title or f"Step {new_id}",
            details=list(details or []),
            position=position or _row_position(len(self.nodes)),
            on_toggle_complete=self.toggle_completion,
        )
        self.nodes.append(node)
        return node

    def delete_node(self, node_id: str) -> bool:
        before = len(self.nodes)
        self.nodes = [n for n in self.nodes if n.id != node_id]
        if len(self.nodes) == before:
            return False
        self.edges = [e for e in self.edges if e.source != node_id and e.target != node_id]
        return True

    def update_node(self, node_id: str, title: str, details_text: str) -> Optional[DiagramNode]:
        node = self.node(node_id)
        if node is None:
            return None
        node.title = title
        node.details = [line.strip() for line in (details_text or "").splitlines() if line.strip()]
        return node

    def toggle_completion(self, node_id: str) -> Optional[bool]:
        node = self.node(node_id)
        if node is None:
            return None
        node.completed = not node.completed
        return node.completed

    def connect(self, source: str, target: str) -> Optional[DiagramEdge]:
        """Add a user-drawn edge. Both ends must exist; an existing edge is returned as-is."""
        if self.node(source) is None or self.node(target) is None:
            return None
        for e in self.edges:
            if e.source == source and e.target == target:
                return e
        edge = DiagramEdge(source=source, target=target)
        self.edges.append(edge)
        return edge

    # ------------- Serialisation -------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "edges": [e.to_dict() for e in self.edges],
        }

    def to_steps(self) -> List[Step]:
        return [Step(id=n.id, title=n.title, details=list(n.details)) for n in self.nodes]

    def to_text(self) -> str:
        return steps_to_text(self.to_steps())


def _path_edges(ids: List[str]) -> List[DiagramEdge]:
    return [DiagramEdge(source=a, target=b) for a, b in zip(ids, ids[1:])]


def _attach_toggle(flow: Flow, on_toggle_complete: Optional[ToggleCallback]) -> None:
    callback = on_toggle_complete or flow.toggle_completion
    for n in flow.nodes:
        n.on_toggle_complete = callback


def _warn_duplicates(flow: Flow) -> None:
    duplicates = flow.duplicate_node_ids()
    if duplicates:
        # Left unresolved: edges between duplicated ids are ambiguous
        logger.warning("Diagram built with duplicate step ids %s; edge wiring is ambiguous", duplicates)


def steps_to_flow(steps: Iterable[Step], on_toggle_complete: Optional[ToggleCallback] = None) -> Flow:
    """One node per step (fixed row spacing) plus a path edge between neighbours."""
    steps = list(steps)
    nodes = [
        DiagramNode(id=s.id, title=s.title, details=list(s.details), position=_row_position(i))
        for i, s in enumerate(steps)
    ]
    flow = Flow(nodes=nodes, edges=_path_edges([s.id for s in steps]))
    _attach_toggle(flow, on_toggle_complete)
    _warn_duplicates(flow)
    return flow


def flowchart_to_flow(items: Iterable[Mapping[str, Any]], on_toggle_complete: Optional[ToggleCallback] = None) -> Flow:
    """Build a diagram from LLM flowchart items ``{id, label, context}``."""
    nodes: List[DiagramNode] = []
    for i, item in enumerate(items):
        node_id = str(item.get("id") or i + 1)
        title = item.get("label") or item.get("title") or f"Step {i + 1}"
        context = item.get("context") or None
        nodes.append(
            DiagramNode(
                id=node_id,
                title=str(title),
                details=[str(context)] if context else [],
                context=str(context) if context else None,
                completed=bool(item.get("completed", False)),
                position=_row_position(i),
            )
        )
    flow = Flow(nodes=nodes, edges=_path_edges([n.id for n in nodes]))
    _attach_toggle(flow, on_toggle_complete)
    _warn_duplicates(flow)
    return flow


def subtasks_to_flow(subtasks: Iterable[Mapping[str, Any]], on_toggle_complete: Optional[ToggleCallback] = None) -> Flow:
    """Diagram for stored subtasks, kept in the order given (``order_index`` order)."""
    items = [
        {
            "id": str(st.get("order_index")),
            "label": st.get("name"),
            "context": f"Subtask {st.get('order_index')}",
            "completed": bool(st.get("completed")),
        }
        for st in subtasks
    ]
    return flowchart_to_flow(items, on_toggle_complete)


def _import_position(raw: Any) -> Dict[str, float]:
    if not isinstance(raw, Mapping):
        return {"x": 0, "y": 0}
    return {
        "x": finite_float(raw.get("x")),
        "y": finite_float(raw.get("y")),
    }


def _import_graph(raw_nodes: List[Any], raw_edges: List[Any]) -> Flow:
    nodes: List[DiagramNode] = []
    for raw in raw_nodes:
        if not isinstance(raw, Mapping):
            raise ValueError("node entries must be objects")
        data = raw.get("data") if isinstance(raw.get("data"), Mapping) else {}
        title = data.get("title")
        if title is None:
            title = data.get("label")
        if title is None:
            title = "Untitled"
        details = data.get("details")
        completed = data.get("completed")
        nodes.append(
            DiagramNode(
                id=str(raw.get("id")),
                title=str(title),
                details=[str(d) for d in details] if isinstance(details, list) else [],
                completed=bool(completed) if completed is not None else False,
                context=str(data["context"]) if data.get("context") else None,
                position=_import_position(raw.get("position")),
                type=raw.get("type") or NODE_TYPE,
            )
        )

    edges: List[DiagramEdge] = []
    for raw in raw_edges:
        if not isinstance(raw, Mapping):
            raise ValueError("edge entries must be objects")
        source = str(raw.get("source"))
        target = str(raw.get("target"))
        raw_id = raw.get("id")
        edges.append(
            DiagramEdge(
                source=source,
                target=target,
                id=str(raw_id) if raw_id is not None else edge_id(source, target),
                type=raw.get("type") or EDGE_TYPE,
            )
        )

    flow = Flow(nodes=nodes, edges=edges)
    dangling = flow.dangling_edges()
    if dangling:
        logger.warning("Dropping %d imported edge(s) that reference unknown nodes", len(dangling))
        flow.edges = [e for e in edges if e not in dangling]
    return flow


def _reject_constant(name: str) -> float:
    raise ValueError(f"{name} is not valid JSON")


def parse_json_flow(
    json_string: str, on_toggle_complete: Optional[ToggleCallback] = None
) -> Tuple[bool, Optional[Flow]]:
    """Import ``{"steps": [...]}`` or ``{"nodes": [...], "edges": [...]}``.

    Returns ``(True, flow)`` on success and ``(False, None)`` for malformed
    JSON or an unrecognised shape. Never raises.
    """
    try:
        parsed = json.loads(json_string, parse_constant=_reject_constant)
    except (TypeError, ValueError):
        return False, None

    if not isinstance(parsed, dict):
        return False, None

    try:
        if isinstance(parsed.get("steps"), list):
            if not all(isinstance(s, Mapping) for s in parsed["steps"]):
                return False, None
            steps = [Step.from_dict(s) for s in parsed["steps"]]
            return True, steps_to_flow(steps, on_toggle_complete)
        if isinstance(parsed.get("nodes"), list) and isinstance(parsed.get("edges"), list):
            flow = _import_graph(parsed["nodes"], parsed["edges"])
            _attach_toggle(flow, on_toggle_complete)
            return True, flow
    except (TypeError, ValueError) as exc:
        logger.debug("Rejected diagram import: %s", exc)
        return False, None
    return False, None


def flow_to_steps(flow: Flow) -> List[Step]:
    """Read a diagram back as steps, in node order."""
    return flow.to_steps()


def duplicate_node_ids(flow: Flow) -> List[str]:
    return flow.duplicate_node_ids()
