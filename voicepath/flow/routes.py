# voicepath/flow/routes.py
"""Stateless step/diagram conversions for the client editor."""
import json
from typing import Optional

from flask import Blueprint, jsonify

from voicepath.flow.diagram import Flow, flow_to_steps, parse_json_flow, steps_to_flow
from voicepath.flow.steps import parse_steps, steps_to_text
from voicepath.utils.request_utils import json_body
from voicepath.utils.value_parsing import as_bool

flow_bp = Blueprint("flow_bp", __name__)

EDIT_OPERATIONS = ("add_node", "delete_node", "update_node", "toggle_completion", "connect")


def _flow_response(flow: Flow, **extra):
    body = flow.to_dict()
    body["steps"] = [s.to_dict() for s in flow_to_steps(flow)]
    body["duplicates"] = flow.duplicate_node_ids()
    body.update(extra)
    return jsonify(body)


def _load_flow(data) -> Optional[Flow]:
    raw = data.get("flow")
    if isinstance(raw, str):
        ok, flow = parse_json_flow(raw)
    elif isinstance(raw, dict):
        # Our own responses carry both shapes; the graph keeps completion and user edges
        if isinstance(raw.get("nodes"), list) and isinstance(raw.get("edges"), list):
            raw = {"nodes": raw["nodes"], "edges": raw["edges"]}
        ok, flow = parse_json_flow(json.dumps(raw))
    else:
        ok, flow = False, None
    return flow if ok else None


@flow_bp.route("/parse", methods=["POST"])
def parse_text():
    """Numbered text -> steps + diagram."""
    data = json_body()
    text = data.get("text")
    if not isinstance(text, str):
        return jsonify({"error": "text is required"}), 400
    steps = parse_steps(text, fill_missing_numbers=as_bool(data.get("fillMissingNumbers"), True))
    return _flow_response(steps_to_flow(steps)), 200


@flow_bp.route("/import", methods=["POST"])
def import_json():
    """Import a diagram given as ``{"steps": [...]}`` or ``{"nodes": [...], "edges": [...]}``."""
    flow = _load_flow(json_body())
    if flow is None:
        return jsonify({"error": "Invalid JSON format"}), 400
    return _flow_response(flow), 200


@flow_bp.route("/to-text", methods=["POST"])
def to_text():
    flow = _load_flow(json_body())
    if flow is None:
        return jsonify({"error": "Invalid JSON format"}), 400
    return jsonify({"text": steps_to_text(flow_to_steps(flow))}), 200


@flow_bp.route("/edit", methods=["POST"])
def edit():
    """Apply one editor operation to a diagram and return the result."""
    data = json_body()
    flow = _load_flow(data)
    if flow is None:
        return jsonify({"error": "Invalid JSON format"}), 400
    op = data.get("op")
    args = data.get("args") if isinstance(data.get("args"), dict) else {}
    if op not in EDIT_OPERATIONS:
        return jsonify({"error": f"op must be one of {', '.join(EDIT_OPERATIONS)}"}), 400

    if op == "add_node":
        node = flow.add_node(title=args.get("title"))
        return _flow_response(flow, nodeId=node.id), 200
    node_id = str(args.get("nodeId") or args.get("source") or "")
    if op == "delete_node":
        changed = flow.delete_node(node_id)
    elif op == "update_node":
        changed = flow.update_node(node_id, str(args.get("title") or ""), str(args.get("details") or "")) is not None
    elif op == "toggle_completion":
        changed = flow.toggle_completion(node_id) is not None
    else:
        changed = flow.connect(node_id, str(args.get("target") or "")) is not None
    if not changed:
        return jsonify({"error": "Node not found"}), 404
    return _flow_response(flow), 200
