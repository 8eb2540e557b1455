# voicepath/service/routes/flowchart.py
from flask import Blueprint, current_app, jsonify

from voicepath.errors import VoicePathError
from voicepath.flow.diagram import flowchart_to_flow
from voicepath.service.breakdown import generate_flowchart, refine_flowchart
from voicepath.tasks import service as task_service
from voicepath.utils.request_utils import acting_user_id, error_response, json_body
from voicepath.utils.value_parsing import safe_int

flowchart_bp = Blueprint("flowchart_bp", __name__)


@flowchart_bp.route("/generate-flowchart", methods=["POST"])
def generate():
    """Return the stored breakdown of a task, or generate and save one."""
    data = json_body()
    task_id = safe_int(data.get("taskId"), default=0)
    if not task_id:
        return jsonify({"error": "taskId is required"}), 400
    try:
        task = task_service.get_task(task_id, acting_user_id(data, required=False))
        result = generate_flowchart(
            task,
            task_name=data.get("taskName"),
            importance=data.get("importance"),
            duration=data.get("duration"),
        )
    except VoicePathError as exc:
        current_app.logger.error(f"[Flowchart] Generation failed for task {task_id}: {exc.message}")
        return error_response(exc)
    result["flow"] = flowchart_to_flow(result["flowchart"]).to_dict()
    return jsonify(result), 200


@flowchart_bp.route("/refine-flowchart", methods=["POST"])
def refine():
    """Rebuild a breakdown from a free-form prompt; the result is not stored."""
    data = json_body()
    prompt = str(data.get("prompt") or "").strip()
    if not prompt:
        return jsonify({"error": "prompt is required"}), 400
    try:
        items = refine_flowchart(prompt, data.get("currentSteps") or "")
    except VoicePathError as exc:
        current_app.logger.error(f"[Flowchart] Refinement failed: {exc.message}")
        return error_response(exc)
    return jsonify({"flowchart": items, "flow": flowchart_to_flow(items).to_dict()}), 200
