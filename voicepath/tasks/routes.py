# voicepath/tasks/routes.py
from flask import Blueprint, Response, current_app, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from voicepath.errors import ValidationError, VoicePathError
from voicepath.flow.diagram import subtasks_to_flow
from voicepath.flow.steps import Step, parse_steps
from voicepath.tasks import export as task_export
from voicepath.tasks import service as task_service
from voicepath.utils.request_utils import acting_user_id, error_response, json_body
from voicepath.utils.value_parsing import as_bool, safe_int

tasks_bp = Blueprint("tasks_bp", __name__)


def _db_error(exc: SQLAlchemyError, action: str):
    current_app.logger.error(f"[Task Service] Database error while {action}: {exc}")
    return jsonify({"error": f"Database error while {action}"}), 500


def _download(body: str, filename: str, mimetype: str) -> Response:
    return Response(
        body,
        mimetype=mimetype,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


# ------------- Tasks -------------

@tasks_bp.route("/tasks", methods=["GET"])
def list_tasks():
    try:
        user_id = acting_user_id({})
        tasks = task_service.list_tasks(user_id)
    except VoicePathError as exc:
        return error_response(exc)
    return jsonify({"tasks": [t.to_dict() for t in tasks]}), 200


@tasks_bp.route("/tasks", methods=["POST"])
def create_task():
    data = json_body()
    try:
        task = task_service.create_task(acting_user_id(data), data)
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, "creating the task")
    return jsonify({"task": task.to_dict()}), 201


@tasks_bp.route("/tasks/<int:task_id>", methods=["GET"])
def get_task(task_id: int):
    try:
        task = task_service.get_task(task_id, acting_user_id({}))
    except VoicePathError as exc:
        return error_response(exc)
    payload = task.to_dict()
    payload["subtasks"] = [st.to_dict() for st in task_service.list_subtasks(task)]
    return jsonify({"task": payload}), 200


@tasks_bp.route("/manage-task", methods=["POST"])
def manage_task():
    """Apply ``delete`` / ``complete`` / ``rename`` to one of the user's tasks."""
    data = json_body()
    task_id = safe_int(data.get("taskId"), default=0)
    action = data.get("action")
    if not task_id or not action:
        return jsonify({"error": "Missing required fields: taskId, userId, action"}), 400
    try:
        result = task_service.manage_task(task_id, acting_user_id(data), action, data.get("newTaskName"))
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, f"applying '{action}'")
    return jsonify({"success": True, **result}), 200


@tasks_bp.route("/tasks/<int:task_id>/focus-time", methods=["POST"])
def save_focus_time(task_id: int):
    data = json_body()
    seconds = safe_int(data.get("seconds"), default=-1)
    if seconds < 0:
        return jsonify({"error": "seconds must be a non-negative integer"}), 400
    try:
        task = task_service.get_task(task_id, acting_user_id(data))
        task_service.update_focus_time(task, seconds, add=as_bool(data.get("add"), default=True))
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, "saving focus time")
    return jsonify({"taskId": task.id, "focus_time": task.focus_time}), 200


@tasks_bp.route("/tasks/<int:task_id>/chat-history", methods=["GET", "PUT"])
def chat_history(task_id: int):
    data = json_body() if request.method == "PUT" else {}
    try:
        task = task_service.get_task(task_id, acting_user_id(data))
        if request.method == "PUT":
            history = data.get("chatHistory")
            if not isinstance(history, list):
                raise ValidationError("chatHistory must be a list")
            task_service.save_chat_history(task, history)
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, "saving chat history")
    return jsonify({"taskId": task.id, "chatHistory": task.chat_history or []}), 200


# ------------- Subtasks -------------

@tasks_bp.route("/tasks/<int:task_id>/subtasks", methods=["GET"])
def list_subtasks(task_id: int):
    try:
        task = task_service.get_task(task_id, acting_user_id({}))
    except VoicePathError as exc:
        return error_response(exc)
    return jsonify({"subtasks": [st.to_dict() for st in task_service.list_subtasks(task)]}), 200


@tasks_bp.route("/tasks/<int:task_id>/subtasks", methods=["PUT"])
def replace_subtasks(task_id: int):
    """Save an edited breakdown, given as ``steps`` objects or numbered ``text``."""
    data = json_body()
    raw_steps = data.get("steps")
    if isinstance(raw_steps, list) and all(isinstance(s, dict) for s in raw_steps):
        steps = [Step.from_dict(s) for s in raw_steps]
    elif isinstance(data.get("text"), str):
        steps = parse_steps(data["text"], fill_missing_numbers=as_bool(data.get("fillMissingNumbers"), True))
    else:
        return jsonify({"error": "Provide 'steps' (list of objects) or 'text'"}), 400
    try:
        task = task_service.get_task(task_id, acting_user_id(data))
        rows = task_service.replace_subtasks_from_steps(task, steps)
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, "saving subtasks")
    return jsonify({"subtasks": [st.to_dict() for st in rows], "has_subtasks": task.has_subtasks}), 200


@tasks_bp.route("/tasks/<int:task_id>/subtasks", methods=["DELETE"])
def clear_subtasks(task_id: int):
    """Drop the stored breakdown so the next flowchart request regenerates it."""
    try:
        task = task_service.get_task(task_id, acting_user_id({}))
        removed = task_service.clear_subtasks(task)
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, "clearing subtasks")
    return jsonify({"taskId": task.id, "removed": removed, "has_subtasks": False}), 200


@tasks_bp.route("/tasks/<int:task_id>/subtasks/<int:order_index>/toggle", methods=["POST"])
def toggle_subtask(task_id: int, order_index: int):
    data = json_body()
    completed = data.get("completed")
    try:
        task = task_service.get_task(task_id, acting_user_id(data))
        st = task_service.set_subtask_completed(
            task, order_index, None if completed is None else as_bool(completed)
        )
        progress = task_export.get_flowchart_data(task)
    except VoicePathError as exc:
        return error_response(exc)
    except SQLAlchemyError as exc:
        return _db_error(exc, "updating the subtask")
    return jsonify({
        "subtask": st.to_dict(),
        "completedSteps": progress["completedSteps"],
        "totalSteps": progress["totalSteps"],
        "progressPercentage": progress["progressPercentage"],
    }), 200


@tasks_bp.route("/tasks/<int:task_id>/flow", methods=["GET"])
def task_flow(task_id: int):
    """Stored subtasks as a node/edge diagram."""
    try:
        task = task_service.get_task(task_id, acting_user_id({}))
    except VoicePathError as exc:
        return error_response(exc)
    flow = subtasks_to_flow([st.to_dict() for st in task_service.list_subtasks(task)])
    return jsonify({"taskId": task.id, **flow.to_dict()}), 200


# ------------- Export -------------

@tasks_bp.route("/tasks/<int:task_id>/export", methods=["GET"])
def export_task(task_id: int):
    fmt = (request.args.get("format") or "text").lower()
    try:
        task = task_service.get_task(task_id, acting_user_id({}))
    except VoicePathError as exc:
        return error_response(exc)
    data = task_export.get_flowchart_data(task)
    if fmt == "json":
        return _download(task_export.flowchart_as_json(data),
                         task_export.export_filename(task.task_name, "json"), "application/json")
    if fmt not in ("text", "txt"):
        return jsonify({"error": "format must be 'text' or 'json'"}), 400
    return _download(task_export.format_flowchart_as_text(data),
                     task_export.export_filename(task.task_name, "txt"), "text/plain")


@tasks_bp.route("/export", methods=["GET"])
def export_all():
    """All of the user's breakdowns in one download."""
    fmt = (request.args.get("format") or "text").lower()
    try:
        tasks = task_service.list_tasks(acting_user_id({}))
    except VoicePathError as exc:
        return error_response(exc)
    items = task_export.get_all_flowchart_data(tasks)
    if fmt == "json":
        return _download(task_export.flowchart_as_json(items), "all_task_breakdowns.json", "application/json")
    if fmt not in ("text", "txt"):
        return jsonify({"error": "format must be 'text' or 'json'"}), 400
    return _download(task_export.format_all_flowcharts_as_text(items), "all_task_breakdowns.txt", "text/plain")
