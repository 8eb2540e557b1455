# voicepath/service/routes/assistant.py
from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from voicepath.errors import VoicePathError
from voicepath.service.assistant import ask_assistant, render_html, suggest_step_context
from voicepath.tasks import export as task_export
from voicepath.tasks import service as task_service
from voicepath.utils.request_utils import acting_user_id, error_response, json_body
from voicepath.utils.value_parsing import as_bool, safe_int

assistant_bp = Blueprint("assistant_bp", __name__)


@assistant_bp.route("/unstuck-assistant", methods=["POST"])
def unstuck_assistant():
    """Answer a user prompt; with ``taskId`` the task breakdown is added as context."""
    data = json_body()
    user_prompt = str(data.get("userPrompt") or "").strip()
    if not user_prompt:
        return jsonify({"error": "userPrompt is required"}), 400

    task = None
    flowchart_text = None
    try:
        task_id = safe_int(data.get("taskId"), default=0)
        if task_id:
            task = task_service.get_task(task_id, acting_user_id(data, required=False))
            flowchart_text = task_export.flowchart_text_for_task(task)
        answer = ask_assistant(user_prompt, flowchart_text)
    except VoicePathError as exc:
        current_app.logger.error(f"[Assistant] {exc.message}")
        return error_response(exc)

    if task is not None and as_bool(data.get("saveHistory")):
        try:
            task_service.append_chat_messages(
                task,
                {"role": "user", "content": user_prompt},
                {"role": "assistant", "content": answer},
            )
        except SQLAlchemyError as exc:
            # Answer is still returned
            current_app.logger.error(f"[Assistant] Failed to save chat history for task {task.id}: {exc}")

    return jsonify({"response": answer, "response_html": render_html(answer)}), 200


@assistant_bp.route("/add-context", methods=["POST"])
def add_context():
    """Expand the details of one step with model suggestions."""
    data = json_body()
    title = str(data.get("title") or "").strip()
    request_text = str(data.get("request") or "").strip()
    details = data.get("details") or []
    if isinstance(details, str):
        details = details.splitlines()
    if not title or not request_text or not isinstance(details, list):
        return jsonify({"error": "title, details and request are required"}), 400
    try:
        combined = suggest_step_context(title, [str(d) for d in details], request_text)
    except VoicePathError as exc:
        current_app.logger.error(f"[Assistant] Add-context failed: {exc.message}")
        return error_response(exc)
    return jsonify({"title": title, "details": combined}), 200
