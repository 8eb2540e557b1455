# voicepath/service/routes/voice_tasks.py
from flask import Blueprint, current_app, jsonify
from sqlalchemy.exc import SQLAlchemyError

from voicepath.errors import VoicePathError
from voicepath.service.extraction import extract_tasks
from voicepath.tasks import service as task_service
from voicepath.utils.request_utils import acting_user_id, error_response, json_body

voice_tasks_bp = Blueprint("voice_tasks_bp", __name__)


@voice_tasks_bp.route("/process-voice-tasks", methods=["POST"])
def process_voice_tasks():
    """Extract tasks from transcribed speech and store them for the user."""
    data = json_body()
    transcribed_text = str(data.get("transcribedText") or "").strip()
    user_id = acting_user_id(data, required=False)
    if not transcribed_text or not user_id:
        return jsonify({"error": "Missing transcribedText or userId"}), 400

    try:
        extracted = extract_tasks(transcribed_text)
        if not extracted:
            return jsonify({
                "tasks": [],
                "message": "No clear tasks were identified in the transcription.",
                "transcribedText": transcribed_text,
            }), 200
        inserted = task_service.create_tasks(user_id, extracted)
    except VoicePathError as exc:
        current_app.logger.error(f"[Voice Tasks] {exc.message}")
        return error_response(exc)
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[Voice Tasks] Error inserting tasks: {exc}")
        return jsonify({"error": "Database error while saving tasks"}), 500

    return jsonify({
        "tasks": [t.to_dict() for t in inserted],
        "message": f"Successfully created {len(inserted)} tasks from your voice note.",
        "transcribedText": transcribed_text,
        "extractedCount": len(extracted),
    }), 200
