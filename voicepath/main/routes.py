# voicepath/main/routes.py
from flask import Blueprint, current_app, jsonify
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from voicepath.extensions import db
from voicepath.utils.llm_bedrock import is_bedrock_configured

main_bp = Blueprint("main_bp", __name__)


@main_bp.route("/health")
def health():
    try:
        db.session.execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[Health] Database check failed: {exc}")
        database = "error"
    return jsonify({
        "app": current_app.config["APP_NAME"],
        "database": database,
        "llm_configured": is_bedrock_configured(),
        "focus_sessions": len(current_app.extensions["focus_sessions"]),
    }), 200 if database == "ok" else 503
