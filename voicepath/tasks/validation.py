# voicepath/tasks/validation.py
"""Lightweight validation helpers for task payloads coming from the client or the LLM.
Unknown categorical values fall back to ``medium``; a task needs a non-blank name.
"""
from typing import Any, Dict, Optional

from voicepath.config import DURATION_LEVELS, IMPORTANCE_LEVELS
from voicepath.errors import ValidationError

DEFAULT_LEVEL = "medium"
MAX_TASK_NAME_LENGTH = 500
MANAGE_ACTIONS = ("delete", "complete", "rename")


def normalize_level(value: Any, allowed) -> str:
    s = str(value or "").strip().lower()
    return s if s in allowed else DEFAULT_LEVEL


def normalize_importance(value: Any) -> str:
    return normalize_level(value, IMPORTANCE_LEVELS)


def normalize_duration(value: Any) -> str:
    return normalize_level(value, DURATION_LEVELS)


def clean_task_name(value: Any) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Task name is required")
    return value.strip()[:MAX_TASK_NAME_LENGTH]


def normalize_task_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Return a clean ``{task_name, description, importance, duration}`` dict."""
    if not isinstance(payload, dict):
        raise ValidationError("Task payload must be an object")
    description: Optional[str] = payload.get("description")
    if description is not None and not isinstance(description, str):
        description = str(description)
    return {
        "task_name": clean_task_name(payload.get("task_name")),
        "description": (description or "").strip() or None,
        "importance": normalize_importance(payload.get("importance")),
        "duration": normalize_duration(payload.get("duration")),
    }


def require_user_id(value: Any) -> str:
    if value is None or not str(value).strip():
        raise ValidationError("User ID is required")
    return str(value).strip()
