# voicepath/utils/request_utils.py
from typing import Any, Dict, Optional

from flask import jsonify, request

from voicepath.errors import ValidationError, VoicePathError


def json_body() -> Dict[str, Any]:
    """Return the request JSON object, or ``{}`` when the body is absent or not an object."""
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def acting_user_id(data: Optional[Dict[str, Any]] = None, required: bool = True) -> Optional[str]:
    """User id supplied by the client: body ``userId``, ``X-User-Id`` header, or ``?userId=``."""
    data = data if data is not None else json_body()
    value = data.get("userId") or request.headers.get("X-User-Id") or request.args.get("userId")
    if value is None or not str(value).strip():
        if required:
            raise ValidationError("User ID is required")
        return None
    return str(value).strip()


def error_response(exc: VoicePathError):
    return jsonify(exc.to_dict()), exc.status_code
