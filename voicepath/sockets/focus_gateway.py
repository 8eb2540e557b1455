"""Socket.IO ``/focus`` namespace driving focus sessions.

Client events carry ``{"taskId": ...}`` (plus ``userId`` on ``join``). The
server answers with ``focus:state`` after every change, ``focus:check_in`` when
a check-in becomes due and ``focus:open_assistant`` when the user asks for
help. Elapsed time is written to ``Task.focus_time`` whenever the timer stops.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import current_app
from flask_socketio import Namespace, emit, join_room, leave_room
from sqlalchemy.exc import SQLAlchemyError

from voicepath.errors import VoicePathError
from voicepath.focus.session import FocusSession, FocusSessionRegistry
from voicepath.tasks import service as task_service
from voicepath.utils.value_parsing import clamped_int, safe_int

NAMESPACE = "/focus"
MAX_CHECK_IN_INTERVAL_MINUTES = 120


def _registry() -> FocusSessionRegistry:
    return current_app.extensions["focus_sessions"]


def _room(task_id: int) -> str:
    return f"focus_{task_id}"


def _task_id(data: Any) -> Optional[int]:
    if not isinstance(data, dict):
        return None
    task_id = safe_int(data.get("taskId"), default=0)
    return task_id or None


def _persist_elapsed(session: FocusSession) -> None:
    try:
        task = task_service.get_task(session.task_id)
        task_service.update_focus_time(task, session.elapsed_seconds, add=False)
    except (VoicePathError, SQLAlchemyError) as exc:
        current_app.logger.error(f"[Focus] Could not save focus time for task {session.task_id}: {exc}")


def _emit_state(session: FocusSession) -> None:
    emit("focus:state", session.to_dict(), to=_room(session.task_id))


class FocusNamespace(Namespace):
    def _session(self, data: Any) -> Optional[FocusSession]:
        task_id = _task_id(data)
        session = _registry().get(task_id) if task_id else None
        if session is None:
            emit("focus:error", {"error": "No focus session for this task; join first"})
        return session

    def on_join(self, data):
        task_id = _task_id(data)
        if task_id is None:
            emit("focus:error", {"error": "taskId is required"})
            return
        user_id = data.get("userId")
        try:
            task = task_service.get_task(task_id, str(user_id) if user_id else None)
        except VoicePathError as exc:
            emit("focus:error", exc.to_dict())
            return
        registry = _registry()
        session = registry.open(
            task_id,
            elapsed_seconds=task.focus_time or 0,
            check_in_interval_minutes=clamped_int(
                data.get("checkInInterval"),
                default=registry.default_interval_minutes,
                minimum=1,
                maximum=MAX_CHECK_IN_INTERVAL_MINUTES,
            ),
        )
        if data.get("checkIn"):
            session.request_check_in()
        join_room(_room(task_id))
        current_app.logger.info(f"[Focus] Joined session for task {task_id}")
        _emit_state(session)

    def on_start(self, data):
        session = self._session(data)
        if session is None:
            return
        session.start()
        _emit_state(session)

    def on_pause(self, data):
        session = self._session(data)
        if session is None:
            return
        session.pause()
        _persist_elapsed(session)
        _emit_state(session)

    def on_tick(self, data):
        session = self._session(data)
        if session is None:
            return
        if session.tick():
            current_app.logger.info(f"[Focus] Check-in due for task {session.task_id}")
            _persist_elapsed(session)
            emit("focus:check_in", session.to_dict(), to=_room(session.task_id))
        _emit_state(session)

    def on_going_well(self, data):
        session = self._session(data)
        if session is None:
            return
        session.going_well()
        _emit_state(session)

    def on_need_help(self, data):
        session = self._session(data)
        if session is None:
            return
        session.need_help()
        _persist_elapsed(session)
        emit("focus:open_assistant", {"taskId": session.task_id}, to=_room(session.task_id))
        _emit_state(session)

    def on_minimize(self, data):
        session = self._session(data)
        if session is None:
            return
        session.minimize()
        _emit_state(session)

    def on_resume(self, data):
        session = self._session(data)
        if session is None:
            return
        session.resume()
        _emit_state(session)

    def on_exit(self, data):
        task_id = _task_id(data)
        session = _registry().close(task_id) if task_id else None
        if session is None:
            emit("focus:error", {"error": "No focus session for this task; join first"})
            return
        _persist_elapsed(session)
        payload: Dict[str, Any] = session.to_dict()
        payload["closed"] = True
        emit("focus:state", payload, to=_room(session.task_id))
        leave_room(_room(session.task_id))
        current_app.logger.info(f"[Focus] Closed session for task {session.task_id}")


def register_namespace(socketio) -> None:
    socketio.on_namespace(FocusNamespace(NAMESPACE))
