"""
Focus session timers.

A session counts focused seconds for one task. The client drives it with a
one-second ``tick``; once the configured check-in interval has passed since the
last check-in the session pauses and asks "how's it going?". Answering
"going well" resumes and restarts the check-in clock, "need help" stops the
timer and sends the user to the assistant.

Sessions live in a :class:`FocusSessionRegistry` owned by the Flask app
(``app.extensions["focus_sessions"]``); there is at most one per task.
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"
CHECK_IN = "check_in"
NEEDS_HELP = "needs_help"

Clock = Callable[[], float]


def format_time(seconds: int) -> str:
    """``3725`` -> ``"01:02:05"``."""
    seconds = max(0, int(seconds))
    hrs = seconds // 3600
    mins = (seconds % 3600) // 60
    secs = seconds % 60
    return f"{hrs:02d}:{mins:02d}:{secs:02d}"


@dataclass
class FocusSession:
    task_id: int
    check_in_interval_minutes: int = 1
    elapsed_seconds: int = 0
    state: str = IDLE
    minimized: bool = False
    clock: Clock = field(default=time.monotonic, repr=False, compare=False)
    last_check_in: float = field(default=0.0)

    def __post_init__(self) -> None:
        self.check_in_interval_minutes = max(1, int(self.check_in_interval_minutes or 1))
        self.elapsed_seconds = max(0, int(self.elapsed_seconds or 0))
        if not self.last_check_in:
            self.last_check_in = self.clock()

    @property
    def check_in_interval_seconds(self) -> int:
        return self.check_in_interval_minutes * 60

    @property
    def is_active(self) -> bool:
        return self.state == RUNNING

    def start(self) -> None:
        if self.state != RUNNING:
            self.state = RUNNING

    def pause(self) -> None:
        if self.state == RUNNING:
            self.state = PAUSED

    def tick(self) -> bool:
        """Advance one second. Returns True when this tick made a check-in due."""
        if self.state != RUNNING:
            return False
        self.elapsed_seconds += 1
        if self.clock() - self.last_check_in >= self.check_in_interval_seconds:
            self.state = CHECK_IN
            return True
        return False

    def request_check_in(self) -> None:
        """Open the check-in prompt straight away (e.g. from a notification link)."""
        self.state = CHECK_IN

    def going_well(self) -> None:
        self.last_check_in = self.clock()
        self.state = RUNNING

    def need_help(self) -> None:
        self.state = NEEDS_HELP

    def minimize(self) -> None:
        self.minimized = True

    def resume(self) -> None:
        self.minimized = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "taskId": self.task_id,
            "state": self.state,
            "isActive": self.is_active,
            "elapsedSeconds": self.elapsed_seconds,
            "elapsed": format_time(self.elapsed_seconds),
            "checkInIntervalMinutes": self.check_in_interval_minutes,
            "showCheckIn": self.state == CHECK_IN,
            "openAssistant": self.state == NEEDS_HELP,
            "minimized": self.minimized,
        }


class FocusSessionRegistry:
    """Thread-safe map of task id -> :class:`FocusSession`."""

    def __init__(self, default_interval_minutes: int = 1, clock: Optional[Clock] = None) -> None:
        self.default_interval_minutes = max(1, int(default_interval_minutes or 1))
        self._clock: Clock = clock or time.monotonic
        self._sessions: Dict[int, FocusSession] = {}
        self._lock = threading.Lock()

    def open(self, task_id: int, *, elapsed_seconds: int = 0,
             check_in_interval_minutes: Optional[int] = None) -> FocusSession:
        """Return the task's session, creating it if needed. Reopening never duplicates a timer."""
        with self._lock:
            session = self._sessions.get(int(task_id))
            if session is None:
                session = FocusSession(
                    task_id=int(task_id),
                    check_in_interval_minutes=check_in_interval_minutes or self.default_interval_minutes,
                    elapsed_seconds=elapsed_seconds,
                    clock=self._clock,
                )
                self._sessions[int(task_id)] = session
            session.resume()
            return session

    def get(self, task_id: int) -> Optional[FocusSession]:
        with self._lock:
            return self._sessions.get(int(task_id))

    def close(self, task_id: int) -> Optional[FocusSession]:
        with self._lock:
            return self._sessions.pop(int(task_id), None)

    def active(self) -> Dict[int, FocusSession]:
        with self._lock:
            return {tid: s for tid, s in self._sessions.items() if s.is_active}

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, task_id: object) -> bool:
        with self._lock:
            return task_id in self._sessions
