# voicepath/tasks/service.py
"""Task and subtask persistence.

Every mutating function commits once; a failed commit is rolled back and the
``SQLAlchemyError`` propagates to the route.
"""
from typing import Any, Dict, Iterable, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from voicepath.errors import NotFoundError, ValidationError
from voicepath.extensions import db
from voicepath.flow.steps import Step
from voicepath.models import Subtask, Task
from voicepath.tasks.validation import (
    MANAGE_ACTIONS,
    clean_task_name,
    normalize_task_payload,
    require_user_id,
)


def _commit() -> None:
    try:
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise


# ------------- Tasks -------------

def create_task(user_id: str, payload: Dict[str, Any]) -> Task:
    clean = normalize_task_payload(payload)
    task = Task()
    task.user_id = require_user_id(user_id)
    task.task_name = clean["task_name"]
    task.description = clean["description"]
    task.importance = clean["importance"]
    task.duration = clean["duration"]
    task.is_complete = False
    task.has_subtasks = False
    db.session.add(task)
    _commit()
    current_app.logger.info(f"[Task Service] Created task {task.id} for user {task.user_id}")
    return task


def create_tasks(user_id: str, payloads: Iterable[Dict[str, Any]]) -> List[Task]:
    """Insert several tasks in one commit (used for voice extraction)."""
    user_id = require_user_id(user_id)
    tasks: List[Task] = []
    for payload in payloads:
        clean = normalize_task_payload(payload)
        task = Task()
        task.user_id = user_id
        task.task_name = clean["task_name"]
        task.description = clean["description"]
        task.importance = clean["importance"]
        task.duration = clean["duration"]
        task.is_complete = False
        task.has_subtasks = False
        db.session.add(task)
        tasks.append(task)
    if tasks:
        _commit()
    current_app.logger.info(f"[Task Service] Inserted {len(tasks)} task(s) for user {user_id}")
    return tasks


def list_tasks(user_id: str) -> List[Task]:
    return (
        Task.query.filter_by(user_id=require_user_id(user_id))
        .order_by(Task.created_at.desc(), Task.id.desc())
        .all()
    )


def get_task(task_id: int, user_id: Optional[str] = None) -> Task:
    query = Task.query.filter_by(id=task_id)
    if user_id is not None:
        query = query.filter_by(user_id=str(user_id))
    task = query.first()
    if task is None:
        raise NotFoundError("Task not found")
    return task


def manage_task(task_id: int, user_id: str, action: str, new_task_name: Optional[str] = None) -> Dict[str, Any]:
    """Apply ``delete``, ``complete`` or ``rename`` to a task owned by ``user_id``.

    Completing a task removes it, matching the delete behaviour.
    """
    if action not in MANAGE_ACTIONS:
        raise ValidationError("Invalid action. Must be 'delete', 'complete', or 'rename'")
    task = get_task(task_id, require_user_id(user_id))

    if action == "rename":
        task.task_name = clean_task_name(new_task_name)
        _commit()
        current_app.logger.info(f"[Task Service] Renamed task {task_id}")
        return {"message": "Task renamed successfully", "task": task.to_dict()}

    db.session.delete(task)
    _commit()
    current_app.logger.info(f"[Task Service] Task {task_id} removed ({action})")
    if action == "complete":
        return {"message": "Task completed and removed", "taskId": task_id}
    return {"message": "Task deleted successfully", "taskId": task_id}


def update_focus_time(task: Task, seconds: int, *, add: bool = True) -> Task:
    seconds = max(0, int(seconds))
    task.focus_time = (task.focus_time or 0) + seconds if add else seconds
    _commit()
    return task


def save_chat_history(task: Task, history: List[Dict[str, Any]]) -> Task:
    task.chat_history = list(history)
    _commit()
    return task


def append_chat_messages(task: Task, *messages: Dict[str, Any]) -> Task:
    # Reassign so the JSON column is flagged dirty
    task.chat_history = list(task.chat_history or []) + list(messages)
    _commit()
    return task


# ------------- Subtasks -------------

def list_subtasks(task: Task) -> List[Subtask]:
    return Subtask.query.filter_by(task_id=task.id).order_by(Subtask.order_index.asc()).all()


def _replace_subtasks(task: Task, names: List[str]) -> List[Subtask]:
    Subtask.query.filter_by(task_id=task.id).delete(synchronize_session=False)
    rows: List[Subtask] = []
    for i, name in enumerate(names):
        st = Subtask()
        st.task_id = task.id
        st.name = name
        st.completed = False
        st.order_index = i + 1
        db.session.add(st)
        rows.append(st)
    task.has_subtasks = bool(rows)
    _commit()
    db.session.expire(task, ["subtasks"])
    return rows


def save_flowchart_subtasks(task: Task, labels: List[str]) -> List[Subtask]:
    """Store generated subtask labels with ``order_index`` 1..n and flag the task."""
    rows = _replace_subtasks(task, [str(label).strip() or f"Step {i + 1}" for i, label in enumerate(labels)])
    current_app.logger.info(f"[Task Service] Saved {len(rows)} subtask(s) for task {task.id}")
    return rows


def replace_subtasks_from_steps(task: Task, steps: List[Step]) -> List[Subtask]:
    """Persist an edited step list; step titles become subtask names in order."""
    names = [s.title.strip() or f"Step {s.id}" for s in steps]
    rows = _replace_subtasks(task, names)
    current_app.logger.info(f"[Task Service] Replaced subtasks of task {task.id} from {len(steps)} step(s)")
    return rows


def clear_subtasks(task: Task) -> int:
    """Remove all subtasks so the breakdown can be regenerated."""
    removed = Subtask.query.filter_by(task_id=task.id).delete(synchronize_session=False)
    task.has_subtasks = False
    _commit()
    db.session.expire(task, ["subtasks"])
    current_app.logger.info(f"[Task Service] Cleared {removed} subtask(s) of task {task.id}")
    return removed


def set_subtask_completed(task: Task, order_index: int, completed: Optional[bool] = None) -> Subtask:
    """Set (or flip when ``completed`` is None) a subtask identified by its position."""
    st = Subtask.query.filter_by(task_id=task.id, order_index=order_index).first()
    if st is None:
        raise NotFoundError("Subtask not found")
    st.completed = (not st.completed) if completed is None else bool(completed)
    _commit()
    return st
