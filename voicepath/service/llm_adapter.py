"""Map raw model JSON onto the app's task and flowchart contracts.

The prompts ask for strict JSON; these helpers validate what came back with
pydantic and normalise it:

- extracted tasks: [{ task_name, importance, duration, is_complete, has_subtasks }]
- flowchart items: [{ id, label, context }]
"""
from __future__ import annotations

from typing import Any, List

from pydantic import BaseModel, ValidationError as PydanticValidationError, field_validator

from voicepath.config import DURATION_LEVELS, IMPORTANCE_LEVELS
from voicepath.errors import LLMResponseError
from voicepath.tasks.validation import normalize_duration, normalize_importance
from voicepath.types.llm import ExtractedTaskDict, FlowchartItemDict
from voicepath.utils.llm_bedrock import _resolve_logger

MIN_FLOWCHART_ITEMS = 3
MAX_FLOWCHART_ITEMS = 8


class ExtractedTask(BaseModel):
    task_name: str
    importance: str = "medium"
    duration: str = "medium"

    @field_validator("task_name", mode="before")
    @classmethod
    def _require_name(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("missing or invalid task_name")
        return v.strip()

    @field_validator("importance", mode="before")
    @classmethod
    def _importance(cls, v: Any) -> str:
        return normalize_importance(v)

    @field_validator("duration", mode="before")
    @classmethod
    def _duration(cls, v: Any) -> str:
        return normalize_duration(v)

    def as_dict(self) -> ExtractedTaskDict:
        return {
            "task_name": self.task_name,
            "importance": self.importance,
            "duration": self.duration,
            "is_complete": False,
            "has_subtasks": False,
        }


class FlowchartItem(BaseModel):
    id: str = ""
    label: str = ""
    context: str = ""

    @field_validator("id", "label", "context", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v).strip()


def map_extracted_tasks(payload: Any) -> List[ExtractedTaskDict]:
    """Validate the extraction answer. ``[]`` is a valid answer."""
    if not isinstance(payload, list):
        raise LLMResponseError("AI did not return a valid task array")
    log = _resolve_logger()
    tasks: List[ExtractedTaskDict] = []
    for raw in payload:
        if not isinstance(raw, dict):
            raise LLMResponseError("Invalid task: expected an object")
        for key, allowed in (("importance", IMPORTANCE_LEVELS), ("duration", DURATION_LEVELS)):
            if str(raw.get(key) or "").strip().lower() not in allowed:
                log.warning(f"[Voice Tasks] Invalid {key} {raw.get(key)!r} for task {raw.get('task_name')!r}, defaulting to medium")
        try:
            tasks.append(ExtractedTask.model_validate(raw).as_dict())
        except PydanticValidationError as exc:
            raise LLMResponseError("Invalid task: missing or invalid task_name", details=str(exc)) from exc
    return tasks


def map_flowchart_items(payload: Any) -> List[FlowchartItemDict]:
    """Validate flowchart items; blank ids/labels get positional defaults."""
    if not isinstance(payload, list) or not payload:
        raise LLMResponseError("AI did not return a flowchart array")
    items: List[FlowchartItemDict] = []
    for i, raw in enumerate(payload):
        if not isinstance(raw, dict):
            raise LLMResponseError("Invalid flowchart item: expected an object")
        try:
            item = FlowchartItem.model_validate(raw)
        except PydanticValidationError as exc:
            raise LLMResponseError("Invalid flowchart item", details=str(exc)) from exc
        label = item.label or str(raw.get("title") or "").strip() or f"Step {i + 1}"
        out: FlowchartItemDict = {"id": item.id or str(i + 1), "label": label}
        if item.context:
            out["context"] = item.context
        items.append(out)
    if len(items) < MIN_FLOWCHART_ITEMS or len(items) > MAX_FLOWCHART_ITEMS:
        _resolve_logger().warning(
            f"[Flowchart] Model returned {len(items)} subtasks (expected {MIN_FLOWCHART_ITEMS}-{MAX_FLOWCHART_ITEMS})"
        )
    return items
