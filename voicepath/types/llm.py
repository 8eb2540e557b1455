from __future__ import annotations

from typing import TypedDict


class _FlowchartItemRequired(TypedDict):
    id: str
    label: str


class FlowchartItemDict(_FlowchartItemRequired, total=False):
    context: str
    completed: bool


class ExtractedTaskDict(TypedDict):
    task_name: str
    importance: str
    duration: str
    is_complete: bool
    has_subtasks: bool
