from __future__ import annotations

from typing import Optional, TypedDict


class SubtaskEntry(TypedDict):
    order: int
    name: str
    completed: bool


class FlowchartData(TypedDict):
    taskName: str
    taskDescription: Optional[str]
    importance: str
    duration: str
    subtasks: list[SubtaskEntry]
    totalSteps: int
    completedSteps: int
    progressPercentage: int
