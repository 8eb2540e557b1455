# voicepath/tasks/export.py
"""Plain-text and JSON exports of task breakdowns.

The text form is what the assistant receives as ``TASK BREAKDOWN CONTEXT`` and
what users download; the JSON form carries the same data for other tools.
"""
import json
from typing import Any, Iterable, List, Optional

from voicepath.models import Task
from voicepath.types.export import FlowchartData, SubtaskEntry

NO_SUBTASKS = "No subtasks available"
NO_TASKS = "No tasks with flowcharts found."
TASK_SEPARATOR = "─" * 30
HEADER_RULE = "=" * 50


def progress_percentage(completed: int, total: int) -> int:
    """Rounded completion percentage; 0 when there are no subtasks."""
    if total <= 0:
        return 0
    # Round half up, e.g. 1 of 8 -> 13
    return int(completed * 100 / total + 0.5)


def get_flowchart_data(task: Task) -> FlowchartData:
    subtasks: List[SubtaskEntry] = [
        {"order": st.order_index, "name": st.name, "completed": bool(st.completed)}
        for st in sorted(task.subtasks, key=lambda s: s.order_index)
    ]
    completed = sum(1 for st in subtasks if st["completed"])
    return {
        "taskName": task.task_name,
        "taskDescription": task.description,
        "importance": task.importance,
        "duration": task.duration,
        "subtasks": subtasks,
        "totalSteps": len(subtasks),
        "completedSteps": completed,
        "progressPercentage": progress_percentage(completed, len(subtasks)),
    }


def get_all_flowchart_data(tasks: Iterable[Task]) -> List[FlowchartData]:
    """Flowchart data for every task that has a stored breakdown."""
    return [get_flowchart_data(t) for t in tasks if t.has_subtasks]


def format_flowchart_as_text(data: Optional[FlowchartData]) -> str:
    if not data:
        return NO_SUBTASKS
    lines = [
        f"📋 TASK: {data['taskName']}",
        f"📝 Description: {data.get('taskDescription') or 'No description'}",
        f"⚡ Importance: {str(data['importance']).upper()}",
        f"⏱️ Duration: {str(data['duration']).upper()}",
        f"📊 Progress: {data['completedSteps']}/{data['totalSteps']} ({data['progressPercentage']}%)",
        "",
    ]
    if not data["subtasks"]:
        lines.append(NO_SUBTASKS)
    else:
        lines.append("📋 SUBTASKS:")
        for st in data["subtasks"]:
            mark = "✅" if st["completed"] else "⏳"
            lines.append(f"{mark} {st['order']}. {st['name']}")
    return "\n".join(lines)


def format_all_flowcharts_as_text(items: List[FlowchartData]) -> str:
    if not items:
        return NO_TASKS
    blocks = [format_flowchart_as_text(d) for d in items]
    header = f"🎯 ALL TASK BREAKDOWNS\n{HEADER_RULE}\n\n"
    return header + f"\n\n{TASK_SEPARATOR}\n\n".join(blocks)


def flowchart_as_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_filename(task_name: str, extension: str) -> str:
    safe = "".join(ch if ch.isalnum() or ch in "-_" else "_" for ch in task_name.strip())[:60]
    return f"{safe or 'task'}_breakdown.{extension}"


def flowchart_text_for_task(task: Task) -> str:
    return format_flowchart_as_text(get_flowchart_data(task))
