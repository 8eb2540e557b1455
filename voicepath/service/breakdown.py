# voicepath/service/breakdown.py
"""Subtask breakdown ("flowchart") generation for a task."""
from typing import Any, Dict, List, Optional

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from voicepath.models import Task
from voicepath.service.llm_adapter import MAX_FLOWCHART_ITEMS, MIN_FLOWCHART_ITEMS, map_flowchart_items
from voicepath.service.prompts import FLOWCHART_PROMPT, FLOWCHART_REFINE_PROMPT
from voicepath.tasks import service as task_service
from voicepath.types.llm import FlowchartItemDict
from voicepath.utils.json_utils import parse_json_response
from voicepath.utils.llm_bedrock import invoke_prompt

SHORT_TASK_CONTEXT = "This is a short task - no subtasks needed. Complete it directly!"


def _invoke_flowchart(template: str, variables: Dict[str, Any]) -> List[FlowchartItemDict]:
    text = invoke_prompt(
        template,
        {**variables, "min_items": MIN_FLOWCHART_ITEMS, "max_items": MAX_FLOWCHART_ITEMS},
        model_id=current_app.config["BEDROCK_MODEL_ID_LITE"],
        temperature=current_app.config["FLOWCHART_TEMPERATURE"],
        component="Flowchart",
    )
    return map_flowchart_items(parse_json_response(text))


def stored_flowchart(task: Task, task_name: Optional[str] = None) -> List[FlowchartItemDict]:
    name = task_name or task.task_name
    return [
        {"id": str(st.order_index), "label": st.name, "context": f"Subtask {st.order_index} of {name}"}
        for st in task_service.list_subtasks(task)
    ]


def generate_flowchart(task: Task, task_name: Optional[str] = None,
                       importance: Optional[str] = None, duration: Optional[str] = None) -> Dict[str, Any]:
    """Return the task's breakdown, generating and storing it on first request.

    Stored subtasks win; short tasks get a single direct node without a model
    call; otherwise the model is asked once and the result is saved. A failed
    save still returns the generated flowchart with ``saved: False``.
    """
    task_name = task_name or task.task_name
    importance = importance or task.importance
    duration = duration or task.duration

    if task.has_subtasks:
        flowchart = stored_flowchart(task, task_name)
        current_app.logger.info(f"[Flowchart] Loaded {len(flowchart)} stored subtask(s) for task {task.id}")
        return {
            "flowchart": flowchart,
            "fromDatabase": True,
            "message": f"Loaded {len(flowchart)} existing subtasks from database",
        }

    if duration == "short":
        current_app.logger.info(f"[Flowchart] Task {task.id} is short; no subtasks generated")
        return {
            "flowchart": [{"id": "1", "label": task_name, "context": SHORT_TASK_CONTEXT}],
            "message": "Short tasks don't need subtasks - tackle it directly!",
            "shortTask": True,
        }

    flowchart = _invoke_flowchart(
        FLOWCHART_PROMPT,
        {"task_name": task_name, "importance": importance, "duration": duration},
    )
    saved = True
    try:
        task_service.save_flowchart_subtasks(task, [item["label"] for item in flowchart])
    except SQLAlchemyError as exc:
        current_app.logger.error(f"[Flowchart] Error inserting subtasks for task {task.id}: {exc}")
        saved = False
    return {"flowchart": flowchart, "generated": True, "saved": saved}


def refine_flowchart(user_prompt: str, current_steps: str = "") -> List[FlowchartItemDict]:
    """Rebuild a breakdown from a free-form request. Nothing is stored."""
    return _invoke_flowchart(
        FLOWCHART_REFINE_PROMPT,
        {"user_prompt": user_prompt, "current_steps": current_steps or "(none)"},
    )
