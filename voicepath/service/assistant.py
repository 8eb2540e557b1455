# voicepath/service/assistant.py
"""Unstuck assistant: free-form help, optionally grounded in a task breakdown."""
from typing import List, Optional

import markdown
from flask import current_app

from voicepath.service.prompts import ADD_CONTEXT_PROMPT, ASSISTANT_PROMPT, BREAKDOWN_CONTEXT_HEADER
from voicepath.utils.llm_bedrock import invoke_prompt


def build_user_prompt(user_prompt: str, flowchart_text: Optional[str] = None) -> str:
    if not flowchart_text:
        return user_prompt
    return f"{user_prompt}{BREAKDOWN_CONTEXT_HEADER}{flowchart_text}"


def ask_assistant(user_prompt: str, flowchart_text: Optional[str] = None) -> str:
    text = invoke_prompt(
        ASSISTANT_PROMPT,
        {"user_prompt": build_user_prompt(user_prompt, flowchart_text)},
        model_id=current_app.config["BEDROCK_MODEL_ID"],
        temperature=current_app.config["ASSISTANT_TEMPERATURE"],
        component="Assistant",
    ).strip()
    if not text:
        current_app.logger.warning("[Assistant] Model returned an empty answer")
    return text


def render_html(text: str) -> str:
    return markdown.markdown(text or "", extensions=["fenced_code"])


def suggest_step_context(title: str, details: List[str], request_text: str) -> List[str]:
    """Ask for extra detail lines for one step; returns existing + new lines."""
    existing = [d.strip() for d in details if d and d.strip()]
    prompt = ADD_CONTEXT_PROMPT.format(title=title, details="\n".join(existing), request=request_text)
    answer = ask_assistant(prompt)
    new_lines = [line.strip() for line in answer.splitlines() if line.strip()]
    return existing + new_lines
