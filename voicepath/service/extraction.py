# voicepath/service/extraction.py
from typing import List

from flask import current_app

from voicepath.service.llm_adapter import map_extracted_tasks
from voicepath.service.prompts import TASK_EXTRACTION_PROMPT
from voicepath.types.llm import ExtractedTaskDict
from voicepath.utils.json_utils import parse_json_response
from voicepath.utils.llm_bedrock import invoke_prompt


def extract_tasks(transcribed_text: str) -> List[ExtractedTaskDict]:
    """Ask the model for the actionable tasks in a transcription."""
    text = invoke_prompt(
        TASK_EXTRACTION_PROMPT,
        {"transcribed_text": transcribed_text},
        model_id=current_app.config["BEDROCK_MODEL_ID"],
        temperature=current_app.config["EXTRACTION_TEMPERATURE"],
        component="Voice Tasks",
    )
    tasks = map_extracted_tasks(parse_json_response(text))
    current_app.logger.info(f"[Voice Tasks] Extracted {len(tasks)} task(s) from transcription")
    return tasks
