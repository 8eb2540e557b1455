"""Numbered-step text parsing.

Turns free-form text such as::

    1. Plan the trip
    Pick dates.
    2. Book flights

into an ordered list of :class:`Step` records. Detail lines attach to the step
opened most recently; anything before the first numbered line is dropped.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

STEP_LINE = re.compile(r"^\s*([0-9]+)\.\s*(.+)$")
LINE_BREAK = re.compile(r"\r?\n")


@dataclass(slots=True)
class Step:
    id: str
    title: str
    details: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "details": list(self.details)}

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "Step":
        details = raw.get("details")
        return cls(
            id=str(raw.get("id")),
            title=str(raw.get("title") or ""),
            details=[str(d) for d in details] if isinstance(details, list) else [],
        )


def placeholder_step(number: int) -> Step:
    return Step(id=str(number), title=f"Step {number}", details=[])


def parse_steps(raw: str, fill_missing_numbers: bool = True) -> List[Step]:
    """Parse numbered-step text into steps.

    With ``fill_missing_numbers`` a jump such as 2 -> 5 inserts placeholder
    steps 3 and 4 just before step 5. Duplicate numbers are kept as-is.
    """
    steps: List[Step] = []
    current: Optional[Step] = None
    last_number: Optional[int] = None

    for line in LINE_BREAK.split(raw or ""):
        match = STEP_LINE.match(line)
        if match:
            number = int(match.group(1))
            title = match.group(2).strip()
            if current is not None:
                steps.append(current)
            if fill_missing_numbers and last_number is not None and number > last_number + 1:
                for missing in range(last_number + 1, number):
                    steps.append(placeholder_step(missing))
            current = Step(id=str(number), title=title)
            last_number = number
            continue
        content = line.strip()
        if content and current is not None:
            current.details.append(content)

    if current is not None:
        steps.append(current)
    return steps


def steps_to_text(steps: List[Step]) -> str:
    """Render steps back into the numbered-text form ``parse_steps`` reads."""
    lines: List[str] = []
    for step in steps:
        lines.append(f"{step.id}. {step.title}")
        lines.extend(step.details)
    return "\n".join(lines)
