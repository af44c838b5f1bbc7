"""Sequence parser and serializer.

Converts raw assistant text into an ordered list of steps and back.

Step ids are always re-derived from line position. The numbers a model
writes after "Step" are only a hint that the text is a sequence; they are
never trusted as identity, so a reply that skips or repeats numbers still
yields a dense 1..k list.

Wire format, one step per line:

    Step 1: Define the campaign goal
    Step 2: Draft the launch email
"""

import re
from typing import Iterable

from src.workspace.schemas import Step

STEP_MARKER = re.compile(r"^Step \d+:")

LINE_BREAKS = re.compile(r"\s*[\r\n]+\s*")


def has_step_markers(raw_text: str) -> bool:
    """True if any non-blank line starts with a 'Step <digits>:' marker."""
    return any(STEP_MARKER.match(line.strip()) for line in raw_text.splitlines())


def parse_sequence(raw_text: str) -> list[Step]:
    """Parse raw text into steps.

    If at least one line carries a step marker, every non-blank line
    becomes a step with its marker (if any) stripped. Otherwise the whole
    text is wrapped as a single step.

    Blank or whitespace-only input yields no steps rather than one step
    with empty content, so it maps onto an empty workspace.
    """
    lines = [line.strip() for line in raw_text.splitlines()]
    lines = [line for line in lines if line]
    if not lines:
        return []

    if not has_step_markers(raw_text):
        return [Step(id=1, content=raw_text.strip())]

    steps = []
    for position, line in enumerate(lines, start=1):
        match = STEP_MARKER.match(line)
        content = line[match.end():] if match else line
        steps.append(Step(id=position, content=content))
    return steps


def serialize_steps(steps: Iterable[Step]) -> str:
    """Render steps as 'Step <id>: <content>' lines in ascending id order.

    Line breaks inside a step (only a wrapped unmarked reply has them) are
    folded to a space so each step stays on its own line.
    """
    return "\n".join(
        f"Step {step.id}: {LINE_BREAKS.sub(' ', step.content)}"
        for step in sorted(steps, key=lambda s: s.id)
    )
