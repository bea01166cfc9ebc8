"""Extract ordered workflow steps and cross-skill references from a manifest body.

Steps are opaque to the registry. They are split out so a consuming agent can
walk them in order, but their text is never interpreted here.

Recognised layouts, in order of preference:

* numbered step headings (``## Step 1: Gather context`` or ``### 2. Draft``)
* a top-level ordered list (``1. Read the diff``)
* anything else becomes a single step holding the whole body
"""

from __future__ import annotations

import re
from dataclasses import dataclass

_FENCE_RE = re.compile(r"^\s*(```|~~~)")
_HEADING_RE = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")
_STEP_HEADING_RE = re.compile(
    r"^(?:step\s+(?P<word>\d+)\s*[.:)\-]?|(?P<bare>\d+)\s*[.:)\-])\s*(?P<title>.*)$", re.IGNORECASE
)
_LIST_ITEM_RE = re.compile(r"^(\d+)[.)]\s+(.*)$")
_SKILL_REF_RE = re.compile(r"\bSkill\(\s*([A-Za-z0-9][\w.:\-]*)\s*\)")


@dataclass(frozen=True, slots=True)
class WorkflowStep:
    index: int
    title: str
    text: str


def _unfenced_lines(body: str) -> list[tuple[str, bool]]:
    """Pair each line with whether it sits inside a fenced code block."""
    result: list[tuple[str, bool]] = []
    fence: str | None = None
    for line in body.splitlines():
        match = _FENCE_RE.match(line)
        if match:
            marker = match.group(1)
            if fence is None:
                fence = marker
                result.append((line, True))
                continue
            if marker == fence:
                fence = None
                result.append((line, True))
                continue
        result.append((line, fence is not None))
    return result


def _steps_from_headings(lines: list[tuple[str, bool]]) -> list[WorkflowStep]:
    steps: list[WorkflowStep] = []
    current_title: str | None = None
    current_level = 0
    buffer: list[str] = []

    def flush() -> None:
        if current_title is not None:
            steps.append(
                WorkflowStep(index=len(steps), title=current_title, text="\n".join(buffer).strip())
            )

    for line, fenced in lines:
        heading = None if fenced else _HEADING_RE.match(line)
        if heading:
            level = len(heading.group(1))
            step = _STEP_HEADING_RE.match(heading.group(2))
            if step:
                flush()
                number = step.group("word") or step.group("bare")
                current_title = step.group("title").strip() or f"Step {number}"
                current_level = level
                buffer = []
                continue
            if current_title is not None and level <= current_level:
                flush()
                current_title = None
                buffer = []
                continue
        if current_title is not None:
            buffer.append(line)
    flush()
    return steps


def _steps_from_list(lines: list[tuple[str, bool]]) -> list[WorkflowStep]:
    steps: list[WorkflowStep] = []
    title: str | None = None
    buffer: list[str] = []

    def flush() -> None:
        if title is not None:
            text = "\n".join([title, *buffer]).strip()
            steps.append(WorkflowStep(index=len(steps), title=title, text=text))

    for line, fenced in lines:
        item = None if fenced else _LIST_ITEM_RE.match(line)
        if item:
            flush()
            title = item.group(2).strip()
            buffer = []
            continue
        if title is None:
            continue
        if fenced or not line.strip() or line[:1].isspace():
            buffer.append(line)
            continue
        # An unindented non-item line ends the list.
        flush()
        title = None
        buffer = []
    flush()
    return steps


def extract_workflow_steps(body: str) -> tuple[WorkflowStep, ...]:
    lines = _unfenced_lines(body)
    steps = _steps_from_headings(lines) or _steps_from_list(lines)
    if steps:
        return tuple(steps)
    text = body.strip()
    if not text:
        return ()
    return (WorkflowStep(index=0, title="Instructions", text=text),)


def extract_skill_references(body: str, *, exclude: str | None = None) -> tuple[str, ...]:
    """Names referenced as ``Skill(name)``, in order of first appearance."""
    seen: dict[str, None] = {}
    for match in _SKILL_REF_RE.finditer(body):
        name = match.group(1)
        if name != exclude:
            seen.setdefault(name, None)
    return tuple(seen)


__all__ = ["WorkflowStep", "extract_skill_references", "extract_workflow_steps"]
