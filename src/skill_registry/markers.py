"""Skill usage markers left in commit messages.

Commit-msg hooks can require that a commit was produced through a particular
skill by checking for a trailer line such as::

    Skill: conventional-commits
"""

from __future__ import annotations

import re

from .exceptions import MarkerMissingError
from .registry import SkillRegistry

_MARKER_RE = re.compile(r"^\s*Skill:\s*([A-Za-z0-9][\w.\-]*)\s*$", re.MULTILINE)


def find_skill_markers(message: str) -> list[str]:
    """Return skill names from ``Skill: <name>`` lines, in order, without repeats."""
    seen: dict[str, None] = {}
    for match in _MARKER_RE.finditer(message):
        seen.setdefault(match.group(1), None)
    return list(seen)


def has_skill_marker(message: str, skill_name: str) -> bool:
    return skill_name in find_skill_markers(message)


def require_skill_marker(message: str, skill_name: str) -> None:
    if not has_skill_marker(message, skill_name):
        raise MarkerMissingError(skill_name)


def unknown_markers(message: str, registry: SkillRegistry) -> list[str]:
    """Marker names that do not resolve to a registered skill."""
    return [name for name in find_skill_markers(message) if name not in registry]


__all__ = [
    "find_skill_markers",
    "has_skill_marker",
    "require_skill_marker",
    "unknown_markers",
]
