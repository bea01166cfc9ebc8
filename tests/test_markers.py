from __future__ import annotations

import pytest

from skill_registry.exceptions import MarkerMissingError
from skill_registry.markers import (
    find_skill_markers,
    has_skill_marker,
    require_skill_marker,
    unknown_markers,
)
from skill_registry.registry import SkillRegistry
from skill_registry.skills import parse_manifest
from tests.utils import skill_md

MESSAGE = """feat(hooks): add commit-msg validation

Adds the config-driven conventional commit hook.

Skill: conventional-commits
Skill: git-hooks-setup
Skill: conventional-commits
"""


def test_find_skill_markers_in_order() -> None:
    assert find_skill_markers(MESSAGE) == ["conventional-commits", "git-hooks-setup"]
    assert find_skill_markers("fix: typo\n\nMentions Skill: inline only") == []


def test_require_skill_marker() -> None:
    require_skill_marker(MESSAGE, "conventional-commits")
    assert not has_skill_marker(MESSAGE, "pr-writer")
    with pytest.raises(MarkerMissingError, match="Skill: pr-writer"):
        require_skill_marker(MESSAGE, "pr-writer")


def test_unknown_markers_checks_registry() -> None:
    registry = SkillRegistry()
    registry.register(parse_manifest(skill_md("conventional-commits")))
    assert unknown_markers(MESSAGE, registry) == ["git-hooks-setup"]
