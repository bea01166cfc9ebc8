from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from skill_registry.exceptions import (
    ParseError,
    ParseErrorKind,
    RegistryError,
    RegistryErrorKind,
    RegistryLoadError,
)
from skill_registry.registry import SkillRegistry, load_registry
from skill_registry.settings import RegistrySettings
from skill_registry.skills import parse_manifest
from tests.utils import skill_md


def test_register_lookup_and_list_in_registration_order() -> None:
    registry = SkillRegistry()
    for name in ("zeta", "alpha", "mid"):
        registry.register(parse_manifest(skill_md(name)))

    assert [m.name for m in registry.list()] == ["zeta", "alpha", "mid"]
    assert registry.names == ["zeta", "alpha", "mid"]
    assert registry.lookup("alpha") is not None
    assert registry.lookup("missing") is None
    assert "mid" in registry
    assert len(registry) == 3


def test_duplicate_name_leaves_registry_unchanged() -> None:
    registry = SkillRegistry()
    first = parse_manifest(skill_md("pr-writer", "first"))
    registry.register(first)

    with pytest.raises(RegistryError) as exc_info:
        registry.register(parse_manifest(skill_md("pr-writer", "second")))

    assert exc_info.value.kind is RegistryErrorKind.DUPLICATE_NAME
    assert exc_info.value.name == "pr-writer"
    assert registry.list() == [first]
    assert registry.get("pr-writer").description == "first"


def test_get_raises_not_found() -> None:
    with pytest.raises(RegistryError) as exc_info:
        SkillRegistry().get("nope")
    assert exc_info.value.kind is RegistryErrorKind.NOT_FOUND


def test_frozen_registry_rejects_registration() -> None:
    registry = SkillRegistry()
    registry.freeze()
    with pytest.raises(RegistryError) as exc_info:
        registry.register(parse_manifest(skill_md("late")))
    assert exc_info.value.kind is RegistryErrorKind.FROZEN
    assert len(registry) == 0


def test_ready_and_project_type_filters() -> None:
    registry = SkillRegistry()
    registry.register(parse_manifest(skill_md("stable-one", extra="status: stable\n")))
    registry.register(parse_manifest(skill_md("skeleton-one", extra="status: Skeleton\n")))
    registry.register(parse_manifest(skill_md("cdk-only", extra="project_types: [cdk]\n")))

    assert [m.name for m in registry.ready()] == ["stable-one", "cdk-only"]
    assert [m.name for m in registry.for_project_type("web")] == ["stable-one", "skeleton-one"]
    assert registry.catalog() == [("stable-one", "d"), ("cdk-only", "d")]


def test_load_registry_collects_duplicates_in_path_order(
    tmp_path: Path, write_skill: Callable[..., Path]
) -> None:
    write_skill("a-writer", skill_md("pr-writer", "from a"))
    write_skill("b-writer", skill_md("pr-writer", "from b"))
    write_skill("translator", skill_md("translator"))

    report = load_registry(tmp_path / "skills")

    registry = report.registry
    assert registry.names == ["pr-writer", "translator"]
    assert registry.get("pr-writer").description == "from a"
    assert len(report.failures) == 1
    failure = report.failures[0]
    assert failure.path == str(tmp_path / "skills" / "b-writer" / "SKILL.md")
    assert isinstance(failure.error, RegistryError)
    assert failure.error.kind is RegistryErrorKind.DUPLICATE_NAME
    assert registry.frozen


def test_load_registry_keeps_going_after_bad_manifests(
    tmp_path: Path, write_skill: Callable[..., Path]
) -> None:
    write_skill("good", skill_md("good"))
    write_skill("no-frontmatter", "# Just prose\n")
    write_skill("no-name", "---\ndescription: d\n---\n")
    bad_encoding = tmp_path / "skills" / "latin1" / "SKILL.md"
    bad_encoding.parent.mkdir(parents=True)
    bad_encoding.write_bytes(b"---\nname: caf\xe9\ndescription: d\n---\n")

    report = load_registry(tmp_path / "skills")

    assert report.registry.names == ["good"]
    kinds = {Path(f.path).parent.name: f.error.kind for f in report.failures}
    assert kinds == {
        "latin1": ParseErrorKind.INVALID_ENCODING,
        "no-frontmatter": ParseErrorKind.MISSING_FRONTMATTER,
        "no-name": ParseErrorKind.MISSING_REQUIRED_FIELD,
    }
    assert not report.ok
    with pytest.raises(RegistryLoadError) as exc_info:
        report.raise_for_failures()
    assert len(exc_info.value.failures) == 3


def test_load_registry_reports_unreadable_manifest(
    tmp_path: Path, write_skill: Callable[..., Path]
) -> None:
    write_skill("good", skill_md("good"))
    dangling = tmp_path / "skills" / "bad" / "SKILL.md"
    dangling.parent.mkdir(parents=True)
    dangling.symlink_to(tmp_path / "gone" / "SKILL.md")

    report = load_registry(tmp_path / "skills")

    assert report.registry.names == ["good"]
    assert report.registry.frozen
    assert len(report.failures) == 1
    failure = report.failures[0]
    assert failure.path == str(dangling)
    assert isinstance(failure.error, ParseError)
    assert failure.error.kind is ParseErrorKind.UNREADABLE


def test_load_registry_respects_settings(tmp_path: Path, write_skill: Callable[..., Path]) -> None:
    write_skill("small", skill_md("small"))
    write_skill("large", skill_md("large", body="x" * 500))
    custom = tmp_path / "skills" / "custom" / "skill.md"
    custom.parent.mkdir(parents=True)
    custom.write_text(skill_md("custom"), encoding="utf-8")

    report = load_registry(tmp_path / "skills", RegistrySettings(max_file_bytes=200))
    assert report.registry.names == ["small"]
    assert [f.error.kind for f in report.failures] == [ParseErrorKind.FILE_TOO_LARGE]
    assert isinstance(report.failures[0].error, ParseError)

    lowercase = load_registry(tmp_path / "skills", RegistrySettings(manifest_filename="skill.md"))
    assert lowercase.registry.names == ["custom"]
    assert lowercase.ok


def test_settings_validation() -> None:
    with pytest.raises(ValueError):
        RegistrySettings(manifest_filename="nested/SKILL.md")
    with pytest.raises(ValueError):
        RegistrySettings(max_file_bytes=0)
    assert RegistrySettings(unready_statuses=["WIP"]).unready_statuses == frozenset({"wip"})
