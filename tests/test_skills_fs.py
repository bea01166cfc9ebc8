from __future__ import annotations

from pathlib import Path

import pytest

from skill_registry.skills import SkillTree, normalize_rel_path


def test_normalize_rel_path_rejects_invalid_paths() -> None:
    with pytest.raises(ValueError):
        normalize_rel_path("")
    with pytest.raises(ValueError):
        normalize_rel_path("/abs/path")
    with pytest.raises(ValueError):
        normalize_rel_path("../escape")

    assert normalize_rel_path("a/b") == "a/b"
    assert normalize_rel_path("a/./b") == "a/b"
    assert normalize_rel_path("a//b") == "a/b"


def test_iter_manifest_paths_is_sorted_and_nested(tmp_path: Path) -> None:
    for rel, text in [("b/c/SKILL.md", "c"), ("a/SKILL.md", "a"), ("a/references/REF.md", "ref")]:
        path = tmp_path / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")

    tree = SkillTree.from_disk(tmp_path)

    assert list(tree.iter_files()) == ["a/SKILL.md", "a/references/REF.md", "b/c/SKILL.md"]
    assert list(tree.iter_manifest_paths()) == ["a/SKILL.md", "b/c/SKILL.md"]
    assert tree.read_text("b/c/SKILL.md") == "c"


def test_from_disk_filters_hidden_names_and_large_files(tmp_path: Path) -> None:
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "SKILL.md").write_text("small", encoding="utf-8")
    (tmp_path / "a" / "notes.md").write_text("ignored", encoding="utf-8")
    (tmp_path / ".hidden").mkdir()
    (tmp_path / ".hidden" / "SKILL.md").write_text("hidden", encoding="utf-8")
    (tmp_path / "big").mkdir()
    (tmp_path / "big" / "SKILL.md").write_text("x" * 100, encoding="utf-8")

    tree = SkillTree.from_disk(tmp_path, max_file_bytes=50, filenames={"SKILL.md"})

    assert list(tree.iter_files()) == ["a/SKILL.md"]
    assert tree.oversized == {"big/SKILL.md": 100}
    assert list(tree.iter_manifest_paths()) == ["a/SKILL.md", "big/SKILL.md"]


def test_from_disk_records_unreadable_files(tmp_path: Path) -> None:
    (tmp_path / "good").mkdir()
    (tmp_path / "good" / "SKILL.md").write_text("ok", encoding="utf-8")
    (tmp_path / "broken").mkdir()
    (tmp_path / "broken" / "SKILL.md").symlink_to(tmp_path / "missing.md")

    tree = SkillTree.from_disk(tmp_path, filenames={"SKILL.md"})

    assert list(tree.iter_files()) == ["good/SKILL.md"]
    assert list(tree.unreadable) == ["broken/SKILL.md"]
    assert list(tree.iter_manifest_paths()) == ["broken/SKILL.md", "good/SKILL.md"]


def test_read_text_rejects_directories(tmp_path: Path) -> None:
    (tmp_path / "a").mkdir()
    (tmp_path / "a" / "SKILL.md").write_text("x", encoding="utf-8")

    tree = SkillTree.from_disk(tmp_path)

    with pytest.raises(IsADirectoryError):
        tree.read_text("a")
    with pytest.raises(KeyError):
        tree.read_text("missing/SKILL.md")


def test_from_disk_requires_directory(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        SkillTree.from_disk(tmp_path / "missing")
