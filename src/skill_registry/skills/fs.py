"""In-memory file tree used to scan skill directories."""

from __future__ import annotations

from collections.abc import Collection
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator


def normalize_rel_path(path: str) -> str:
    """Normalize and validate a relative path (posix separators, no '..')."""
    if not path:
        raise ValueError("path must be non-empty")
    p = Path(path)
    if p.is_absolute():
        raise ValueError("path must be relative")
    if any(part == ".." for part in p.parts):
        raise ValueError("path must not contain '..'")
    normalized = p.as_posix()
    if not normalized or normalized == ".":
        raise ValueError("path must not resolve to root")
    return normalized


@dataclass(slots=True)
class File:
    content: bytes

    def read_text(self, *, encoding: str = "utf-8") -> str:
        return self.content.decode(encoding)


@dataclass(slots=True)
class Directory:
    entries: dict[str, Directory | File] = field(default_factory=dict)


class SkillTree:
    """A read-mostly snapshot of a skills directory.

    Paths are always relative to the tree root and use POSIX separators.
    Files that were too large to load are listed in ``oversized`` and files that
    could not be read in ``unreadable`` (path to OS error) instead of being
    stored, so a single bad file never aborts a scan.
    """

    def __init__(self, root: Directory | None = None) -> None:
        self._root = root or Directory()
        self.oversized: dict[str, int] = {}
        self.unreadable: dict[str, str] = {}

    def read_text(self, path: str, *, encoding: str = "utf-8") -> str:
        node = self._get_node(path)
        if not isinstance(node, File):
            raise IsADirectoryError(path)
        return node.read_text(encoding=encoding)

    def iter_files(self) -> Iterator[str]:
        """Yield every file path in sorted order."""

        def walk(prefix: str, directory: Directory) -> Iterator[str]:
            for name in sorted(directory.entries):
                child = directory.entries[name]
                child_path = f"{prefix}/{name}" if prefix else name
                if isinstance(child, File):
                    yield child_path
                else:
                    yield from walk(child_path, child)

        yield from walk("", self._root)

    def iter_manifest_paths(self, manifest_filename: str = "SKILL.md") -> Iterator[str]:
        """Yield paths of manifest files, sorted, at any depth."""
        paths = [*self.iter_files(), *self.oversized, *self.unreadable]
        for path in sorted(paths):
            if path.rsplit("/", 1)[-1] == manifest_filename:
                yield path

    @classmethod
    def from_disk(
        cls,
        root: Path,
        *,
        include_hidden: bool = False,
        max_file_bytes: int | None = None,
        filenames: Collection[str] | None = None,
    ) -> SkillTree:
        """Load a directory tree into memory.

        When ``filenames`` is given only files with one of those names are read.
        """
        if not root.exists() or not root.is_dir():
            raise ValueError(f"root must be an existing directory: {root}")

        tree = cls()
        for path in sorted(root.rglob("*")):
            if path.is_dir():
                continue
            rel_parts = path.relative_to(root).parts
            if not include_hidden and any(part.startswith(".") for part in rel_parts):
                continue
            if filenames is not None and path.name not in filenames:
                continue
            rel = path.relative_to(root).as_posix()
            try:
                size = path.stat().st_size
                if max_file_bytes is not None and size > max_file_bytes:
                    tree.oversized[rel] = size
                    continue
                content = path.read_bytes()
            except OSError as exc:
                tree.unreadable[rel] = str(exc)
                continue
            tree._write(rel, content)
        return tree

    def _write(self, path: str, content: bytes) -> None:
        normalized = normalize_rel_path(path)
        parent, _, name = normalized.rpartition("/")
        directory = self._mkdirs(parent)
        directory.entries[name] = File(content=content)

    def _mkdirs(self, path: str) -> Directory:
        current = self._root
        if not path:
            return current
        for segment in path.split("/"):
            existing = current.entries.get(segment)
            if existing is None:
                existing = current.entries[segment] = Directory()
            if isinstance(existing, File):
                raise NotADirectoryError(f"{segment} is a file")
            current = existing
        return current

    def _get_node(self, path: str) -> Directory | File:
        if path == "":
            return self._root
        normalized = normalize_rel_path(path)
        current: Directory | File = self._root
        for segment in normalized.split("/"):
            if not isinstance(current, Directory):
                raise KeyError(path)
            current = current.entries[segment]
        return current
