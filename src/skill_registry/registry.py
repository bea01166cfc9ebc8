"""Capability registry: the single source of truth for which skills exist."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

import logfire

from .exceptions import (
    ParseError,
    ParseErrorKind,
    RegistryError,
    RegistryErrorKind,
    RegistryLoadError,
)
from .settings import RegistrySettings
from .skills.fs import SkillTree
from .skills.manifest import DEFAULT_UNREADY_STATUSES, SkillManifest, parse_manifest


class SkillRegistry:
    """Name-indexed set of manifests, enumerated in registration order.

    Registration happens on a single thread during initialization; once
    ``freeze()`` is called the registry is read-only and safe to share.
    """

    def __init__(self, *, unready_statuses: frozenset[str] = DEFAULT_UNREADY_STATUSES) -> None:
        self._skills: dict[str, SkillManifest] = {}
        self._frozen = False
        self._unready_statuses = unready_statuses

    def register(self, manifest: SkillManifest) -> None:
        """Add ``manifest``; the registry is left untouched if this raises."""
        if self._frozen:
            raise RegistryError(
                RegistryErrorKind.FROZEN,
                f"registry is frozen; cannot register '{manifest.name}'",
                name=manifest.name,
            )
        existing = self._skills.get(manifest.name)
        if existing is not None:
            where = f" (already loaded from {existing.source_path})" if existing.source_path else ""
            raise RegistryError(
                RegistryErrorKind.DUPLICATE_NAME,
                f"duplicate skill name '{manifest.name}'{where}",
                name=manifest.name,
            )
        self._skills[manifest.name] = manifest
        logfire.debug(
            "Skill registered",
            skill=manifest.name,
            status=manifest.status,
            allowed_tools=manifest.allowed_tools.as_strings(),
        )

    def lookup(self, name: str) -> SkillManifest | None:
        return self._skills.get(name)

    def get(self, name: str) -> SkillManifest:
        manifest = self._skills.get(name)
        if manifest is None:
            raise RegistryError(RegistryErrorKind.NOT_FOUND, f"unknown skill '{name}'", name=name)
        return manifest

    def list(self) -> list[SkillManifest]:
        return list(self._skills.values())

    def ready(self) -> list[SkillManifest]:
        """Manifests whose lifecycle status marks them usable."""
        return [m for m in self._skills.values() if m.is_ready(self._unready_statuses)]

    def is_ready(self, manifest: SkillManifest) -> bool:
        return manifest.is_ready(self._unready_statuses)

    def for_project_type(self, project_type: str) -> list[SkillManifest]:
        return [m for m in self._skills.values() if m.applies_to(project_type)]

    def catalog(self) -> list[tuple[str, str]]:
        """(name, description) pairs for every ready skill."""
        return [(m.name, m.description) for m in self.ready()]

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def names(self) -> list[str]:
        return list(self._skills.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._skills

    def __iter__(self) -> Iterator[SkillManifest]:
        return iter(self.list())

    def __len__(self) -> int:
        return len(self._skills)


@dataclass(frozen=True, slots=True)
class LoadFailure:
    path: str
    error: ParseError | RegistryError


@dataclass(slots=True)
class LoadReport:
    """Outcome of a directory scan: a (possibly partial) registry plus failures."""

    registry: SkillRegistry
    failures: list[LoadFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    def raise_for_failures(self) -> None:
        if self.failures:
            raise RegistryLoadError(self.failures)


def load_registry(root: Path | str, settings: RegistrySettings | None = None) -> LoadReport:
    """Scan ``root`` for manifests, register each one, then freeze the registry.

    A manifest that fails to parse or collides with an earlier name is recorded
    in the report and the scan continues. Manifests are visited in sorted path
    order so duplicate resolution is reproducible.
    """
    settings = settings or RegistrySettings()
    root = Path(root)
    registry = SkillRegistry(unready_statuses=settings.unready_statuses)
    report = LoadReport(registry=registry)

    with logfire.span("load skill registry", root=str(root)):
        tree = SkillTree.from_disk(
            root,
            include_hidden=settings.include_hidden,
            max_file_bytes=settings.max_file_bytes,
            filenames={settings.manifest_filename},
        )
        for rel_path in tree.iter_manifest_paths(settings.manifest_filename):
            source_path = str(root / rel_path)
            if rel_path in tree.oversized:
                report.failures.append(
                    LoadFailure(
                        path=source_path,
                        error=ParseError(
                            ParseErrorKind.FILE_TOO_LARGE,
                            f"manifest too large ({tree.oversized[rel_path]} bytes)",
                            source_path=source_path,
                        ),
                    )
                )
                continue
            if rel_path in tree.unreadable:
                report.failures.append(
                    LoadFailure(
                        path=source_path,
                        error=ParseError(
                            ParseErrorKind.UNREADABLE,
                            f"cannot read manifest: {tree.unreadable[rel_path]}",
                            source_path=source_path,
                        ),
                    )
                )
                continue
            try:
                manifest = parse_manifest(tree.read_text(rel_path), source_path=source_path)
                registry.register(manifest)
            except UnicodeDecodeError as exc:
                report.failures.append(
                    LoadFailure(
                        path=source_path,
                        error=ParseError(
                            ParseErrorKind.INVALID_ENCODING,
                            f"manifest is not valid UTF-8: {exc}",
                            source_path=source_path,
                        ),
                    )
                )
            except (ParseError, RegistryError) as exc:
                report.failures.append(LoadFailure(path=source_path, error=exc))

        registry.freeze()

    for failure in report.failures:
        logfire.warn("Skill failed to load", path=failure.path, error=str(failure.error))
    logfire.info(
        "Skill registry loaded",
        root=str(root),
        count=len(registry),
        failures=len(report.failures),
    )
    return report


__all__ = ["LoadFailure", "LoadReport", "SkillRegistry", "load_registry"]
