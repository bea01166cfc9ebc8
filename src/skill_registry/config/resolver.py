"""Merge a project overlay over a manifest's option defaults."""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

import logfire

from ..exceptions import ConfigError, ConfigErrorKind
from ..settings import UnknownKeyPolicy
from ..skills.manifest import SkillManifest
from ..skills.options import type_name
from .overlay import ConfigOverlay


@dataclass(frozen=True, slots=True, eq=False)
class EffectiveConfig(Mapping[str, Any]):
    """Read-only snapshot of a skill's resolved options."""

    skill_name: str
    options: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    unknown_keys: tuple[str, ...] = ()
    overlay_source: str | None = None

    def __getitem__(self, key: str) -> Any:
        return self.options[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self.options)

    def __len__(self) -> int:
        return len(self.options)

    def as_dict(self) -> dict[str, Any]:
        return copy.deepcopy(dict(self.options))


def resolve_config(
    manifest: SkillManifest,
    overlay: ConfigOverlay | None = None,
    *,
    unknown_keys: UnknownKeyPolicy = "report",
) -> EffectiveConfig:
    """Return the manifest defaults with ``overlay`` applied on top.

    Values are deep-copied, so later changes to the overlay never leak into a
    config that was already resolved.
    """
    merged: dict[str, Any] = copy.deepcopy(manifest.defaults)
    if overlay is None:
        return EffectiveConfig(skill_name=manifest.name, options=MappingProxyType(merged))

    if overlay.skill_name != manifest.name:
        raise ConfigError(
            ConfigErrorKind.SKILL_MISMATCH,
            f"overlay for '{overlay.skill_name}' cannot be applied to skill '{manifest.name}'",
        )

    unknown: list[str] = []
    for key, value in overlay.options.items():
        spec = manifest.options.get(key)
        if spec is None:
            if unknown_keys == "error":
                raise ConfigError(
                    ConfigErrorKind.UNKNOWN_KEY,
                    f"option '{key}' is not declared by skill '{manifest.name}'",
                    key=key,
                )
            if unknown_keys == "report":
                unknown.append(key)
        elif not spec.accepts(value):
            expected = spec.expected()
            actual = type_name(value)
            raise ConfigError(
                ConfigErrorKind.TYPE_MISMATCH,
                f"option '{key}' of skill '{manifest.name}' expects {expected}, got {actual}",
                key=key,
                expected=expected,
                actual=actual,
            )
        merged[key] = copy.deepcopy(value)

    if unknown:
        logfire.warn(
            "Overlay sets options the skill does not declare",
            skill=manifest.name,
            unknown_keys=sorted(unknown),
            source=overlay.source,
        )

    return EffectiveConfig(
        skill_name=manifest.name,
        options=MappingProxyType(merged),
        unknown_keys=tuple(sorted(unknown)),
        overlay_source=overlay.source,
    )


__all__ = ["EffectiveConfig", "resolve_config"]
