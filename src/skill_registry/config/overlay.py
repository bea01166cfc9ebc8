"""Project-level configuration overlays and their on-disk discovery."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import logfire
import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..exceptions import ConfigError, ConfigErrorKind

_SPLIT_MAIN = "main.yaml"
_YAML_SUFFIXES = (".yaml", ".yml")


class ConfigOverlay(BaseModel):
    """Options one project applies on top of a skill's manifest defaults."""

    skill_name: str
    options: dict[str, Any] = Field(default_factory=dict)
    source: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("skill_name")
    @classmethod
    def _validate_skill_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("skill_name must be a non-empty string.")
        return value


def _read_yaml_mapping(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise ConfigError(
            ConfigErrorKind.INVALID_OVERLAY,
            f"cannot read overlay {path}: {exc}",
        ) from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(
            ConfigErrorKind.INVALID_OVERLAY,
            f"overlay {path} must contain a YAML mapping at the top level",
        )
    return data


def overlay_candidates(config_dir: Path, skill_name: str) -> list[Path]:
    """Locations checked for a skill's overlay, in priority order."""
    if skill_name in (".", "..") or "/" in skill_name or "\\" in skill_name:
        raise ConfigError(
            ConfigErrorKind.INVALID_OVERLAY,
            f"skill name {skill_name!r} cannot be used as a config path",
        )
    return [
        config_dir / skill_name / _SPLIT_MAIN,
        config_dir / f"{skill_name}.yaml",
    ]


def load_overlay(config_dir: Path, skill_name: str) -> ConfigOverlay | None:
    """Load the overlay for ``skill_name`` from ``config_dir``, if one exists.

    A split config (``<skill>/main.yaml``) also pulls in every sibling YAML file
    under a key named after its stem, unless ``main.yaml`` already sets that key.
    """
    split_main, single = overlay_candidates(config_dir, skill_name)

    if split_main.is_file():
        options = _read_yaml_mapping(split_main)
        for path in sorted(split_main.parent.iterdir()):
            if path == split_main or path.suffix not in _YAML_SUFFIXES or not path.is_file():
                continue
            options.setdefault(path.stem, _read_yaml_mapping(path))
        return ConfigOverlay(skill_name=skill_name, options=options, source=str(split_main))

    if single.is_file():
        return ConfigOverlay(
            skill_name=skill_name,
            options=_read_yaml_mapping(single),
            source=str(single),
        )
    return None


class OverlayStore:
    """Lazily loaded, reloadable cache of overlays for one project.

    ``get`` returns the overlay object cached at the time of the call; a later
    ``reload`` swaps the cache entry but never mutates an overlay already handed
    out, so in-flight invocations keep a consistent view.
    """

    def __init__(self, config_dir: Path | str) -> None:
        self.config_dir = Path(config_dir)
        self._lock = threading.Lock()
        self._cache: dict[str, ConfigOverlay | None] = {}
        self._pinned: dict[str, ConfigOverlay] = {}

    def get(self, skill_name: str) -> ConfigOverlay | None:
        with self._lock:
            if skill_name in self._pinned:
                return self._pinned[skill_name]
            if skill_name in self._cache:
                return self._cache[skill_name]
            overlay = load_overlay(self.config_dir, skill_name)
            self._cache[skill_name] = overlay
        if overlay is not None:
            logfire.debug(
                "Overlay loaded",
                skill=skill_name,
                source=overlay.source,
                keys=sorted(overlay.options),
            )
        return overlay

    def put(self, overlay: ConfigOverlay) -> None:
        """Pin an in-memory overlay; it wins over files until removed."""
        with self._lock:
            self._pinned[overlay.skill_name] = overlay

    def remove(self, skill_name: str) -> None:
        with self._lock:
            self._pinned.pop(skill_name, None)
            self._cache.pop(skill_name, None)

    def reload(self, skill_name: str | None = None) -> None:
        """Drop cached file overlays so the next ``get`` rereads them from disk."""
        with self._lock:
            if skill_name is None:
                self._cache.clear()
            else:
                self._cache.pop(skill_name, None)
        logfire.info("Overlay cache reloaded", skill=skill_name or "*")


__all__ = ["ConfigOverlay", "OverlayStore", "load_overlay", "overlay_candidates"]
