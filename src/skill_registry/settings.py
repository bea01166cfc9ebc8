"""Configuration for loading and dispatching skills."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

UnknownKeyPolicy = Literal["report", "error", "ignore"]


class RegistrySettings(BaseModel):
    """Immutable settings shared by the loader, overlay store and dispatcher."""

    manifest_filename: str = Field(
        default="SKILL.md",
        description="File name that marks a directory as a skill.",
    )
    config_dir: str = Field(
        default=".claude/config",
        description="Project-relative directory holding per-skill overlay files.",
    )
    include_hidden: bool = Field(
        default=False,
        description="Whether dot-prefixed files and directories are scanned.",
    )
    max_file_bytes: int | None = Field(
        default=1024 * 1024,
        description="Reject manifest files larger than this; None disables the limit.",
    )
    unknown_overlay_keys: UnknownKeyPolicy = Field(
        default="report",
        description="How overlay keys not declared by the manifest are treated.",
    )
    unready_statuses: frozenset[str] = Field(
        default=frozenset({"skeleton", "draft"}),
        description="Lifecycle statuses that keep a skill out of ready listings.",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("manifest_filename")
    @classmethod
    def _validate_manifest_filename(cls, value: str) -> str:
        if not value or "/" in value or value in (".", ".."):
            raise ValueError("manifest_filename must be a plain file name.")
        return value

    @field_validator("max_file_bytes")
    @classmethod
    def _validate_max_file_bytes(cls, value: int | None) -> int | None:
        if value is not None and value <= 0:
            raise ValueError("max_file_bytes must be > 0.")
        return value

    @field_validator("unready_statuses", mode="before")
    @classmethod
    def _normalize_statuses(cls, value: object) -> object:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(item).strip().lower() for item in value)
        return value


__all__ = ["RegistrySettings", "UnknownKeyPolicy"]
