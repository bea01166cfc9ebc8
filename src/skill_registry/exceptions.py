"""Custom exceptions used across skill-registry."""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum, auto
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .dispatch import WorkflowHandle


class SkillRegistryError(Exception):
    """Base class for every recoverable error raised by the registry."""


class ParseErrorKind(StrEnum):
    MISSING_FRONTMATTER = auto()
    INVALID_YAML = auto()
    NOT_A_MAPPING = auto()
    MISSING_REQUIRED_FIELD = auto()
    INVALID_FIELD = auto()
    INVALID_ENCODING = auto()
    FILE_TOO_LARGE = auto()
    UNREADABLE = auto()


class ParseError(SkillRegistryError):
    """Raised when a manifest document cannot be turned into a SkillManifest."""

    def __init__(
        self,
        kind: ParseErrorKind,
        message: str,
        *,
        field: str | None = None,
        source_path: str | None = None,
    ) -> None:
        self.kind = kind
        self.field = field
        self.source_path = source_path
        prefix = f"{source_path}: " if source_path else ""
        super().__init__(f"{prefix}{message}")


class ConfigErrorKind(StrEnum):
    TYPE_MISMATCH = auto()
    UNKNOWN_KEY = auto()
    SKILL_MISMATCH = auto()
    INVALID_OVERLAY = auto()


class ConfigError(SkillRegistryError):
    """Raised when an overlay is malformed or does not fit the manifest's options."""

    def __init__(
        self,
        kind: ConfigErrorKind,
        message: str,
        *,
        key: str | None = None,
        expected: str | None = None,
        actual: str | None = None,
    ) -> None:
        self.kind = kind
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(message)


class RegistryErrorKind(StrEnum):
    DUPLICATE_NAME = auto()
    NOT_FOUND = auto()
    FROZEN = auto()


class RegistryError(SkillRegistryError):
    """Raised on identity conflicts or illegal registry mutation."""

    def __init__(self, kind: RegistryErrorKind, message: str, *, name: str | None = None) -> None:
        self.kind = kind
        self.name = name
        super().__init__(message)


class RegistryLoadError(SkillRegistryError):
    """Aggregate of every failure collected while scanning a skills directory."""

    def __init__(self, failures: Sequence[Any]) -> None:
        self.failures = list(failures)
        lines = [f"{len(self.failures)} manifest(s) failed to load:"]
        lines.extend(f"  - {failure.path}: {failure.error}" for failure in self.failures)
        super().__init__("\n".join(lines))


class DispatchErrorKind(StrEnum):
    UNKNOWN_SKILL = auto()
    SKILL_NOT_READY = auto()
    CONFIG_FAILED = auto()
    OPERATION_NOT_ALLOWED = auto()
    INVALID_STATE = auto()


class DispatchError(SkillRegistryError):
    """Raised when a skill cannot be dispatched or an operation is refused."""

    def __init__(
        self,
        kind: DispatchErrorKind,
        message: str,
        *,
        skill_name: str | None = None,
        operation: str | None = None,
        handle: WorkflowHandle | None = None,
    ) -> None:
        self.kind = kind
        self.skill_name = skill_name
        self.operation = operation
        self.handle = handle
        super().__init__(message)


class MarkerMissingError(SkillRegistryError):
    """Raised when a commit message lacks the required ``Skill: <name>`` trailer."""

    def __init__(self, skill_name: str) -> None:
        self.skill_name = skill_name
        super().__init__(f"Required trailer missing: 'Skill: {skill_name}'")


__all__ = [
    "ConfigError",
    "ConfigErrorKind",
    "DispatchError",
    "DispatchErrorKind",
    "MarkerMissingError",
    "ParseError",
    "ParseErrorKind",
    "RegistryError",
    "RegistryErrorKind",
    "RegistryLoadError",
    "SkillRegistryError",
]
