"""Parsing and rendering for SKILL.md manifests."""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_serializer,
    field_validator,
)

from ..exceptions import ParseError, ParseErrorKind
from .options import OptionSpec, coerce_option_spec
from .tools import ToolAllowList

_FRONTMATTER_MARKER_RE = re.compile(r"^---\s*$")
# Skill names double as config file and directory names.
_SKILL_NAME_RE = re.compile(r"\w[\w.-]*")

REQUIRED_FIELDS = ("name", "description")
DEFAULT_UNREADY_STATUSES = frozenset({"skeleton", "draft"})

_KNOWN_KEYS = {
    "name",
    "description",
    "allowed-tools",
    "allowed_tools",
    "status",
    "project_types",
    "implementation",
    "license",
    "compatibility",
    "metadata",
    "options",
}


class SkillFrontmatter(BaseModel):
    """Declared skill metadata; unknown keys are carried in ``extras``."""

    name: str
    description: str
    allowed_tools: ToolAllowList = Field(default_factory=ToolAllowList, alias="allowed-tools")
    status: str | None = None
    project_types: list[str] | None = None
    implementation: str | None = None
    license: str | None = None
    compatibility: str | None = None
    metadata: dict[str, Any] | None = None
    options: dict[str, OptionSpec] = Field(default_factory=dict)

    extras: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
    )

    @field_validator("name", "description")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must be a non-empty string")
        return value

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        if not _SKILL_NAME_RE.fullmatch(value):
            raise ValueError(
                "must start with a letter, digit or underscore and contain only"
                " letters, digits, '.', '-' or '_'"
            )
        return value

    @field_validator("allowed_tools", mode="before")
    @classmethod
    def _parse_allowed_tools(cls, value: Any) -> ToolAllowList:
        if isinstance(value, ToolAllowList):
            return value
        return ToolAllowList.parse(value)

    @field_validator("project_types", mode="before")
    @classmethod
    def _listify_project_types(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [value]
        return value

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, value: Any) -> Any:
        if value is None:
            return {}
        if not isinstance(value, dict):
            raise ValueError("options must be a mapping of option key to spec or default")
        coerced: dict[str, OptionSpec] = {}
        for key, raw in value.items():
            if not isinstance(key, str):
                raise ValueError(f"option keys must be strings, got {key!r}")
            try:
                coerced[key] = coerce_option_spec(raw)
            except ValidationError as exc:
                raise ValueError(f"option {key!r}: {exc.errors()[0]['msg']}") from None
            except ValueError as exc:
                raise ValueError(f"option {key!r}: {exc}") from None
        return coerced

    @field_serializer("allowed_tools")
    def _serialize_allowed_tools(self, value: ToolAllowList) -> list[str]:
        return value.as_strings()


@dataclass(slots=True, frozen=True)
class SkillManifest:
    frontmatter: SkillFrontmatter
    body: str
    source_path: str | None = field(default=None, compare=False)

    @property
    def name(self) -> str:
        return self.frontmatter.name

    @property
    def description(self) -> str:
        return self.frontmatter.description

    @property
    def allowed_tools(self) -> ToolAllowList:
        return self.frontmatter.allowed_tools

    @property
    def status(self) -> str | None:
        return self.frontmatter.status

    @property
    def project_types(self) -> list[str]:
        return list(self.frontmatter.project_types or [])

    @property
    def implementation(self) -> str | None:
        return self.frontmatter.implementation

    @property
    def options(self) -> dict[str, OptionSpec]:
        return self.frontmatter.options

    @property
    def defaults(self) -> dict[str, Any]:
        """Option key to default value, in declaration order."""
        return {key: spec.default for key, spec in self.frontmatter.options.items()}

    @property
    def extras(self) -> dict[str, Any]:
        return self.frontmatter.extras

    def is_ready(self, unready_statuses: Collection[str] = DEFAULT_UNREADY_STATUSES) -> bool:
        status = self.frontmatter.status
        return status is None or status.strip().lower() not in unready_statuses

    def applies_to(self, project_type: str) -> bool:
        types = self.frontmatter.project_types
        return not types or project_type in types


def split_frontmatter(text: str, *, source_path: str | None = None) -> tuple[str, str]:
    """Return the raw YAML block and the untouched body that follows it."""
    lines = text.removeprefix("\ufeff").splitlines(keepends=True)
    if not lines or not _FRONTMATTER_MARKER_RE.match(lines[0]):
        raise ParseError(
            ParseErrorKind.MISSING_FRONTMATTER,
            "manifest must start with YAML frontmatter ('---')",
            source_path=source_path,
        )

    for idx in range(1, len(lines)):
        if _FRONTMATTER_MARKER_RE.match(lines[idx]):
            return "".join(lines[1:idx]), "".join(lines[idx + 1 :])
    raise ParseError(
        ParseErrorKind.MISSING_FRONTMATTER,
        "manifest frontmatter block is not closed ('---')",
        source_path=source_path,
    )


def parse_manifest(text: str, *, source_path: str | None = None) -> SkillManifest:
    """Parse a manifest document into a SkillManifest."""
    yaml_block, body = split_frontmatter(text, source_path=source_path)

    try:
        data = yaml.safe_load(yaml_block)
    except yaml.YAMLError as exc:
        raise ParseError(
            ParseErrorKind.INVALID_YAML,
            f"frontmatter is not valid YAML: {exc}",
            source_path=source_path,
        ) from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ParseError(
            ParseErrorKind.NOT_A_MAPPING,
            "frontmatter must be a YAML mapping",
            source_path=source_path,
        )

    for required in REQUIRED_FIELDS:
        value = data.get(required)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ParseError(
                ParseErrorKind.MISSING_REQUIRED_FIELD,
                f"missing required field '{required}'",
                field=required,
                source_path=source_path,
            )

    known = {k: v for k, v in data.items() if k in _KNOWN_KEYS}
    extras = {k: v for k, v in data.items() if k not in _KNOWN_KEYS}

    try:
        frontmatter = SkillFrontmatter.model_validate({**known, "extras": extras})
    except ValidationError as exc:
        error = exc.errors()[0]
        loc = error["loc"][0] if error["loc"] else None
        raise ParseError(
            ParseErrorKind.INVALID_FIELD,
            f"invalid field '{loc}': {error['msg']}",
            field=str(loc) if loc is not None else None,
            source_path=source_path,
        ) from exc

    return SkillManifest(frontmatter=frontmatter, body=body, source_path=source_path)


def load_manifest(path: Path) -> SkillManifest:
    """Read a UTF-8 manifest file from disk and parse it."""
    return parse_manifest(path.read_text(encoding="utf-8"), source_path=str(path))


def render_manifest(manifest: SkillManifest) -> str:
    """Render a SkillManifest back into manifest text."""
    data = manifest.frontmatter.model_dump(
        by_alias=True,
        exclude_none=True,
        exclude={"extras"},
    )
    if not data.get("allowed-tools"):
        data.pop("allowed-tools", None)
    if not data.get("options"):
        data.pop("options", None)
    if manifest.frontmatter.extras:
        data.update(manifest.frontmatter.extras)

    yaml_text = yaml.safe_dump(data, sort_keys=False, allow_unicode=True).strip()
    return f"---\n{yaml_text}\n---\n{manifest.body}"


__all__ = [
    "DEFAULT_UNREADY_STATUSES",
    "REQUIRED_FIELDS",
    "SkillFrontmatter",
    "SkillManifest",
    "load_manifest",
    "parse_manifest",
    "render_manifest",
    "split_frontmatter",
]
