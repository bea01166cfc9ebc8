"""Option schema a manifest declares for project overlays."""

from __future__ import annotations

from enum import StrEnum, auto
from typing import Any

from pydantic import BaseModel, ConfigDict, field_serializer, model_validator


class OptionType(StrEnum):
    STRING = auto()
    ENUM = auto()
    BOOLEAN = auto()
    INTEGER = auto()
    NUMBER = auto()
    LIST = auto()
    MAPPING = auto()


_SPEC_KEYS = frozenset({"type", "default", "choices", "description"})


def type_name(value: Any) -> str:
    """Return the option-type vocabulary name for a decoded YAML value."""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return OptionType.BOOLEAN.value
    if isinstance(value, int):
        return OptionType.INTEGER.value
    if isinstance(value, float):
        return OptionType.NUMBER.value
    if isinstance(value, str):
        return OptionType.STRING.value
    if isinstance(value, list):
        return OptionType.LIST.value
    if isinstance(value, dict):
        return OptionType.MAPPING.value
    return type(value).__name__


def infer_option_type(value: Any) -> OptionType:
    name = type_name(value)
    try:
        return OptionType(name)
    except ValueError:
        raise ValueError(f"cannot infer an option type from {name}") from None


class OptionSpec(BaseModel):
    """A single declared option: its type, default, and allowed choices."""

    type: OptionType
    default: Any = None
    choices: list[Any] | None = None
    description: str | None = None

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_default(self) -> OptionSpec:
        if self.type is OptionType.ENUM and not self.choices:
            raise ValueError("enum options must declare non-empty 'choices'")
        if self.type is not OptionType.ENUM and self.choices is not None:
            raise ValueError("'choices' is only valid for enum options")
        if self.default is not None and not self.accepts(self.default):
            raise ValueError(
                f"default {self.default!r} does not match declared type {self.type.value}"
            )
        return self

    def accepts(self, value: Any) -> bool:
        if self.type is OptionType.ENUM:
            kind = type_name(value)
            return any(value == choice and kind == type_name(choice) for choice in self.choices or [])
        if self.type is OptionType.NUMBER:
            return type_name(value) in (OptionType.NUMBER.value, OptionType.INTEGER.value)
        return type_name(value) == self.type.value

    @field_serializer("type")
    def _serialize_type(self, value: OptionType) -> str:
        return value.value

    def expected(self) -> str:
        if self.type is OptionType.ENUM:
            return f"enum{list(self.choices or [])}"
        return self.type.value


def coerce_option_spec(raw: Any) -> OptionSpec:
    """Build an OptionSpec from either a full spec mapping or a bare default.

    A mapping is a full spec only when it has a ``type`` key and nothing but
    spec keys; any other mapping is a bare ``mapping`` default.
    """
    if isinstance(raw, OptionSpec):
        return raw
    if isinstance(raw, dict) and "type" in raw and set(raw) <= _SPEC_KEYS:
        return OptionSpec.model_validate(raw)
    return OptionSpec(type=infer_option_type(raw), default=raw)


__all__ = [
    "OptionSpec",
    "OptionType",
    "coerce_option_spec",
    "infer_option_type",
    "type_name",
]
