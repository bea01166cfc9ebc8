"""Allow-list tokens declared by a skill's ``allowed-tools`` frontmatter."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

# Name or Name(specifier); the specifier may contain spaces and commas.
_TOKEN_RE = re.compile(r"\s*([A-Za-z_][\w.\-]*)(?:\(([^()]*)\))?\s*(?:,|\s|$)")


@dataclass(frozen=True, slots=True)
class AllowedTool:
    """One allow-list entry, e.g. ``Read`` or ``Bash(gh issue:*)``."""

    name: str
    specifier: str | None = None

    @classmethod
    def parse(cls, token: str) -> AllowedTool:
        parsed = list(_iter_tokens(token))
        if len(parsed) != 1:
            raise ValueError(f"Invalid allowed-tools token: {token!r}")
        return parsed[0]

    def permits(self, operation: str, argument: str | None = None) -> bool:
        if operation != self.name:
            return False
        if self.specifier is None:
            return True
        if argument is None:
            return False
        spec = self.specifier
        if spec.endswith(":*"):
            # Command prefix: the command itself or the command followed by arguments.
            prefix = spec[:-2]
            return argument == prefix or argument.startswith(prefix + " ")
        if spec.endswith("*"):
            return argument.startswith(spec[:-1])
        return argument == spec

    def __str__(self) -> str:
        if self.specifier is None:
            return self.name
        return f"{self.name}({self.specifier})"


def _iter_tokens(text: str) -> Iterator[AllowedTool]:
    pos = 0
    text = text.strip()
    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None or match.end() == pos:
            raise ValueError(f"Invalid allowed-tools value near {text[pos:]!r}")
        name, specifier = match.group(1), match.group(2)
        yield AllowedTool(name=name, specifier=specifier.strip() if specifier is not None else None)
        pos = match.end()
        while pos < len(text) and text[pos] in ", \t":
            pos += 1


class ToolAllowList:
    """Ordered, de-duplicated set of allow-list entries.

    An empty allow-list permits nothing.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Iterable[AllowedTool] = ()) -> None:
        seen: dict[AllowedTool, None] = {}
        for entry in entries:
            seen.setdefault(entry, None)
        self._entries: tuple[AllowedTool, ...] = tuple(seen)

    @classmethod
    def parse(cls, value: str | Iterable[str] | None) -> ToolAllowList:
        """Accept a YAML list or a whitespace/comma separated string."""
        if value is None:
            return cls()
        if isinstance(value, str):
            return cls(_iter_tokens(value))
        entries: list[AllowedTool] = []
        for item in value:
            if not isinstance(item, str):
                raise ValueError(f"allowed-tools entries must be strings, got {type(item).__name__}")
            entries.extend(_iter_tokens(item))
        return cls(entries)

    def match(self, operation: str, argument: str | None = None) -> AllowedTool | None:
        for entry in self._entries:
            if entry.permits(operation, argument):
                return entry
        return None

    def permits(self, operation: str, argument: str | None = None) -> bool:
        return self.match(operation, argument) is not None

    @property
    def names(self) -> frozenset[str]:
        return frozenset(entry.name for entry in self._entries)

    def as_strings(self) -> list[str]:
        return [str(entry) for entry in self._entries]

    def __iter__(self) -> Iterator[AllowedTool]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, str):
            return any(str(entry) == item for entry in self._entries)
        return item in self._entries

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ToolAllowList):
            return NotImplemented
        return set(self._entries) == set(other._entries)

    def __hash__(self) -> int:
        return hash(frozenset(self._entries))

    def __repr__(self) -> str:
        return f"ToolAllowList({self.as_strings()!r})"
