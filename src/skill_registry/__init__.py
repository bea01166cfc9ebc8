"""Skill manifest registry: load, configure and dispatch SKILL.md capabilities."""

from __future__ import annotations

from .config import (
    ConfigOverlay,
    EffectiveConfig,
    OverlayStore,
    load_overlay,
    resolve_config,
)
from .dispatch import DispatchContext, Dispatcher, InvocationState, WorkflowHandle
from .exceptions import (
    ConfigError,
    ConfigErrorKind,
    DispatchError,
    DispatchErrorKind,
    MarkerMissingError,
    ParseError,
    ParseErrorKind,
    RegistryError,
    RegistryErrorKind,
    RegistryLoadError,
    SkillRegistryError,
)
from .markers import find_skill_markers, require_skill_marker, unknown_markers
from .registry import LoadFailure, LoadReport, SkillRegistry, load_registry
from .settings import RegistrySettings
from .skills import (
    AllowedTool,
    OptionSpec,
    OptionType,
    SkillFrontmatter,
    SkillManifest,
    ToolAllowList,
    WorkflowStep,
    load_manifest,
    parse_manifest,
    render_manifest,
)

__all__ = [
    "AllowedTool",
    "ConfigError",
    "ConfigErrorKind",
    "ConfigOverlay",
    "DispatchContext",
    "DispatchError",
    "DispatchErrorKind",
    "Dispatcher",
    "EffectiveConfig",
    "InvocationState",
    "LoadFailure",
    "LoadReport",
    "MarkerMissingError",
    "OptionSpec",
    "OptionType",
    "OverlayStore",
    "ParseError",
    "ParseErrorKind",
    "RegistryError",
    "RegistryErrorKind",
    "RegistryLoadError",
    "RegistrySettings",
    "SkillFrontmatter",
    "SkillManifest",
    "SkillRegistry",
    "SkillRegistryError",
    "ToolAllowList",
    "WorkflowHandle",
    "WorkflowStep",
    "find_skill_markers",
    "load_manifest",
    "load_overlay",
    "load_registry",
    "parse_manifest",
    "render_manifest",
    "require_skill_marker",
    "resolve_config",
    "unknown_markers",
]

__version__ = "0.1.0"
