"""Skill manifests: parsing, option schemas, allow-lists and workflow steps."""

from .fs import SkillTree, normalize_rel_path
from .manifest import (
    SkillFrontmatter,
    SkillManifest,
    load_manifest,
    parse_manifest,
    render_manifest,
    split_frontmatter,
)
from .options import OptionSpec, OptionType
from .tools import AllowedTool, ToolAllowList
from .workflow import WorkflowStep, extract_skill_references, extract_workflow_steps

__all__ = [
    "AllowedTool",
    "OptionSpec",
    "OptionType",
    "SkillFrontmatter",
    "SkillManifest",
    "SkillTree",
    "ToolAllowList",
    "WorkflowStep",
    "extract_skill_references",
    "extract_workflow_steps",
    "load_manifest",
    "normalize_rel_path",
    "parse_manifest",
    "render_manifest",
    "split_frontmatter",
]
