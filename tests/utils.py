from __future__ import annotations


def skill_md(name: str, description: str = "d", *, extra: str = "", body: str = "# Body\n") -> str:
    """Build minimal SKILL.md text; ``extra`` is raw YAML inserted after the required keys."""
    return f"---\nname: {name}\ndescription: {description}\n{extra}---\n{body}"
