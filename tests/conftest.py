from __future__ import annotations

from pathlib import Path
from typing import Callable

import logfire
import pytest

logfire.configure(send_to_logfire=False, console=False)


@pytest.fixture
def write_skill(tmp_path: Path) -> Callable[..., Path]:
    """Write a SKILL.md under ``tmp_path/skills/<rel_dir>`` and return its path."""

    def _write(rel_dir: str, text: str) -> Path:
        path = tmp_path / "skills" / rel_dir / "SKILL.md"
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return path

    return _write
