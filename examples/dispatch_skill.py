from __future__ import annotations

import argparse
from pathlib import Path

import logfire

from skill_registry import (
    DispatchError,
    Dispatcher,
    OverlayStore,
    RegistrySettings,
    load_registry,
)

EXAMPLES_DIR = Path(__file__).parent


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Dispatch a skill from the example pack.")
    parser.add_argument("skill", nargs="?", default="translator", help="Skill name to dispatch.")
    parser.add_argument(
        "--skills-dir",
        type=Path,
        default=EXAMPLES_DIR / "skills",
        help="Directory scanned for SKILL.md files.",
    )
    parser.add_argument(
        "--project-dir",
        type=Path,
        default=EXAMPLES_DIR / "project",
        help="Project whose .claude/config overlays apply.",
    )
    parser.add_argument(
        "--operation",
        action="append",
        default=[],
        help="Operation to check against the allow-list, e.g. 'Bash:git status'.",
    )
    return parser.parse_args()


def main(skill: str, skills_dir: Path, project_dir: Path, operations: list[str]) -> int:
    settings = RegistrySettings()
    report = load_registry(skills_dir, settings)
    for failure in report.failures:
        print(f"! {failure.path}: {failure.error}")

    print("Ready skills:")
    for name, description in report.registry.catalog():
        print(f"  {name}: {description}")

    overlays = OverlayStore(project_dir / settings.config_dir)
    dispatcher = Dispatcher(report.registry, overlays=overlays, settings=settings)
    try:
        handle = dispatcher.dispatch(skill)
    except DispatchError as exc:
        print(f"Dispatch failed ({exc.kind}): {exc}")
        return 1

    print(f"\n{skill} [{handle.state}]")
    print(f"  allowed: {', '.join(handle.allowed_tools.as_strings()) or '(none)'}")
    print(f"  config: {handle.config.as_dict()}")
    if handle.config.unknown_keys:
        print(f"  unknown overlay keys: {', '.join(handle.config.unknown_keys)}")
    for step in handle.steps:
        print(f"  {step.index + 1}. {step.title}")

    for spec in operations:
        operation, _, argument = spec.partition(":")
        try:
            entry = handle.authorize(operation, argument or None)
            print(f"  allowed {spec!r} via {entry}")
        except DispatchError as exc:
            print(f"  refused {spec!r}: {exc}")

    handle.complete()
    return 0


if __name__ == "__main__":
    logfire.configure(send_to_logfire="if-token-present")
    args = parse_args()
    raise SystemExit(main(args.skill, args.skills_dir, args.project_dir, args.operation))
