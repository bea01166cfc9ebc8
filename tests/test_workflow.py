from __future__ import annotations

from skill_registry.skills import WorkflowStep, extract_skill_references, extract_workflow_steps


def test_numbered_step_headings() -> None:
    body = """# Issue writer

Intro text that is not a step.

## Step 1: Gather context

Run `git log`.

```bash
# not a heading
gh issue list
```

## Step 2: Draft

Ask the user to confirm.

## Notes

Not part of step 2.
"""
    steps = extract_workflow_steps(body)

    assert [step.title for step in steps] == ["Gather context", "Draft"]
    assert steps[0].text.startswith("Run `git log`.")
    assert "# not a heading" in steps[0].text
    assert steps[1] == WorkflowStep(index=1, title="Draft", text="Ask the user to confirm.")


def test_bare_numbered_headings_need_a_separator() -> None:
    body = "### 1. Read the diff\nA\n### 2024 roadmap\nB\n"
    steps = extract_workflow_steps(body)
    assert [step.title for step in steps] == ["Read the diff"]
    assert steps[0].text == "A"


def test_ordered_list_fallback() -> None:
    body = """Follow these steps:

1. Read the config
   at `.claude/config/translator.yaml`.
2. Translate each file.

Done.
"""
    steps = extract_workflow_steps(body)
    assert [step.title for step in steps] == ["Read the config", "Translate each file."]
    assert "at `.claude/config/translator.yaml`." in steps[0].text


def test_unstructured_body_becomes_one_step() -> None:
    steps = extract_workflow_steps("\nJust do the thing.\n")
    assert steps == (WorkflowStep(index=0, title="Instructions", text="Just do the thing."),)
    assert extract_workflow_steps("  \n") == ()


def test_skill_references_in_order_without_self() -> None:
    body = "Use Skill(conventional-commits), then Skill(pr-writer). Skill(conventional-commits) again. Skill(me)"
    assert extract_skill_references(body, exclude="me") == ("conventional-commits", "pr-writer")
