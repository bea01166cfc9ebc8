"""Invocation dispatcher: turns a skill name into an allow-list-enforced workflow."""

from __future__ import annotations

import uuid
from enum import StrEnum, auto
from typing import Any, Callable, NoReturn, TypeVar

import logfire
from pydantic import BaseModel, ConfigDict

from .config import ConfigOverlay, EffectiveConfig, OverlayStore, resolve_config
from .exceptions import ConfigError, DispatchError, DispatchErrorKind
from .registry import SkillRegistry
from .settings import RegistrySettings
from .skills.manifest import SkillManifest
from .skills.tools import AllowedTool, ToolAllowList
from .skills.workflow import WorkflowStep, extract_skill_references, extract_workflow_steps

T = TypeVar("T")


class InvocationState(StrEnum):
    CREATED = auto()
    CONFIG_RESOLVED = auto()
    ACTIVE = auto()
    COMPLETED = auto()
    ABORTED = auto()


_TRANSITIONS: dict[InvocationState, frozenset[InvocationState]] = {
    InvocationState.CREATED: frozenset({InvocationState.CONFIG_RESOLVED, InvocationState.ABORTED}),
    InvocationState.CONFIG_RESOLVED: frozenset({InvocationState.ACTIVE, InvocationState.ABORTED}),
    InvocationState.ACTIVE: frozenset({InvocationState.COMPLETED, InvocationState.ABORTED}),
    InvocationState.COMPLETED: frozenset(),
    InvocationState.ABORTED: frozenset(),
}


class DispatchContext(BaseModel):
    """Caller-supplied context for one invocation."""

    overlay: ConfigOverlay | None = None
    require_ready: bool = False

    model_config = ConfigDict(frozen=True)


class WorkflowHandle:
    """Per-invocation view of a dispatched skill.

    A handle is owned by the invocation that created it and is not meant to be
    shared across threads. Operations may only be authorized while ``ACTIVE``.
    """

    def __init__(self, skill_name: str, registry: SkillRegistry) -> None:
        self.invocation_id = uuid.uuid4().hex
        self.skill_name = skill_name
        self.manifest: SkillManifest | None = None
        self.config: EffectiveConfig | None = None
        self.steps: tuple[WorkflowStep, ...] = ()
        self.allowed_tools = ToolAllowList()
        self.referenced_skills: tuple[str, ...] = ()
        self.abort_reason: str | None = None
        self._registry = registry
        self._state = InvocationState.CREATED
        self.history: list[InvocationState] = [InvocationState.CREATED]

    @property
    def state(self) -> InvocationState:
        return self._state

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self._state]

    def _transition(self, target: InvocationState) -> None:
        if target not in _TRANSITIONS[self._state]:
            raise DispatchError(
                DispatchErrorKind.INVALID_STATE,
                f"invocation of '{self.skill_name}' cannot move from {self._state} to {target}",
                skill_name=self.skill_name,
                handle=self,
            )
        self._state = target
        self.history.append(target)

    def authorize(self, operation: str, argument: str | None = None) -> AllowedTool:
        """Return the allow-list entry permitting ``operation`` or raise.

        A refused operation leaves the invocation ``ACTIVE``.
        """
        if self._state is not InvocationState.ACTIVE:
            raise DispatchError(
                DispatchErrorKind.INVALID_STATE,
                f"operations are only allowed while ACTIVE; invocation is {self._state}",
                skill_name=self.skill_name,
                operation=operation,
                handle=self,
            )
        entry = self.allowed_tools.match(operation, argument)
        if entry is None:
            logfire.warn(
                "Operation refused by allow-list",
                skill=self.skill_name,
                operation=operation,
                argument=argument,
                invocation_id=self.invocation_id,
            )
            raise DispatchError(
                DispatchErrorKind.OPERATION_NOT_ALLOWED,
                f"skill '{self.skill_name}' is not allowed to use {operation}"
                + (f" with {argument!r}" if argument is not None else ""),
                skill_name=self.skill_name,
                operation=operation,
                handle=self,
            )
        return entry

    def run(
        self,
        operation: str,
        action: Callable[..., T],
        *args: Any,
        argument: str | None = None,
        **kwargs: Any,
    ) -> T:
        """Authorize ``operation`` and only then call ``action``."""
        self.authorize(operation, argument)
        return action(*args, **kwargs)

    def resolve_reference(self, name: str) -> SkillManifest:
        """Look up another skill this workflow hands off to."""
        manifest = self._registry.lookup(name)
        if manifest is None:
            raise DispatchError(
                DispatchErrorKind.UNKNOWN_SKILL,
                f"skill '{self.skill_name}' references unknown skill '{name}'",
                skill_name=name,
                handle=self,
            )
        return manifest

    def complete(self) -> None:
        self._transition(InvocationState.COMPLETED)
        logfire.info("Invocation completed", skill=self.skill_name, invocation_id=self.invocation_id)

    def abort(self, reason: str) -> None:
        self._transition(InvocationState.ABORTED)
        self.abort_reason = reason
        logfire.info(
            "Invocation aborted",
            skill=self.skill_name,
            invocation_id=self.invocation_id,
            reason=reason,
        )

    def __repr__(self) -> str:
        return f"WorkflowHandle(skill={self.skill_name!r}, state={self._state.value!r})"


class Dispatcher:
    """Policy enforcement point between a calling agent and the registry."""

    def __init__(
        self,
        registry: SkillRegistry,
        *,
        overlays: OverlayStore | None = None,
        settings: RegistrySettings | None = None,
    ) -> None:
        self.registry = registry
        self.overlays = overlays
        self.settings = settings or RegistrySettings()

    def dispatch(self, skill_name: str, context: DispatchContext | None = None) -> WorkflowHandle:
        context = context or DispatchContext()
        handle = WorkflowHandle(skill_name, self.registry)

        with logfire.span("dispatch skill", skill=skill_name, invocation_id=handle.invocation_id):
            manifest = self.registry.lookup(skill_name)
            if manifest is None:
                self._fail(handle, DispatchErrorKind.UNKNOWN_SKILL, f"unknown skill '{skill_name}'")
            if context.require_ready and not self.registry.is_ready(manifest):
                self._fail(
                    handle,
                    DispatchErrorKind.SKILL_NOT_READY,
                    f"skill '{skill_name}' has status '{manifest.status}' and is not ready for use",
                )
            handle.manifest = manifest

            overlay = context.overlay
            try:
                if overlay is None and self.overlays is not None:
                    overlay = self.overlays.get(skill_name)
                config = resolve_config(
                    manifest,
                    overlay,
                    unknown_keys=self.settings.unknown_overlay_keys,
                )
            except ConfigError as exc:
                self._fail(handle, DispatchErrorKind.CONFIG_FAILED, str(exc), cause=exc)
            handle.config = config
            handle._transition(InvocationState.CONFIG_RESOLVED)

            handle.steps = extract_workflow_steps(manifest.body)
            handle.allowed_tools = manifest.allowed_tools
            handle.referenced_skills = extract_skill_references(manifest.body, exclude=manifest.name)
            handle._transition(InvocationState.ACTIVE)

            logfire.debug(
                "Skill dispatched",
                skill=skill_name,
                steps=len(handle.steps),
                allowed_tools=handle.allowed_tools.as_strings(),
                unknown_keys=list(config.unknown_keys),
            )
        return handle

    def _fail(
        self,
        handle: WorkflowHandle,
        kind: DispatchErrorKind,
        message: str,
        *,
        cause: Exception | None = None,
    ) -> NoReturn:
        handle.abort(message)
        raise DispatchError(kind, message, skill_name=handle.skill_name, handle=handle) from cause


__all__ = [
    "DispatchContext",
    "Dispatcher",
    "InvocationState",
    "WorkflowHandle",
]
