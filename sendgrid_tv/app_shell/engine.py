"""
Plan/apply orchestration for declared template versions.

Drives the template version component for every declared resource:

- plan: refresh each known resource, run the content-hash suppression check
  on both bodies, and decide an action per resource
- apply: execute the planned actions, persisting state after every resource

Content hash drift forces a new version (replace); attribute drift is an
in-place update. A local file that can't be read aborts the whole plan.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from sendgrid_tv.adapters.state_file import ResourceState
from sendgrid_tv.components.template_version import (
    CreateInput,
    DeleteInput,
    DiffCheckInput,
    ExistsInput,
    ImportInput,
    ReadInput,
    RemoteOperationError,
    TemplateStorePort,
    TemplateVersionDeclaration,
    UpdateInput,
    run_create,
    run_delete,
    run_diff_check,
    run_exists,
    run_import,
    run_read,
    run_update,
)

logger = logging.getLogger(__name__)

UPDATABLE_ATTRIBUTES = (
    "name",
    "subject",
    "active",
    "html_content_file",
    "plain_content_file",
)


class PlanAction(Enum):
    CREATE = "create"
    UPDATE = "update"
    REPLACE = "replace"
    DELETE = "delete"
    NOOP = "noop"


@dataclass(frozen=True)
class PlannedChange:
    """Action decided for one resource, with the state it was planned against."""

    name: str
    action: PlanAction
    declaration: TemplateVersionDeclaration | None = None
    state: ResourceState | None = None
    reasons: tuple[str, ...] = field(default_factory=tuple)

    def describe(self) -> str:
        line = f"{self.action.value:>7}  {self.name}"
        if self.reasons:
            line += f"  ({', '.join(self.reasons)})"
        return line


def _plan_existing(
    name: str,
    declaration: TemplateVersionDeclaration,
    state: ResourceState,
    store: TemplateStorePort,
) -> PlannedChange:
    if not run_exists(ExistsInput(state.template_id, state.id), store=store).exists:
        return PlannedChange(
            name, PlanAction.CREATE, declaration, None, ("remote version no longer exists",)
        )

    refreshed = state.with_digests(
        run_read(
            ReadInput(
                template_id=state.template_id,
                version_id=state.id,
                html_content_file=declaration.html_content_file,
                plain_content_file=declaration.plain_content_file,
            ),
            store=store,
        ).digests
    )

    force_new: list[str] = []
    if declaration.template_id != refreshed.template_id:
        force_new.append("template_id")

    html = run_diff_check(
        DiffCheckInput(refreshed.html_content_hash, declaration.html_content_file)
    )
    if not html.suppress:
        force_new.append("html_content_hash")

    plain = run_diff_check(
        DiffCheckInput(refreshed.plain_content_hash, declaration.plain_content_file)
    )
    if not plain.suppress:
        force_new.append("plain_content_hash")

    if force_new:
        return PlannedChange(name, PlanAction.REPLACE, declaration, refreshed, tuple(force_new))

    changed = tuple(
        attr
        for attr in UPDATABLE_ATTRIBUTES
        if getattr(declaration, attr) != getattr(refreshed, attr)
    )
    if changed:
        return PlannedChange(name, PlanAction.UPDATE, declaration, refreshed, changed)

    return PlannedChange(name, PlanAction.NOOP, declaration, refreshed)


def plan(
    declarations: dict[str, TemplateVersionDeclaration],
    states: dict[str, ResourceState],
    *,
    store: TemplateStorePort,
) -> list[PlannedChange]:
    """
    Decide an action per resource, in name order.

    Raises:
        TemplateFileError: a declared file is missing or unreadable.
        RemoteOperationError: the store failed during refresh.
    """
    changes: list[PlannedChange] = []

    for name in sorted(set(declarations) | set(states)):
        declaration = declarations.get(name)
        state = states.get(name)

        if declaration is None:
            if state is not None and state.id:
                changes.append(PlannedChange(name, PlanAction.DELETE, None, state))
            continue

        if state is None or not state.id:
            changes.append(
                PlannedChange(name, PlanAction.CREATE, declaration, None, ("not in state",))
            )
            continue

        changes.append(_plan_existing(name, declaration, state, store))

    logger.debug("Planned %d changes", len(changes))
    return changes


def plan_destroy(states: dict[str, ResourceState]) -> list[PlannedChange]:
    return [
        PlannedChange(name, PlanAction.DELETE, None, states[name])
        for name in sorted(states)
        if states[name].id
    ]


def apply(
    changes: list[PlannedChange],
    states: dict[str, ResourceState],
    *,
    store: TemplateStorePort,
    persist: Callable[[dict[str, ResourceState]], None] | None = None,
) -> dict[str, ResourceState]:
    """
    Execute planned changes and return the resulting states.

    State is persisted after each resource, so a failure part way keeps what
    already succeeded. Nothing is rolled back. Entries without an id are
    dropped.
    """
    # Entries without a remote id track nothing
    result = {name: state for name, state in states.items() if state.id}

    for change in changes:
        declaration = change.declaration
        state = change.state

        if change.action is PlanAction.NOOP:
            if state is not None:
                result[change.name] = state
        elif change.action is PlanAction.DELETE:
            assert state is not None
            run_delete(DeleteInput(state.template_id, state.id), store=store)
            result.pop(change.name, None)
        elif change.action is PlanAction.UPDATE:
            assert declaration is not None and state is not None
            try:
                out = run_update(UpdateInput(state.id, declaration), store=store)
            except RemoteOperationError as e:
                if e.digests is not None:
                    result[change.name] = ResourceState.from_declaration(
                        state.id, declaration, e.digests
                    )
                    if persist is not None:
                        persist(dict(result))
                raise
            result[change.name] = ResourceState.from_declaration(
                state.id, declaration, out.digests
            )
        elif change.action in (PlanAction.CREATE, PlanAction.REPLACE):
            assert declaration is not None
            if change.action is PlanAction.REPLACE:
                assert state is not None
                run_delete(DeleteInput(state.template_id, state.id), store=store)
                result.pop(change.name, None)
            created = run_create(CreateInput(declaration), store=store)
            result[change.name] = ResourceState.from_declaration(
                created.version_id, declaration, created.digests
            )

        if change.action is not PlanAction.NOOP:
            logger.info("Applied %s %s", change.action.value, change.name)
        if persist is not None:
            persist(dict(result))

    return result


def import_resource(
    name: str,
    key: str,
    declarations: dict[str, TemplateVersionDeclaration],
    states: dict[str, ResourceState],
    *,
    store: TemplateStorePort,
) -> dict[str, ResourceState]:
    """
    Adopt a remote version into state under a declared resource name.

    Only the id, template id and digests are recorded; the next plan
    reconciles the remaining attributes.
    """
    if name not in declarations:
        raise ValueError(f"Resource '{name}' is not declared")
    if name in states and states[name].id:
        raise ValueError(f"Resource '{name}' is already managed (id {states[name].id})")

    inp = ImportInput.from_key(key)
    out = run_import(inp, store=store)

    result = dict(states)
    result[name] = ResourceState(id=inp.version_id, template_id=inp.template_id).with_digests(
        out.digests
    )
    logger.info("Imported %s as %s", key, name)
    return result
