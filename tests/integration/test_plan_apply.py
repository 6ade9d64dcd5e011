"""
Plan/apply flow against the in-memory store and real files on disk.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

import pytest

from sendgrid_tv.adapters.memory_store import InMemoryTemplateStore, normalize_line_endings
from sendgrid_tv.adapters.state_file import ResourceState
from sendgrid_tv.app_shell.engine import (
    PlanAction,
    apply,
    import_resource,
    plan,
    plan_destroy,
)
from sendgrid_tv.components.template_version import (
    RemoteOperationError,
    TemplateFileError,
    TemplateVersionDeclaration,
    compute_digest,
)
from sendgrid_tv.core.entities import TemplateVersion
from sendgrid_tv.core.ports.template_store import TemplateStoreError


class ReadFailsAfterUpdateStore(InMemoryTemplateStore):
    """Reads fail once an update has gone through."""

    updated: bool = False

    def update_template_version(self, version_id: str, version: TemplateVersion) -> None:
        super().update_template_version(version_id, version)
        self.updated = True

    def get_template_version(self, template_id: str, version_id: str) -> TemplateVersion:
        if self.updated:
            raise TemplateStoreError("503 Service Unavailable: try later", status_code=503)
        return super().get_template_version(template_id, version_id)


def _actions(changes: list) -> dict[str, PlanAction]:
    return {c.name: c.action for c in changes}


@pytest.fixture
def applied(
    store: InMemoryTemplateStore, declaration: TemplateVersionDeclaration
) -> dict[str, ResourceState]:
    decls = {"welcome": declaration}
    return apply(plan(decls, {}, store=store), {}, store=store)


class TestPlanApply:
    def test_fresh_declaration_creates(
        self, store: InMemoryTemplateStore, declaration: TemplateVersionDeclaration
    ) -> None:
        changes = plan({"welcome": declaration}, {}, store=store)
        assert _actions(changes) == {"welcome": PlanAction.CREATE}

        states = apply(changes, {}, store=store)

        state = states["welcome"]
        assert state.id
        assert state.html_content_hash == compute_digest("Hello")
        assert state.plain_content_hash == compute_digest("Hello")
        assert state.name == "Welcome"

    def test_unchanged_files_plan_noop(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        changes = plan({"welcome": declaration}, applied, store=store)
        assert _actions(changes) == {"welcome": PlanAction.NOOP}

    def test_edited_html_replaces_only_for_html(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
        html_file: Path,
    ) -> None:
        html_file.write_text("Hello!")

        (change,) = plan({"welcome": declaration}, applied, store=store)

        assert change.action is PlanAction.REPLACE
        assert change.reasons == ("html_content_hash",)

        states = apply([change], applied, store=store)
        assert states["welcome"].id != applied["welcome"].id
        assert states["welcome"].html_content_hash == compute_digest("Hello!")
        assert len(store.versions) == 1

    def test_attribute_change_updates_in_place(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        renamed = replace(declaration, subject="New subject", active=False)

        (change,) = plan({"welcome": renamed}, applied, store=store)
        assert change.action is PlanAction.UPDATE
        assert change.reasons == ("subject", "active")

        states = apply([change], applied, store=store)
        assert states["welcome"].id == applied["welcome"].id
        remote = store.versions[("d-template-1", applied["welcome"].id)]
        assert remote.subject == "New subject"
        assert remote.active == 0

    def test_template_id_change_replaces(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        moved = replace(declaration, template_id="d-template-2")
        (change,) = plan({"welcome": moved}, applied, store=store)
        assert change.action is PlanAction.REPLACE
        assert "template_id" in change.reasons

    def test_remote_drift_forces_replace(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        key = ("d-template-1", applied["welcome"].id)
        store.versions[key] = store.versions[key].model_copy(update={"plain_content": "x"})

        (change,) = plan({"welcome": declaration}, applied, store=store)

        assert change.action is PlanAction.REPLACE
        assert change.reasons == ("plain_content_hash",)

    def test_vanished_remote_recreates(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        store.versions.clear()
        (change,) = plan({"welcome": declaration}, applied, store=store)
        assert change.action is PlanAction.CREATE

    def test_undeclared_resource_deleted(
        self,
        store: InMemoryTemplateStore,
        applied: dict[str, ResourceState],
    ) -> None:
        changes = plan({}, applied, store=store)
        assert _actions(changes) == {"welcome": PlanAction.DELETE}

        states = apply(changes, applied, store=store)
        assert states == {}
        assert store.versions == {}

    def test_missing_file_aborts_plan(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
        plain_file: Path,
    ) -> None:
        plain_file.unlink()
        with pytest.raises(TemplateFileError):
            plan({"welcome": declaration}, applied, store=store)

    def test_digests_track_normalised_remote_content(
        self, declaration: TemplateVersionDeclaration, html_file: Path
    ) -> None:
        html_file.write_bytes(b"<p>a</p>\r\n")
        store = InMemoryTemplateStore(normalizer=normalize_line_endings)
        decls = {"welcome": declaration}

        states = apply(plan(decls, {}, store=store), {}, store=store)

        # Echoed content is normalised; the CRLF file differs until rewritten
        assert _actions(plan(decls, states, store=store)) == {"welcome": PlanAction.REPLACE}
        assert states["welcome"].html_content_hash == compute_digest("<p>a</p>\n")
        html_file.write_bytes(b"<p>a</p>\n")
        assert _actions(plan(decls, states, store=store)) == {"welcome": PlanAction.NOOP}

    def test_persist_called_per_change(
        self, store: InMemoryTemplateStore, declaration: TemplateVersionDeclaration
    ) -> None:
        snapshots: list[dict[str, ResourceState]] = []
        decls = {"a": declaration, "b": replace(declaration, name="Other")}

        apply(plan(decls, {}, store=store), {}, store=store, persist=snapshots.append)

        assert [sorted(s) for s in snapshots] == [["a"], ["a", "b"]]


class TestPartialFailure:
    def test_failed_resync_after_update_keeps_submitted_state(
        self, declaration: TemplateVersionDeclaration, html_file: Path
    ) -> None:
        store = ReadFailsAfterUpdateStore()
        decls = {"welcome": declaration}
        states = apply(plan(decls, {}, store=store), {}, store=store)
        renamed = replace(declaration, name="Renamed")
        (change,) = plan({"welcome": renamed}, states, store=store)
        assert change.action is PlanAction.UPDATE
        html_file.write_text("Hello!")

        snapshots: list[dict[str, ResourceState]] = []
        with pytest.raises(RemoteOperationError):
            apply([change], states, store=store, persist=snapshots.append)

        remote = store.versions[("d-template-1", states["welcome"].id)]
        assert remote.html_content == "Hello!"
        (saved,) = snapshots
        assert saved["welcome"].id == states["welcome"].id
        assert saved["welcome"].name == "Renamed"
        assert saved["welcome"].html_content_hash == compute_digest("Hello!")
        assert saved["welcome"].plain_content_hash == compute_digest("Hello")


class TestStateHygiene:
    def test_undeclared_entry_without_id_is_dropped(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        states = {**applied, "orphan": ResourceState(id="", template_id="d-template-1")}

        changes = plan({"welcome": declaration}, states, store=store)
        assert _actions(changes) == {"welcome": PlanAction.NOOP}

        result = apply(changes, states, store=store)
        assert set(result) == {"welcome"}


class TestDestroy:
    def test_destroy_deletes_everything(
        self, store: InMemoryTemplateStore, applied: dict[str, ResourceState]
    ) -> None:
        changes = plan_destroy(applied)
        assert _actions(changes) == {"welcome": PlanAction.DELETE}
        assert apply(changes, applied, store=store) == {}
        assert store.versions == {}


class TestImport:
    def test_import_then_plan(
        self, store: InMemoryTemplateStore, declaration: TemplateVersionDeclaration
    ) -> None:
        remote = store.create_template_version(
            TemplateVersion(
                template_id="d-template-1",
                name="Welcome",
                subject="Hello there",
                html_content="Hello",
                plain_content="Hello",
            )
        )

        states = import_resource(
            "welcome", f"d-template-1/{remote.id}", {"welcome": declaration}, {}, store=store
        )

        assert states["welcome"].html_content_hash == compute_digest("Hello")
        (change,) = plan({"welcome": declaration}, states, store=store)
        # Content matches; only unrecorded attributes are reconciled in place
        assert change.action is PlanAction.UPDATE
        assert "name" in change.reasons

    def test_import_undeclared(self, store: InMemoryTemplateStore) -> None:
        with pytest.raises(ValueError):
            import_resource("nope", "t/v", {}, {}, store=store)

    def test_import_already_managed(
        self,
        store: InMemoryTemplateStore,
        declaration: TemplateVersionDeclaration,
        applied: dict[str, ResourceState],
    ) -> None:
        with pytest.raises(ValueError):
            import_resource(
                "welcome", "d-template-1/x", {"welcome": declaration}, applied, store=store
            )
