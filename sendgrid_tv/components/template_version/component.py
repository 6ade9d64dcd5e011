"""
Template version component - content-addressed reconciliation of SendGrid
template versions.

Keeps a remote TemplateVersion in sync with a local declaration whose HTML
and plain-text bodies live in files. Only digests of the bodies are kept as
shadow state; plan-time suppression compares them with the local files.

Invariants:
- I1: Shadow digests come from remote-confirmed content, never local reads
- I2: Read checks declared files exist before any remote call
- I3: Delete leaves both digests empty
- I4: Remote failures are wrapped with the operation name; no retries
"""

from __future__ import annotations

import logging

from sendgrid_tv.core.ports.template_store import TemplateStoreError, is_not_found

from ._impl import (
    build_desired_state,
    compute_digest,
    ensure_file_exists,
    load_file_content,
    should_suppress,
)
from .models import (
    CreateInput,
    CreateOutput,
    DeleteInput,
    DiffCheckInput,
    DiffCheckOutput,
    DigestsOutput,
    ExistsInput,
    ExistsOutput,
    ImportInput,
    ReadInput,
    RemoteOperationError,
    ShadowDigests,
    UpdateInput,
)
from .ports import TemplateStorePort

logger = logging.getLogger(__name__)


def _digests_of(html_content: str, plain_content: str) -> ShadowDigests:
    return ShadowDigests(
        html_content_hash=compute_digest(html_content),
        plain_content_hash=compute_digest(plain_content),
    )


def _wrap(operation: str, prefix: str, exc: TemplateStoreError) -> RemoteOperationError:
    return RemoteOperationError(operation, f"{prefix}: {exc}")


# --- Component Entry Points ---


def run_exists(inp: ExistsInput, *, store: TemplateStorePort) -> ExistsOutput:
    """
    Check whether the remote version still exists.

    A not-found error from the store maps to exists=False; any other store
    error is raised as RemoteOperationError.
    """
    logger.debug("Exists template_version %s/%s", inp.template_id, inp.version_id)
    try:
        store.get_template_version(inp.template_id, inp.version_id)
    except TemplateStoreError as e:
        if is_not_found(e):
            return ExistsOutput(exists=False)
        raise _wrap("exists", "error checking template_version", e) from e

    return ExistsOutput(exists=True)


def run_create(inp: CreateInput, *, store: TemplateStorePort) -> CreateOutput:
    """
    Create the remote version described by the declaration.

    Digests are taken from the content echoed back by the store, which may
    normalise it (line endings etc.).

    Raises:
        TemplateFileError: a content file can't be read.
        RemoteOperationError: the store rejected the create.
    """
    desired = build_desired_state(inp.declaration)

    logger.debug("Create template_version under %s", desired.template_id)
    try:
        created = store.create_template_version(desired)
    except TemplateStoreError as e:
        raise _wrap("create", "error creating template_version", e) from e

    logger.info("Created template_version %s/%s", created.template_id, created.id)
    return CreateOutput(
        version_id=created.id,
        digests=_digests_of(created.html_content, created.plain_content),
    )


def run_read(inp: ReadInput, *, store: TemplateStorePort) -> DigestsOutput:
    """
    Refresh shadow digests from the remote version.

    Both declared files must still exist; a vanished file is a configuration
    error raised before any remote call. No comparison with local content is
    made here (see run_diff_check).
    """
    ensure_file_exists(inp.html_content_file)
    ensure_file_exists(inp.plain_content_file)

    logger.debug("Read template_version %s/%s", inp.template_id, inp.version_id)
    try:
        remote = store.get_template_version(inp.template_id, inp.version_id)
    except TemplateStoreError as e:
        raise _wrap("read", "error reading template_version", e) from e

    digests = _digests_of(remote.html_content, remote.plain_content)
    logger.debug(
        "TemplateVersion %s digests: html=%s plain=%s",
        inp.version_id,
        digests.html_content_hash,
        digests.plain_content_hash,
    )
    return DigestsOutput(digests=digests)


def run_update(inp: UpdateInput, *, store: TemplateStorePort) -> DigestsOutput:
    """
    Replace the remote version with the declaration's current state.

    Records digests of the submitted bodies, then reads back to resync; the
    returned digests are the ones observed by that read. If only the read
    fails, the raised RemoteOperationError carries the submitted digests.
    """
    desired = build_desired_state(inp.declaration)

    logger.debug("Update template_version %s/%s", desired.template_id, inp.version_id)
    try:
        store.update_template_version(inp.version_id, desired)
    except TemplateStoreError as e:
        raise _wrap("update", "error updating TemplateVersion", e) from e

    submitted = _digests_of(desired.html_content, desired.plain_content)
    logger.debug(
        "Submitted digests for %s: html=%s plain=%s",
        inp.version_id,
        submitted.html_content_hash,
        submitted.plain_content_hash,
    )
    logger.info("Updated template_version %s/%s", desired.template_id, inp.version_id)

    try:
        return run_read(
            ReadInput(
                template_id=inp.declaration.template_id,
                version_id=inp.version_id,
                html_content_file=inp.declaration.html_content_file,
                plain_content_file=inp.declaration.plain_content_file,
            ),
            store=store,
        )
    except RemoteOperationError as e:
        # Remote already holds the submitted bodies
        raise RemoteOperationError(e.operation, str(e), digests=submitted) from e


def run_delete(inp: DeleteInput, *, store: TemplateStorePort) -> DigestsOutput:
    """Delete the remote version and clear the shadow digests."""
    logger.debug("Delete template_version %s/%s", inp.template_id, inp.version_id)
    try:
        store.delete_template_version(inp.template_id, inp.version_id)
    except TemplateStoreError as e:
        raise _wrap("delete", "error deleting TemplateVersion", e) from e

    logger.info("Deleted template_version %s/%s", inp.template_id, inp.version_id)
    return DigestsOutput(digests=ShadowDigests.cleared())


def run_import(inp: ImportInput, *, store: TemplateStorePort) -> DigestsOutput:
    """
    Adopt an existing remote version.

    Unlike read, needs no declared files.
    """
    logger.debug("Import template_version %s/%s", inp.template_id, inp.version_id)
    try:
        remote = store.get_template_version(inp.template_id, inp.version_id)
    except TemplateStoreError as e:
        raise _wrap("import", "error reading template_version", e) from e

    return DigestsOutput(digests=_digests_of(remote.html_content, remote.plain_content))


def run_diff_check(inp: DiffCheckInput) -> DiffCheckOutput:
    """
    Plan-time suppression decision for one content field.

    Re-reads the local file. An unreadable file raises TemplateFileError,
    which must abort the plan rather than be treated as "changed".
    """
    content = load_file_content(inp.content_file)
    return DiffCheckOutput(
        suppress=should_suppress(inp.stored_digest, content),
        local_digest=compute_digest(content),
    )


def run(
    inp: (
        ExistsInput
        | CreateInput
        | ReadInput
        | UpdateInput
        | DeleteInput
        | ImportInput
        | DiffCheckInput
    ),
    *,
    store: TemplateStorePort,
) -> ExistsOutput | CreateOutput | DigestsOutput | DiffCheckOutput:
    """
    Main entry point for the template version component.

    Dispatches to the appropriate handler based on input type.
    """
    if isinstance(inp, ExistsInput):
        return run_exists(inp, store=store)
    elif isinstance(inp, CreateInput):
        return run_create(inp, store=store)
    elif isinstance(inp, ReadInput):
        return run_read(inp, store=store)
    elif isinstance(inp, UpdateInput):
        return run_update(inp, store=store)
    elif isinstance(inp, DeleteInput):
        return run_delete(inp, store=store)
    elif isinstance(inp, ImportInput):
        return run_import(inp, store=store)
    elif isinstance(inp, DiffCheckInput):
        return run_diff_check(inp)
    else:
        raise ValueError(f"Unknown input type: {type(inp)}")
