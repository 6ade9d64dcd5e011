"""
Template version component - SendGrid template versions reconciled against
local content files through content digests.
"""

from ._impl import (
    build_desired_state,
    compute_digest,
    encode_active,
    ensure_file_exists,
    expand_path,
    load_file_content,
    should_suppress,
)
from .component import (
    run,
    run_create,
    run_delete,
    run_diff_check,
    run_exists,
    run_import,
    run_read,
    run_update,
)
from .models import (
    DEFAULT_HTML_HASH,
    DEFAULT_PLAIN_HASH,
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
    ReconcileError,
    RemoteOperationError,
    ShadowDigests,
    TemplateFileError,
    TemplateFileMissingError,
    TemplateVersionDeclaration,
    UpdateInput,
)
from .ports import TemplateStorePort

__all__ = [
    # Entry points
    "run",
    "run_create",
    "run_delete",
    "run_diff_check",
    "run_exists",
    "run_import",
    "run_read",
    "run_update",
    # Helper functions
    "build_desired_state",
    "compute_digest",
    "encode_active",
    "ensure_file_exists",
    "expand_path",
    "load_file_content",
    "should_suppress",
    # Declaration and state
    "DEFAULT_HTML_HASH",
    "DEFAULT_PLAIN_HASH",
    "ShadowDigests",
    "TemplateVersionDeclaration",
    # Input models
    "CreateInput",
    "DeleteInput",
    "DiffCheckInput",
    "ExistsInput",
    "ImportInput",
    "ReadInput",
    "UpdateInput",
    # Output models
    "CreateOutput",
    "DiffCheckOutput",
    "DigestsOutput",
    "ExistsOutput",
    # Errors
    "ReconcileError",
    "RemoteOperationError",
    "TemplateFileError",
    "TemplateFileMissingError",
    # Ports
    "TemplateStorePort",
]
