"""
Template version component input/output models.
"""

from __future__ import annotations

from dataclasses import dataclass

# Sentinels that guarantee a mismatch (and thus a plan) on a fresh declaration.
DEFAULT_HTML_HASH = "different hash - html"
DEFAULT_PLAIN_HASH = "different hash - plain"


# --- Declaration ---


@dataclass(frozen=True)
class TemplateVersionDeclaration:
    """Locally declared configuration for one template version."""

    template_id: str
    name: str
    subject: str
    html_content_file: str
    plain_content_file: str
    active: bool = True
    html_content_hash: str = DEFAULT_HTML_HASH
    plain_content_hash: str = DEFAULT_PLAIN_HASH


# --- Shadow State ---


@dataclass(frozen=True)
class ShadowDigests:
    """
    Last digests observed from the remote object.

    Both empty means the resource has no remote counterpart.
    """

    html_content_hash: str = ""
    plain_content_hash: str = ""

    @classmethod
    def cleared(cls) -> ShadowDigests:
        return cls(html_content_hash="", plain_content_hash="")

    @property
    def is_cleared(self) -> bool:
        return not self.html_content_hash and not self.plain_content_hash


# --- Input Models ---


@dataclass(frozen=True)
class ExistsInput:
    """Input for checking whether a remote version exists."""

    template_id: str
    version_id: str


@dataclass(frozen=True)
class CreateInput:
    """Input for creating a remote version from a declaration."""

    declaration: TemplateVersionDeclaration


@dataclass(frozen=True)
class ReadInput:
    """Input for refreshing shadow digests from the remote version."""

    template_id: str
    version_id: str
    html_content_file: str
    plain_content_file: str


@dataclass(frozen=True)
class UpdateInput:
    """Input for replacing an existing remote version."""

    version_id: str
    declaration: TemplateVersionDeclaration


@dataclass(frozen=True)
class DeleteInput:
    """Input for deleting a remote version."""

    template_id: str
    version_id: str


@dataclass(frozen=True)
class ImportInput:
    """Input for adopting an existing remote version into state."""

    template_id: str
    version_id: str

    @classmethod
    def from_key(cls, key: str) -> ImportInput:
        """
        Parse an import key of the form "<template_id>/<version_id>".

        Raises ValueError for anything else.
        """
        template_id, sep, version_id = key.strip().partition("/")
        if not sep or not template_id or not version_id or "/" in version_id:
            raise ValueError(
                f"Invalid import key '{key}': expected '<template_id>/<version_id>'"
            )
        return cls(template_id=template_id, version_id=version_id)


@dataclass(frozen=True)
class DiffCheckInput:
    """Input for the plan-time diff suppression decision on one content field."""

    stored_digest: str
    content_file: str


# --- Output Models ---


@dataclass(frozen=True)
class ExistsOutput:
    exists: bool


@dataclass(frozen=True)
class CreateOutput:
    """Output from create: the remote id plus digests of the echoed content."""

    version_id: str
    digests: ShadowDigests


@dataclass(frozen=True)
class DigestsOutput:
    """Output from read, update, delete and import."""

    digests: ShadowDigests


@dataclass(frozen=True)
class DiffCheckOutput:
    """Suppression decision for one content field."""

    suppress: bool
    local_digest: str


# --- Errors ---


class ReconcileError(Exception):
    """Base exception for template version reconciliation failures."""

    pass


class TemplateFileError(ReconcileError):
    """A declared content file could not be expanded or read."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"File {path} can't be read: {reason}")


class TemplateFileMissingError(TemplateFileError):
    """A declared content file no longer exists on disk."""

    def __init__(self, path: str) -> None:
        super().__init__(path, "file does not exist")


class RemoteOperationError(ReconcileError):
    """
    A remote store call failed; message is prefixed with the operation.

    `digests` is set when the remote write already succeeded and only the
    follow-up read failed; it holds the digests of the submitted bodies.
    """

    def __init__(
        self, operation: str, message: str, digests: ShadowDigests | None = None
    ) -> None:
        self.operation = operation
        self.digests = digests
        super().__init__(message)
