"""
Template Store Interface.

Protocol-based interface for the remote object store holding template
versions, keyed by (template_id, version_id).

Implementations:
1. SendGridTemplateStore: SendGrid v3 HTTP API (httpx)
2. InMemoryTemplateStore: dict-backed store for dev/test

Not-found handling:
- Adapters raise TemplateVersionNotFoundError for a missing version.
- Its message always carries NOT_FOUND_MARKER, so callers matching on the
  error text (the SendGrid client convention) keep working.
- New code should check the type via is_not_found().
"""

from __future__ import annotations

from typing import Protocol

from sendgrid_tv.core.entities import TemplateVersion

NOT_FOUND_MARKER = "404 Not Found"


class TemplateStorePort(Protocol):
    """Compound-keyed CRUD over template versions."""

    def get_template_version(self, template_id: str, version_id: str) -> TemplateVersion:
        """Fetch a version. Raises TemplateVersionNotFoundError if absent."""
        ...

    def create_template_version(self, version: TemplateVersion) -> TemplateVersion:
        """Create a version under version.template_id and return the stored record."""
        ...

    def update_template_version(self, version_id: str, version: TemplateVersion) -> None:
        """Replace all mutable fields of an existing version."""
        ...

    def delete_template_version(self, template_id: str, version_id: str) -> None:
        """Delete a version."""
        ...


# --- Error Types ---


class TemplateStoreError(Exception):
    """Base exception for remote store failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TemplateVersionNotFoundError(TemplateStoreError):
    """The requested (template_id, version_id) does not exist remotely."""

    def __init__(self, template_id: str, version_id: str, detail: str = "") -> None:
        self.template_id = template_id
        self.version_id = version_id
        message = f"{NOT_FOUND_MARKER}: template version {template_id}/{version_id}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, status_code=404)


def is_not_found(exc: BaseException) -> bool:
    """True for a typed not-found error or any error whose text carries a 404."""
    if isinstance(exc, TemplateVersionNotFoundError):
        return True
    return NOT_FOUND_MARKER in str(exc)
