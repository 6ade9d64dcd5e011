"""
In-Memory Template Store Adapter.

Dict-backed TemplateStorePort for local development and tests.

Key behaviors:
- Assigns uuid version ids on create
- Optional content normaliser applied on write, modelling a remote store
  that rewrites bodies (e.g. CRLF -> LF)
- Records every call for test assertions
- Missing versions raise TemplateVersionNotFoundError
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from uuid import uuid4

from sendgrid_tv.core.entities import TemplateVersion
from sendgrid_tv.core.ports.template_store import TemplateVersionNotFoundError

logger = logging.getLogger(__name__)


def normalize_line_endings(content: str) -> str:
    """CRLF/CR -> LF."""
    return content.replace("\r\n", "\n").replace("\r", "\n")


@dataclass
class InMemoryTemplateStore:
    """Implements TemplateStorePort without a network."""

    normalizer: Callable[[str], str] | None = None
    versions: dict[tuple[str, str], TemplateVersion] = field(default_factory=dict)
    calls: list[tuple[str, str, str]] = field(default_factory=list)

    def get_template_version(self, template_id: str, version_id: str) -> TemplateVersion:
        self.calls.append(("get", template_id, version_id))
        key = (template_id, version_id)
        if key not in self.versions:
            raise TemplateVersionNotFoundError(template_id, version_id)
        return self.versions[key]

    def create_template_version(self, version: TemplateVersion) -> TemplateVersion:
        version_id = uuid4().hex
        self.calls.append(("create", version.template_id, version_id))
        stored = self._normalized(version).model_copy(update={"id": version_id})
        self.versions[(version.template_id, version_id)] = stored
        logger.debug("Stored template version %s/%s", version.template_id, version_id)
        return stored

    def update_template_version(self, version_id: str, version: TemplateVersion) -> None:
        self.calls.append(("update", version.template_id, version_id))
        key = (version.template_id, version_id)
        if key not in self.versions:
            raise TemplateVersionNotFoundError(version.template_id, version_id)
        self.versions[key] = self._normalized(version).model_copy(update={"id": version_id})

    def delete_template_version(self, template_id: str, version_id: str) -> None:
        self.calls.append(("delete", template_id, version_id))
        if self.versions.pop((template_id, version_id), None) is None:
            raise TemplateVersionNotFoundError(template_id, version_id)

    def _normalized(self, version: TemplateVersion) -> TemplateVersion:
        if self.normalizer is None:
            return version
        return version.model_copy(
            update={
                "html_content": self.normalizer(version.html_content),
                "plain_content": self.normalizer(version.plain_content),
            }
        )
