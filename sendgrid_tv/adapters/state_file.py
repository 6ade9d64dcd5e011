"""
JSON State File Adapter.

Persists per-resource shadow state between runs:

    {"version": 1, "resources": {"<name>": {...ResourceState...}}}

A missing file is empty state. Writes go to a temp file in the same
directory, then os.replace, so a crash never leaves a torn file.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from dataclasses import asdict, dataclass, replace
from pathlib import Path

from sendgrid_tv.components.template_version import (
    ShadowDigests,
    TemplateVersionDeclaration,
)

logger = logging.getLogger(__name__)

STATE_FORMAT_VERSION = 1


class StateFileError(Exception):
    """State file is unreadable or has an unknown format."""

    pass


@dataclass(frozen=True)
class ResourceState:
    """Last applied attributes plus shadow digests for one resource."""

    id: str
    template_id: str
    name: str = ""
    subject: str = ""
    html_content_file: str = ""
    plain_content_file: str = ""
    active: bool = True
    html_content_hash: str = ""
    plain_content_hash: str = ""

    @property
    def digests(self) -> ShadowDigests:
        return ShadowDigests(
            html_content_hash=self.html_content_hash,
            plain_content_hash=self.plain_content_hash,
        )

    @classmethod
    def from_declaration(
        cls,
        version_id: str,
        declaration: TemplateVersionDeclaration,
        digests: ShadowDigests,
    ) -> ResourceState:
        return cls(
            id=version_id,
            template_id=declaration.template_id,
            name=declaration.name,
            subject=declaration.subject,
            html_content_file=declaration.html_content_file,
            plain_content_file=declaration.plain_content_file,
            active=declaration.active,
            html_content_hash=digests.html_content_hash,
            plain_content_hash=digests.plain_content_hash,
        )

    def with_digests(self, digests: ShadowDigests) -> ResourceState:
        return replace(
            self,
            html_content_hash=digests.html_content_hash,
            plain_content_hash=digests.plain_content_hash,
        )


class JsonStateStore:
    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, ResourceState]:
        """Read all resource states. Raises StateFileError on a bad file."""
        if not self.path.exists():
            return {}

        try:
            with open(self.path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StateFileError(f"Can't read state file {self.path}: {e}") from e

        if not isinstance(data, dict) or data.get("version") != STATE_FORMAT_VERSION:
            raise StateFileError(f"Unsupported state file format in {self.path}")

        resources = data.get("resources", {})
        if not isinstance(resources, dict):
            raise StateFileError(f"Resources in {self.path} must be an object")

        try:
            return {name: ResourceState(**entry) for name, entry in resources.items()}
        except TypeError as e:
            raise StateFileError(f"Malformed resource entry in {self.path}: {e}") from e

    def save(self, states: dict[str, ResourceState]) -> None:
        payload = {
            "version": STATE_FORMAT_VERSION,
            "resources": {name: asdict(states[name]) for name in sorted(states)},
        }
        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".state-", suffix=".json")
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(payload, f, indent=2)
                f.write("\n")
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise
        logger.debug("Saved state for %d resources to %s", len(states), self.path)
