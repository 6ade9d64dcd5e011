"""
Template version reconciliation helpers.

Pure functions behind the component entry points: content digests, local
file loading and the plan-time diff suppression decision.

Key behaviors:
- Digest is base64(sha256(utf-8 bytes)); a pure function of content
- Paths may start with "~", expanded before access
- Files are read whole, line endings preserved
- Suppress a diff only when the stored digest is non-empty and equals the
  digest of the current local file
"""

from __future__ import annotations

import base64
import hashlib
import logging
import os

from sendgrid_tv.core.entities import TemplateVersion

from .models import (
    TemplateFileError,
    TemplateFileMissingError,
    TemplateVersionDeclaration,
)

logger = logging.getLogger(__name__)


# --- Digests ---


def compute_digest(content: str) -> str:
    """Base64-encoded SHA-256 of the UTF-8 bytes of content."""
    sha = hashlib.sha256(content.encode("utf-8")).digest()
    return base64.b64encode(sha).decode("ascii")


def should_suppress(stored_digest: str, fresh_local_content: str) -> bool:
    """
    Decide whether a content-hash diff is a no-op.

    Suppress iff the stored digest is non-empty and equals the digest of the
    current local content. An empty stored digest (fresh resource) or any
    mismatch means a write is needed.
    """
    if not stored_digest:
        return False
    return stored_digest == compute_digest(fresh_local_content)


# --- Local Files ---


def expand_path(path: str) -> str:
    """Expand a leading "~". Raises TemplateFileError if it cannot be resolved."""
    expanded = os.path.expanduser(path)
    if expanded.startswith("~"):
        logger.debug("File %s can't be expanded", path)
        raise TemplateFileError(path, "home directory can't be expanded")
    return expanded


def load_file_content(path: str) -> str:
    """
    Read a whole content file as text.

    Raises:
        TemplateFileError: path can't be expanded, or the file can't be read
            or decoded as UTF-8.
    """
    filename = expand_path(path)
    try:
        with open(filename, encoding="utf-8", newline="") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        logger.debug("File %s can't be read: %s", filename, e)
        raise TemplateFileError(path, str(e)) from e


def ensure_file_exists(path: str) -> None:
    """Raise TemplateFileMissingError if the declared file is gone."""
    filename = expand_path(path)
    if not os.path.exists(filename):
        raise TemplateFileMissingError(path)


# --- Desired State ---


def encode_active(active: bool) -> int:
    """Remote encoding of the active flag."""
    return 1 if active else 0


def build_desired_state(declaration: TemplateVersionDeclaration) -> TemplateVersion:
    """
    Assemble the remote object described by a declaration.

    Reads both content files from disk. Raises TemplateFileError if either
    can't be loaded.
    """
    html_content = load_file_content(declaration.html_content_file)
    plain_content = load_file_content(declaration.plain_content_file)

    return TemplateVersion(
        template_id=declaration.template_id,
        name=declaration.name,
        subject=declaration.subject,
        html_content=html_content,
        plain_content=plain_content,
        active=encode_active(declaration.active),
    )
