# sendgrid-tv: Ports (Protocol Interfaces)
# Abstract interfaces for adapters; no implementations here

from sendgrid_tv.core.ports.template_store import (
    NOT_FOUND_MARKER,
    TemplateStoreError,
    TemplateStorePort,
    TemplateVersionNotFoundError,
    is_not_found,
)

__all__ = [
    "NOT_FOUND_MARKER",
    "TemplateStoreError",
    "TemplateStorePort",
    "TemplateVersionNotFoundError",
    "is_not_found",
]
