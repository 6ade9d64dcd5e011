"""
Template version component port definitions.
"""

from __future__ import annotations

from sendgrid_tv.core.ports.template_store import TemplateStorePort

__all__ = ["TemplateStorePort"]
