"""
Domain entities for sendgrid-tv.

TemplateVersion mirrors the remote record held by SendGrid's transactional
template API. The remote store owns the authoritative copy; this package only
keeps a digest-based shadow of it in local state.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class TemplateVersion(BaseModel):
    """
    A versioned snapshot of an email template.

    Identified by the compound key (template_id, id). `id` is assigned by the
    remote store on create and is empty on a not-yet-submitted version.

    `active` uses the remote integer encoding: 1 = active, 0 = inactive.
    """

    model_config = ConfigDict(extra="ignore")

    id: str = ""
    template_id: str
    name: str
    subject: str
    html_content: str = ""
    plain_content: str = ""
    active: int = 1

    def to_payload(self) -> dict[str, object]:
        """Body sent on create/update (the remote assigns `id`)."""
        return {
            "template_id": self.template_id,
            "name": self.name,
            "subject": self.subject,
            "html_content": self.html_content,
            "plain_content": self.plain_content,
            "active": self.active,
        }
