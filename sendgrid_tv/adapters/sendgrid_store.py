"""
SendGrid Template Store Adapter.

Implements TemplateStorePort over SendGrid's v3 transactional template API:

- GET    /v3/templates/{template_id}/versions/{version_id}
- POST   /v3/templates/{template_id}/versions
- PATCH  /v3/templates/{template_id}/versions/{version_id}
- DELETE /v3/templates/{template_id}/versions/{version_id}

Auth: Bearer API key. Timeouts are the httpx client's; no retries.
Non-2xx responses raise TemplateStoreError with "<status> <reason>: <body>",
so a 404 carries "404 Not Found" and raises TemplateVersionNotFoundError.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from sendgrid_tv.core.entities import TemplateVersion
from sendgrid_tv.core.ports.template_store import (
    TemplateStoreError,
    TemplateVersionNotFoundError,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.sendgrid.com"
DEFAULT_TIMEOUT_SECONDS = 30.0


class SendGridTemplateStore:
    """
    SendGrid implementation of TemplateStorePort.

    Usage:
        store = SendGridTemplateStore(api_key="SG.xxx")
        version = store.get_template_version("d-123", "abc")
    """

    def __init__(
        self,
        api_key: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Args:
            api_key: SendGrid API key with template permissions
            base_url: API root (overridable for tests/proxies)
            timeout_seconds: Per-request timeout applied by httpx
            client: Pre-built client (tests pass one with a MockTransport)
        """
        if not api_key:
            raise ValueError("SendGrid API key is required")

        self._client = client or httpx.Client(
            base_url=base_url,
            timeout=timeout_seconds,
        )
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> SendGridTemplateStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # --- TemplateStorePort ---

    def get_template_version(self, template_id: str, version_id: str) -> TemplateVersion:
        response = self._request(
            "GET",
            _version_path(template_id, version_id),
            template_id=template_id,
            version_id=version_id,
        )
        return _parse_version(response, template_id)

    def create_template_version(self, version: TemplateVersion) -> TemplateVersion:
        response = self._request(
            "POST",
            _versions_path(version.template_id),
            json=version.to_payload(),
            template_id=version.template_id,
        )
        return _parse_version(response, version.template_id)

    def update_template_version(self, version_id: str, version: TemplateVersion) -> None:
        self._request(
            "PATCH",
            _version_path(version.template_id, version_id),
            json=version.to_payload(),
            template_id=version.template_id,
            version_id=version_id,
        )

    def delete_template_version(self, template_id: str, version_id: str) -> None:
        self._request(
            "DELETE",
            _version_path(template_id, version_id),
            template_id=template_id,
            version_id=version_id,
        )

    # --- Internals ---

    def _request(
        self,
        method: str,
        path: str,
        *,
        template_id: str,
        version_id: str = "",
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug("SendGrid %s %s", method, path)
        try:
            response = self._client.request(method, path, headers=self._headers, json=json)
        except httpx.HTTPError as e:
            raise TemplateStoreError(f"{method} {path} failed: {e}") from e

        if response.is_success:
            return response

        detail = f"{response.status_code} {response.reason_phrase}: {response.text}"
        logger.debug("SendGrid %s %s returned %s", method, path, response.status_code)
        if response.status_code == 404:
            raise TemplateVersionNotFoundError(template_id, version_id, detail=response.text)
        raise TemplateStoreError(detail, status_code=response.status_code)


def _versions_path(template_id: str) -> str:
    return f"/v3/templates/{template_id}/versions"


def _version_path(template_id: str, version_id: str) -> str:
    return f"{_versions_path(template_id)}/{version_id}"


def _parse_version(response: httpx.Response, template_id: str) -> TemplateVersion:
    try:
        data = response.json()
    except ValueError as e:
        raise TemplateStoreError(f"Invalid JSON from SendGrid: {e}") from e

    if not isinstance(data, dict):
        raise TemplateStoreError(f"Unexpected SendGrid response: {data!r}")

    data.setdefault("template_id", template_id)
    for key in ("html_content", "plain_content", "name", "subject"):
        if data.get(key) is None:
            data[key] = ""
    try:
        return TemplateVersion.model_validate(data)
    except ValueError as e:
        raise TemplateStoreError(f"Unexpected SendGrid response: {e}") from e
