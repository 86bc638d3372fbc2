"""
providers/porkbun_client.py

Responsibility: Implements the DNSProvider protocol using the Porkbun JSON
API (v3).
Does NOT: read configuration, compare addresses, or aggregate outcomes.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import DnsProviderError, FetchError, UpdateError
from providers.dns_provider import RemoteRecord, normalize_name, relative_name

logger = logging.getLogger(__name__)

PORKBUN_BASE = "https://api.porkbun.com/api/json/v3"

_ADDRESS_TYPES = ("A", "AAAA")

# Fields the edit endpoint accepts besides name/type/content; echoed back so
# an update never resets them to Porkbun's defaults.
_EDITABLE_FIELDS = ("ttl", "prio", "notes")


class PorkbunClient:
    """
    Implements DNSProvider for Porkbun.

    Porkbun authenticates with the key pair inside every JSON body, returns
    fully-qualified names, and spells the zone apex as an empty name on edit.

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        key: str,
        secret: str,
        base_url: str = PORKBUN_BASE,
    ) -> None:
        self._client = http_client
        self._base = base_url.rstrip("/")
        self._auth = {"apikey": key, "secretapikey": secret}

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        """
        Returns the domain's A/AAAA records. The retrieve endpoint returns
        the whole zone in one response.

        Raises:
            FetchError: If the API call fails or reports a non-SUCCESS status.
        """
        url = f"{self._base}/dns/retrieve/{zone}"
        logger.debug("POST %s", url)
        data = await self._request(url, dict(self._auth), FetchError)

        try:
            return [
                self._parse_record(raw, zone)
                for raw in data.get("records") or []
                if raw.get("type") in _ADDRESS_TYPES
            ]
        except (KeyError, TypeError, AttributeError) as exc:
            raise FetchError(f"Porkbun sent a malformed record listing for POST {url}: {exc!r}") from exc

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Edits the record by id, echoing its TTL, priority and notes.

        Raises:
            UpdateError: If the API call fails or reports a non-SUCCESS status.
        """
        url = f"{self._base}/dns/edit/{record.zone_id}/{record.id}"
        payload: dict[str, Any] = {
            **self._auth,
            "name": relative_name(record.name, record.zone_id, apex=""),
            "type": record.type,
            "content": new_content,
        }
        for field_name in _EDITABLE_FIELDS:
            if record.extra.get(field_name) is not None:
                payload[field_name] = record.extra[field_name]

        logger.debug("POST %s name=%s content=%s", url, payload["name"], new_content)
        await self._request(url, payload, UpdateError)

    async def _request(
        self, url: str, payload: dict[str, Any], error: type[DnsProviderError]
    ) -> dict[str, Any]:
        try:
            response = await self._client.post(url, json=payload)
            response.raise_for_status()
            body: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise error(
                f"Porkbun API error {exc.response.status_code} for POST {url}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.RequestError as exc:
            raise error(f"Network error calling Porkbun API (POST {url}): {exc}") from exc
        except ValueError as exc:
            raise error(f"Porkbun API sent invalid JSON for POST {url}.") from exc

        if not isinstance(body, dict):
            raise error(f"Porkbun API sent an unexpected body for POST {url}.")
        if body.get("status") != "SUCCESS":
            raise error(f"Porkbun API returned {body.get('status')} for POST {url}: {body.get('message', '')}")
        return body

    @staticmethod
    def _parse_record(raw: dict[str, Any], zone: str) -> RemoteRecord:
        extra = {k: v for k, v in raw.items() if k not in ("id", "name", "type", "content")}
        return RemoteRecord(
            id=str(raw["id"]),
            name=normalize_name(raw["name"]),
            type=raw["type"],
            content=str(raw.get("content", "")),
            zone_id=zone,
            extra=extra,
        )
