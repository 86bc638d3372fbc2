"""
providers/godaddy_client.py

Responsibility: Implements the DNSProvider protocol using the GoDaddy
Domains API (v1).
Does NOT: read configuration, compare addresses, or aggregate outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import httpx

from exceptions import DnsProviderError, FetchError, UpdateError
from models import AddressFamily
from providers.dns_provider import RemoteRecord, qualify_name

logger = logging.getLogger(__name__)

GODADDY_BASE = "https://api.godaddy.com"

_PAGE_SIZE = 500


class GoDaddyClient:
    """
    Implements DNSProvider for GoDaddy.

    GoDaddy names records relative to the domain ("@" for the apex) and its
    PUT endpoint replaces the record wholesale, so the update payload echoes
    every fetched field (TTL included) with only ``data`` swapped.

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        key: str,
        secret: str,
        families: Iterable[AddressFamily] = (AddressFamily.IPV4,),
        base_url: str = GODADDY_BASE,
    ) -> None:
        self._client = http_client
        self._base = base_url.rstrip("/")
        self._families = list(families)
        self._headers = {
            "Authorization": f"sso-key {key}:{secret}",
            "Accept": "application/json",
        }

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        """
        Returns the domain's A (and AAAA, if managed) records.

        Pages through the listing with offset/limit until a short page.

        Raises:
            FetchError: If the API call fails.
        """
        records: list[RemoteRecord] = []
        for family in self._families:
            url = f"{self._base}/v1/domains/{zone}/records/{family.record_type}"
            offset = 0
            while True:
                params = {"offset": offset, "limit": _PAGE_SIZE}
                logger.debug("GET %s params=%s", url, params)
                page = await self._request("GET", url, FetchError, params=params)
                if not isinstance(page, list):
                    raise FetchError(f"GoDaddy returned an unexpected body for GET {url}.")

                try:
                    records.extend(self._parse_record(raw, zone, family) for raw in page)
                except (TypeError, AttributeError) as exc:
                    raise FetchError(
                        f"GoDaddy sent a malformed record listing for GET {url}: {exc!r}"
                    ) from exc
                if len(page) < _PAGE_SIZE:
                    break
                offset += _PAGE_SIZE
        return records

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Replaces the record with a copy of its fetched fields pointing at
        ``new_content``.

        Raises:
            UpdateError: If the API call fails.
        """
        name = record.extra.get("name", "@")
        url = f"{self._base}/v1/domains/{record.zone_id}/records/{record.type}/{name}"
        payload = [{**record.extra, "data": new_content}]

        logger.debug("PUT %s payload=%s", url, payload)
        await self._request("PUT", url, UpdateError, json=payload)

    async def _request(
        self,
        method: str,
        url: str,
        error: type[DnsProviderError],
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
    ) -> Any:
        try:
            response = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise error(
                f"GoDaddy API error {exc.response.status_code} for {method} {url}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.RequestError as exc:
            raise error(f"Network error calling GoDaddy API ({method} {url}): {exc}") from exc

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            if method == "GET":
                raise error(f"GoDaddy API sent invalid JSON for {method} {url}.") from exc
            # PUT acknowledgements carry no meaningful body
            return None

    @staticmethod
    def _parse_record(raw: dict[str, Any], zone: str, family: AddressFamily) -> RemoteRecord:
        extra = {k: v for k, v in raw.items() if k != "data"}
        extra.setdefault("type", family.record_type)
        return RemoteRecord(
            name=qualify_name(raw.get("name", "@"), zone),
            type=family.record_type,
            content=str(raw.get("data", "")),
            zone_id=zone,
            extra=extra,
        )
