"""
providers/namecheap_client.py

Responsibility: Implements the DNSProvider protocol for Namecheap's dynamic
DNS endpoint. Current values are read from public DNS.
Does NOT: read configuration, compare addresses, or aggregate outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from exceptions import UpdateError
from models import AddressFamily
from providers.dns_provider import RemoteRecord, relative_name
from providers.published_records import fetch_published_records, require_body
from services.dns_lookup import DnsLookup

logger = logging.getLogger(__name__)

NAMECHEAP_BASE = "https://dynamicdns.park-your-domain.com"


class NamecheapClient:
    """
    Implements DNSProvider for Namecheap dynamic DNS (IPv4 only).

    Collaborators:
        - httpx.AsyncClient: sends the update request
        - DnsLookup: reads the published value of each managed record
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        lookup: DnsLookup,
        ddns_password: str,
        records: Iterable[str],
        base_url: str = NAMECHEAP_BASE,
    ) -> None:
        self._client = http_client
        self._lookup = lookup
        self._password = ddns_password
        self._records = list(records)
        self._base = base_url.rstrip("/")

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        return await fetch_published_records(
            self._lookup, zone, self._records, [AddressFamily.IPV4], "namecheap"
        )

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Sets ``record`` to ``new_content``; Namecheap answers with an XML
        document whose ErrCount must be zero.

        Raises:
            UpdateError: On transport errors, non-2xx status, or ErrCount > 0.
        """
        url = f"{self._base}/update"
        params = {
            "host": relative_name(record.name, record.zone_id),
            "domain": record.zone_id,
            "password": self._password,
            "ip": new_content,
        }
        logger.debug("GET %s host=%s ip=%s", url, params["host"], new_content)
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpdateError(
                f"Namecheap returned status {exc.response.status_code} for {url}."
            ) from exc
        except httpx.RequestError as exc:
            raise UpdateError(f"Network error calling Namecheap ({url}): {exc}") from exc

        require_body(response.text, ["<ErrCount>0</ErrCount>"], "namecheap", url)
