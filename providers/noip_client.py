"""
providers/noip_client.py

Responsibility: Implements the DNSProvider protocol for No-IP's update
protocol (https://www.noip.com/integrate/request). No-IP manages a single
hostname per configuration entry.
Does NOT: read configuration, compare addresses, or aggregate outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

import httpx

from exceptions import UpdateError
from models import AddressFamily
from providers.dns_provider import RemoteRecord
from providers.published_records import fetch_published_records, require_body
from services.dns_lookup import DnsLookup

logger = logging.getLogger(__name__)

NOIP_BASE = "https://dynupdate.no-ip.com"


class NoIpClient:
    """
    Implements DNSProvider for No-IP. The zone is the hostname itself.

    Collaborators:
        - httpx.AsyncClient: sends the update request
        - DnsLookup: reads the hostname's published value
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        lookup: DnsLookup,
        username: str,
        password: str,
        families: Iterable[AddressFamily] = (AddressFamily.IPV4,),
        base_url: str = NOIP_BASE,
    ) -> None:
        self._client = http_client
        self._lookup = lookup
        self._auth = httpx.BasicAuth(username, password)
        self._families = list(families)
        self._base = base_url.rstrip("/")

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        return await fetch_published_records(self._lookup, zone, ["@"], self._families, "noip")

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Raises:
            UpdateError: On transport errors, non-2xx status, or a body that
                         is neither "good" nor "nochg".
        """
        url = f"{self._base}/nic/update"
        params = {"hostname": record.name, "myip": new_content}
        logger.debug("GET %s params=%s", url, params)
        try:
            response = await self._client.get(url, params=params, auth=self._auth)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpdateError(
                f"No-IP returned status {exc.response.status_code} for {url}."
            ) from exc
        except httpx.RequestError as exc:
            raise UpdateError(f"Network error calling No-IP ({url}): {exc}") from exc

        require_body(response.text, ["good", "nochg"], "noip", url)
