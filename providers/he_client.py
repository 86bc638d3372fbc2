"""
providers/he_client.py

Responsibility: Implements the DNSProvider protocol for Hurricane Electric's
dynamic DNS endpoint (https://dns.he.net/docs.html). Current values are read
from public DNS.
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

HE_BASE = "https://dyn.dns.he.net"


class HeClient:
    """
    Implements DNSProvider for dyn.dns.he.net.

    Collaborators:
        - httpx.AsyncClient: sends the update request
        - DnsLookup: reads the published value of each managed record
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        lookup: DnsLookup,
        password: str,
        records: Iterable[str],
        families: Iterable[AddressFamily] = (AddressFamily.IPV4,),
        base_url: str = HE_BASE,
    ) -> None:
        self._client = http_client
        self._lookup = lookup
        self._password = password
        self._records = list(records)
        self._families = list(families)
        self._base = base_url.rstrip("/")

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        return await fetch_published_records(
            self._lookup, zone, self._records, self._families, "he"
        )

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Posts the new address for the record's full hostname.

        Raises:
            UpdateError: On transport errors, non-2xx status, or a body that
                         is neither "good" nor "nochg".
        """
        url = f"{self._base}/nic/update"
        form = {"hostname": record.name, "password": self._password, "myip": new_content}
        logger.debug("POST %s hostname=%s myip=%s", url, record.name, new_content)
        try:
            response = await self._client.post(url, data=form)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpdateError(
                f"he.net returned status {exc.response.status_code} for {url}."
            ) from exc
        except httpx.RequestError as exc:
            raise UpdateError(f"Network error calling he.net ({url}): {exc}") from exc

        require_body(response.text, ["good", "nochg"], "he", url)
