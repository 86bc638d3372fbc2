"""
providers/dynu_client.py

Responsibility: Implements the DNSProvider protocol for Dynu's IP update
protocol. Records other than the apex are addressed as aliases of the
configured hostname.
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

DYNU_BASE = "https://api.dynu.com"


class DynuClient:
    """
    Implements DNSProvider for Dynu.

    Collaborators:
        - httpx.AsyncClient: sends the update request
        - DnsLookup: reads the published value of each managed record
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        lookup: DnsLookup,
        username: str,
        password: str,
        records: Iterable[str],
        families: Iterable[AddressFamily] = (AddressFamily.IPV4,),
        base_url: str = DYNU_BASE,
    ) -> None:
        self._client = http_client
        self._lookup = lookup
        self._auth = httpx.BasicAuth(username, password)
        self._records = list(records)
        self._families = list(families)
        self._base = base_url.rstrip("/")

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        return await fetch_published_records(
            self._lookup, zone, self._records, self._families, "dynu"
        )

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Sends the new address for one family; the other family is passed as
        "no" so Dynu leaves it untouched.

        Raises:
            UpdateError: On transport errors, non-2xx status, or a body that
                         is neither "good" nor "nochg".
        """
        url = f"{self._base}/nic/update"
        params = {"hostname": record.zone_id}
        if record.type == AddressFamily.IPV6.record_type:
            params.update(myip="no", myipv6=new_content)
        else:
            params.update(myip=new_content, myipv6="no")

        alias = relative_name(record.name, record.zone_id)
        if alias != "@":
            params["alias"] = alias

        logger.debug("GET %s params=%s", url, params)
        try:
            response = await self._client.get(url, params=params, auth=self._auth)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise UpdateError(
                f"Dynu returned status {exc.response.status_code} for {url}."
            ) from exc
        except httpx.RequestError as exc:
            raise UpdateError(f"Network error calling Dynu ({url}): {exc}") from exc

        require_body(response.text, ["good", "nochg"], "dynu", url)
