"""
providers/cloudflare_client.py

Responsibility: Implements the DNSProvider protocol using the Cloudflare REST API.
All Cloudflare HTTP calls are concentrated here; no other file may call the
Cloudflare API directly.
Does NOT: read configuration, compare addresses, or aggregate outcomes.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from exceptions import DnsProviderError, FetchError, UpdateError
from providers.dns_provider import RemoteRecord, normalize_name

logger = logging.getLogger(__name__)

_CLOUDFLARE_BASE = "https://api.cloudflare.com/client/v4"

# Largest page size accepted by the dns_records listing endpoint
_PAGE_SIZE = 100

_ADDRESS_TYPES = ("A", "AAAA")


class CloudflareClient:
    """
    Implements DNSProvider for the Cloudflare DNS REST API (v4).

    Cloudflare acts as the cache: every run lists the zone's records so an
    out-of-band change to a managed record is corrected on the next run.

    All outbound Cloudflare requests go through the injected httpx.AsyncClient,
    making this class fully testable without real network calls (use respx.mock).

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - DNSProvider: this class satisfies the protocol contract
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        token: str | None = None,
        email: str | None = None,
        key: str | None = None,
        base_url: str = _CLOUDFLARE_BASE,
    ) -> None:
        """
        Initialises the client with an HTTP client and Cloudflare credentials.

        An API token is preferred; the legacy email + global API key pair is
        used only when no token is given.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            token: A Cloudflare API token with DNS edit permissions.
            email: Account email for legacy key authentication.
            key: Global API key for legacy key authentication.
            base_url: API root; overridable for tests.
        """
        self._client = http_client
        self._base = base_url.rstrip("/")
        self._zone_ids: dict[str, str] = {}

        if token:
            self._headers = {"Authorization": f"Bearer {token}"}
        elif email and key:
            self._headers = {"X-Auth-Email": email, "X-Auth-Key": key}
        else:
            raise ValueError("Cloudflare requires either a token or an email + key pair.")
        self._headers["Content-Type"] = "application/json"

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        """
        Returns all A/AAAA records in the Cloudflare zone named ``zone``.

        Cloudflare paginates the listing; pages are requested until
        ``result_info.total_pages`` is reached.

        Args:
            zone: The zone name, e.g. "example.com".

        Returns:
            A list of RemoteRecord instances, possibly empty.

        Raises:
            FetchError: If any Cloudflare API call fails.
        """
        zone_id = await self._zone_id(zone)
        url = f"{self._base}/zones/{zone_id}/dns_records"

        records: list[RemoteRecord] = []
        page = 1
        while True:
            params = {"page": page, "per_page": _PAGE_SIZE}
            logger.debug("GET %s params=%s", url, params)
            data = await self._request("GET", url, FetchError, params=params)

            records.extend(self._parse_records(data.get("result"), zone_id, url))

            info = data.get("result_info")
            if not isinstance(info, dict) or not info:
                logger.warning(
                    "Cloudflare sent no result_info for %s, assuming no more pages.", zone
                )
                break
            total_pages = info.get("total_pages", 1)
            if not isinstance(total_pages, int) or total_pages <= page:
                break
            page += 1

        return records

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Points an existing record at ``new_content``.

        Uses PATCH with only the content field, so Cloudflare keeps the
        record's TTL, proxy status, comment and tags untouched.

        Args:
            record: A record previously returned by fetch().
            new_content: The new IP address.

        Raises:
            UpdateError: If the Cloudflare API returns an error.
        """
        url = f"{self._base}/zones/{record.zone_id}/dns_records/{record.id}"
        payload: dict[str, Any] = {"content": new_content}

        logger.debug("PATCH %s payload=%s", url, payload)
        await self._request("PATCH", url, UpdateError, json=payload)

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _zone_id(self, zone: str) -> str:
        """
        Translates a zone name into Cloudflare's zone identifier.

        Raises:
            FetchError: If the lookup fails or does not yield exactly one zone.
        """
        if zone in self._zone_ids:
            return self._zone_ids[zone]

        url = f"{self._base}/zones"
        logger.debug("GET %s name=%s", url, zone)
        data = await self._request("GET", url, FetchError, params={"name": zone})

        zones = data.get("result") or []
        if not isinstance(zones, list):
            raise FetchError(f"Cloudflare sent an unexpected zone listing for {zone}.")
        if len(zones) != 1:
            raise FetchError(f"Expected 1 Cloudflare zone named {zone}, not {len(zones)}.")
        try:
            self._zone_ids[zone] = str(zones[0]["id"])
        except (KeyError, TypeError) as exc:
            raise FetchError(f"Cloudflare sent a zone without an id for {zone}.") from exc
        return self._zone_ids[zone]

    async def _request(
        self,
        method: str,
        url: str,
        error: type[DnsProviderError],
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Sends an authenticated HTTP request to the Cloudflare API.

        Args:
            method: HTTP verb ("GET", "PATCH").
            url: Full URL of the Cloudflare API endpoint.
            error: Exception class raised on failure (FetchError/UpdateError).
            params: Optional query-string parameters.
            json: Optional JSON request body.

        Returns:
            The parsed JSON response body as a dict.

        Raises:
            DnsProviderError: ``error`` if the HTTP call fails or the API
                              returns success=false in the response body.
        """
        try:
            response = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
            response.raise_for_status()
            body: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as exc:
            raise error(
                f"Cloudflare API error {exc.response.status_code} for {method} {url}: "
                f"{exc.response.text[:200]}"
            ) from exc
        except httpx.RequestError as exc:
            raise error(
                f"Network error calling Cloudflare API ({method} {url}): {exc}"
            ) from exc
        except ValueError as exc:
            raise error(f"Cloudflare API sent invalid JSON for {method} {url}.") from exc

        # NOTE: Cloudflare wraps all responses in {"success": bool, "result": ...}
        if not isinstance(body, dict):
            raise error(f"Cloudflare API sent an unexpected body for {method} {url}.")
        if not body.get("success", False):
            errors = "; ".join(
                f"{e.get('code')}: {e.get('message')}"
                for e in body.get("errors") or []
                if isinstance(e, dict)
            )
            raise error(
                f"Cloudflare API returned success=false for {method} {url}. "
                f"Errors: {errors or 'none given'}"
            )

        return body

    @classmethod
    def _parse_records(cls, result: Any, zone_id: str, url: str) -> list[RemoteRecord]:
        """
        Converts one page of listed records, keeping A/AAAA only.

        Raises:
            FetchError: If the page is not a list of record objects or a
                        record lacks its id or name.
        """
        if result is None:
            return []
        try:
            return [
                cls._parse_record(raw, zone_id)
                for raw in result
                if raw.get("type") in _ADDRESS_TYPES
            ]
        except (KeyError, TypeError, AttributeError) as exc:
            raise FetchError(f"Cloudflare sent a malformed record listing for GET {url}: {exc!r}") from exc

    @staticmethod
    def _parse_record(raw: dict[str, Any], zone_id: str) -> RemoteRecord:
        """Converts a raw Cloudflare API record dict into a RemoteRecord."""
        extra = {k: v for k, v in raw.items() if k not in ("id", "name", "type", "content")}
        return RemoteRecord(
            id=raw["id"],
            name=normalize_name(raw["name"]),
            type=raw["type"],
            content=str(raw.get("content", "")),
            zone_id=zone_id,
            extra=extra,
        )
