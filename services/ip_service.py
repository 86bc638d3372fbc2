"""
services/ip_service.py

Responsibility: Determines the host machine's current WAN address for a
requested address family. Two interchangeable strategies are provided: an
HTTP echo service (ipify) and a DNS query against OpenDNS.
Does NOT: cache results (see services/address_cache.py), parse DNS records,
or interact with DNS providers.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol, runtime_checkable

import httpx

from exceptions import DnsLookupError, IpFetchError, UnsupportedFamilyError
from models import AddressFamily
from services.dns_lookup import DnsLookup

logger = logging.getLogger(__name__)

# NOTE: ipify serves each family from its own host so the answer always
# matches the family of the connection used to reach it.
IPIFY_ENDPOINTS = {
    AddressFamily.IPV4: "https://api.ipify.org",
    AddressFamily.IPV6: "https://api6.ipify.org",
}

# Querying OpenDNS for this special name answers with the caller's address.
OPENDNS_HOSTNAME = "myip.opendns.com."
OPENDNS_NAMESERVERS = ("208.67.222.222", "208.67.220.220")


@runtime_checkable
class IpResolver(Protocol):
    """
    Contract shared by all WAN address strategies. The reconciliation
    services depend on this abstraction only.
    """

    async def resolve(self, family: AddressFamily) -> str:
        """
        Returns the WAN address for ``family`` as text.

        Raises:
            IpFetchError: If the address cannot be determined.
            UnsupportedFamilyError: If the strategy cannot serve ``family``.
        """
        ...


class HttpIpResolver:
    """
    Fetches the WAN address from a plain-text HTTP echo endpoint per family.

    Uses an injected httpx.AsyncClient so the service is fully testable
    without real network calls (use respx.mock in tests).

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        endpoints: dict[AddressFamily, str] | None = None,
    ) -> None:
        """
        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            endpoints: Optional override of the per-family endpoint URLs.
        """
        self._client = http_client
        self._endpoints = dict(endpoints or IPIFY_ENDPOINTS)

    async def resolve(self, family: AddressFamily) -> str:
        """
        Returns the current WAN address for ``family``.

        Raises:
            UnsupportedFamilyError: If no endpoint is configured for ``family``.
            IpFetchError: On transport errors, timeouts, non-2xx responses, or
                          a body that is not an address of ``family``.
        """
        url = self._endpoints.get(family)
        if url is None:
            raise UnsupportedFamilyError(f"No {family.label} endpoint configured.")

        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IpFetchError(
                f"IP provider returned status {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            raise IpFetchError(f"Could not reach IP provider ({url}): {exc}") from exc

        ip = response.text.strip()
        if not family.matches(ip):
            raise IpFetchError(f"IP provider ({url}) returned no {family.label} address: {ip[:64]!r}")

        logger.debug("Current public %s from %s: %s", family.label, url, ip)
        return ip


class OpenDnsIpResolver:
    """
    Resolves the WAN IPv4 address by asking both OpenDNS resolvers for
    ``myip.opendns.com``; the first successful answer wins.

    Collaborators:
        - DnsLookup: one per OpenDNS nameserver so the queries are independent
    """

    def __init__(self, lookups: list[DnsLookup] | None = None, timeout: float = 10.0) -> None:
        """
        Args:
            lookups: Optional pre-built lookups (tests); defaults to one
                     DnsLookup per OpenDNS nameserver.
            timeout: Per-query timeout in seconds.
        """
        if lookups is None:
            lookups = [DnsLookup([ns], timeout=timeout) for ns in OPENDNS_NAMESERVERS]
        self._lookups = lookups

    async def resolve(self, family: AddressFamily) -> str:
        """
        Returns the WAN IPv4 address.

        Raises:
            UnsupportedFamilyError: For IPv6; the OpenDNS pair queried here
                                    only reports IPv4 addresses.
            IpFetchError: If every resolver fails or returns no address.
        """
        if family is not AddressFamily.IPV4:
            raise UnsupportedFamilyError(
                f"The opendns resolver cannot determine an {family.label} address."
            )

        errors: list[str] = []
        tasks = [asyncio.ensure_future(self._query(lookup)) for lookup in self._lookups]
        pending = set(tasks)
        try:
            while pending:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                # Every finished query is consumed, so a failure that lands
                # together with the winning answer is never left unretrieved.
                answers = []
                for task in (t for t in tasks if t in done):
                    try:
                        answers.append(task.result())
                    except (DnsLookupError, IpFetchError) as exc:
                        errors.append(str(exc))
                if answers:
                    logger.debug("Current public IPv4 from OpenDNS: %s", answers[0])
                    return answers[0]
        finally:
            for task in pending:
                task.cancel()

        raise IpFetchError("OpenDNS lookup failed: " + "; ".join(errors))

    @staticmethod
    async def _query(lookup: DnsLookup) -> str:
        ip = await lookup.lookup(OPENDNS_HOSTNAME, AddressFamily.IPV4)
        if ip is None:
            raise IpFetchError(f"{', '.join(lookup.nameservers)} returned no address")
        return ip
