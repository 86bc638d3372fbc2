"""
services/dns_lookup.py

Responsibility: Resolves a hostname's published A/AAAA value against a fixed
set of public nameservers using dnspython's asyncio resolver.
Does NOT: decide what a missing answer means; callers map None and
DnsLookupError onto their own outcomes.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import dns.asyncresolver
import dns.exception
import dns.resolver

from exceptions import DnsLookupError
from models import AddressFamily

logger = logging.getLogger(__name__)

# Cloudflare's public resolvers; used to read the currently published value of
# records at providers that offer no authenticated read API.
CLOUDFLARE_NAMESERVERS = ("1.1.1.1", "1.0.0.1")


class DnsLookup:
    """
    Thin wrapper around ``dns.asyncresolver.Resolver`` bound to explicit
    nameservers (the system resolv.conf is never consulted).

    Collaborators:
        - dns.asyncresolver.Resolver: performs the UDP/TCP queries
    """

    def __init__(self, nameservers: Sequence[str], timeout: float = 10.0) -> None:
        """
        Args:
            nameservers: IP addresses of the nameservers to query.
            timeout: Total time in seconds allowed for one lookup.
        """
        self._resolver = dns.asyncresolver.Resolver(configure=False)
        self._resolver.nameservers = list(nameservers)
        self._resolver.lifetime = timeout
        self._resolver.timeout = timeout
        self.nameservers = tuple(nameservers)

    async def lookup(self, hostname: str, family: AddressFamily) -> str | None:
        """
        Returns the first address published for ``hostname``.

        Args:
            hostname: Fully-qualified name; a trailing dot is added if absent.
            family: Selects an A or AAAA query.

        Returns:
            The address as text, or None if the name or record type does not
            exist.

        Raises:
            DnsLookupError: On timeout or any other resolver failure.
        """
        qname = hostname if hostname.endswith(".") else f"{hostname}."
        logger.debug("DNS %s %s via %s", family.record_type, qname, ", ".join(self.nameservers))
        try:
            answer = await self._resolver.resolve(qname, family.record_type)
        except (dns.resolver.NXDOMAIN, dns.resolver.NoAnswer):
            return None
        except dns.exception.DNSException as exc:
            raise DnsLookupError(
                f"{family.record_type} lookup of {qname} failed: {exc or type(exc).__name__}"
            ) from exc

        for rdata in answer:
            return rdata.address
        return None
