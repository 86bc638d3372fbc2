"""
providers/dns_provider.py

Responsibility: Defines the DNSProvider Protocol, the RemoteRecord value
object and the record-name helpers shared by all provider implementations.
Does NOT: make HTTP calls, read configuration, or implement any provider logic.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable


# ---------------------------------------------------------------------------
# Value object: stable shape returned by all DNSProvider implementations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RemoteRecord:
    """
    A provider's current view of one A/AAAA record.

    Using a dataclass (not a raw dict) ensures all callers receive a
    consistent, typed shape regardless of which provider is active.
    """

    # Fully-qualified, lower-case name without trailing dot, e.g. "n.example.com"
    name: str

    # "A" or "AAAA"
    type: str

    # Address currently stored in the record
    content: str

    # Provider-assigned identifier; None for providers read through DNS
    id: str | None = None

    # Zone identifier the record belongs to (Cloudflare zone id, domain name, ...)
    zone_id: str = ""

    # Every other field the provider returned (TTL, proxy flag, notes, ...).
    # Round-tripped verbatim when the record is updated.
    extra: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Abstract interface: all DNS providers must implement this contract
# ---------------------------------------------------------------------------


@runtime_checkable
class DNSProvider(Protocol):
    """
    Abstract protocol for reading and updating a zone's address records.

    All provider implementations (Cloudflare, GoDaddy, Porkbun, Namecheap,
    He.net, No-IP, Dynu) satisfy this interface. DomainReconciler depends on
    this abstraction, never on a concrete implementation; authentication and
    pagination stay inside each client.
    """

    async def fetch(self, zone: str) -> list[RemoteRecord]:
        """
        Returns every A/AAAA record relevant to matching under ``zone``,
        following provider pagination until exhausted.

        Raises:
            FetchError: On transport, authentication or API errors.
        """
        ...

    async def update(self, record: RemoteRecord, new_content: str) -> None:
        """
        Points ``record`` at ``new_content``, leaving every other property of
        the record unchanged.

        Raises:
            UpdateError: On transport, authentication or API errors.
        """
        ...


# ---------------------------------------------------------------------------
# Record-name helpers
# ---------------------------------------------------------------------------


def normalize_name(name: str) -> str:
    """Lower-cases ``name`` and strips surrounding whitespace and trailing dots."""
    return name.strip().rstrip(".").lower()


def qualify_name(name: str, zone: str) -> str:
    """
    Expands a configured or provider-relative record name to its FQDN.

    "@" and "" denote the zone apex; names already inside the zone are kept;
    anything else (including the wildcard "*") is treated as relative.

    >>> qualify_name("@", "example.com")
    'example.com'
    >>> qualify_name("*", "example.com")
    '*.example.com'
    >>> qualify_name("n.example.com", "example.com")
    'n.example.com'
    """
    name = normalize_name(name)
    zone = normalize_name(zone)
    if name in ("", "@") or name == zone:
        return zone
    if name.endswith("." + zone):
        return name
    return f"{name}.{zone}"


def relative_name(fqdn: str, zone: str, apex: str = "@") -> str:
    """
    Inverse of qualify_name: strips ``zone`` from ``fqdn``.

    Args:
        apex: Spelling the provider uses for the zone apex ("@" or "").
    """
    fqdn = normalize_name(fqdn)
    zone = normalize_name(zone)
    if fqdn == zone:
        return apex
    if fqdn.endswith("." + zone):
        return fqdn[: -len(zone) - 1]
    return fqdn
