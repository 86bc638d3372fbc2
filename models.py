"""
models.py

Responsibility: Defines the value objects shared by resolvers, providers and
the reconciliation services: address families, resolved addresses and the
per-record outcome of a reconciliation.
Does NOT: make network calls, read configuration, or aggregate outcomes.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass
from enum import Enum


class AddressFamily(str, Enum):
    """
    The IP address family a record is managed for.

    Values match the ``ip_types`` entries accepted in the configuration file.
    """

    IPV4 = "4"
    IPV6 = "6"

    @property
    def record_type(self) -> str:
        """The DNS record type holding addresses of this family."""
        return "A" if self is AddressFamily.IPV4 else "AAAA"

    @property
    def label(self) -> str:
        return "IPv4" if self is AddressFamily.IPV4 else "IPv6"

    def matches(self, ip: str) -> bool:
        """True if ``ip`` parses as an address of this family."""
        try:
            parsed = ipaddress.ip_address(ip)
        except ValueError:
            return False
        return parsed.version == (4 if self is AddressFamily.IPV4 else 6)


@dataclass(frozen=True)
class ResolvedAddress:
    """The caller's WAN address for one family, resolved once per run."""

    family: AddressFamily
    ip: str


class OutcomeKind(str, Enum):
    UPDATED = "updated"
    ALREADY_CURRENT = "already current"
    MISSING = "missing"
    FAILED = "failed"


@dataclass(frozen=True)
class RecordOutcome:
    """
    Terminal result of reconciling one (record name, address family) pair
    of one domain.

    ``old``/``new`` are only set for UPDATED outcomes and ``cause`` only for
    FAILED outcomes.
    """

    # Display name of the domain, e.g. "example.com (cloudflare)"
    domain: str

    # Record name as configured, e.g. "@" or "n.example.com"
    record: str

    family: AddressFamily
    kind: OutcomeKind
    old: str | None = None
    new: str | None = None
    cause: str | None = None

    @classmethod
    def updated(
        cls, domain: str, record: str, family: AddressFamily, old: str, new: str
    ) -> RecordOutcome:
        return cls(domain, record, family, OutcomeKind.UPDATED, old=old, new=new)

    @classmethod
    def already_current(cls, domain: str, record: str, family: AddressFamily) -> RecordOutcome:
        return cls(domain, record, family, OutcomeKind.ALREADY_CURRENT)

    @classmethod
    def missing(cls, domain: str, record: str, family: AddressFamily) -> RecordOutcome:
        return cls(domain, record, family, OutcomeKind.MISSING)

    @classmethod
    def failed(cls, domain: str, record: str, family: AddressFamily, cause: str) -> RecordOutcome:
        return cls(domain, record, family, OutcomeKind.FAILED, cause=cause)

    def describe(self) -> str:
        """Returns the human-readable line reported for this outcome."""
        prefix = f"{self.record} ({self.family.record_type}) in {self.domain}"
        if self.kind is OutcomeKind.UPDATED:
            return f"{prefix} updated from {self.old} to {self.new}"
        if self.kind is OutcomeKind.ALREADY_CURRENT:
            return f"{prefix} is already current"
        if self.kind is OutcomeKind.MISSING:
            return f"{prefix} was not found at the provider"
        return f"{prefix} failed: {self.cause}"
