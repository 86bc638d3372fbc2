"""
services/reconciler.py

Responsibility: Reconciles one configured domain: resolves the WAN address
for each requested family, fetches the provider's records once, and for every
(record name, family) pair matches, diffs and updates, producing exactly one
RecordOutcome per pair.
Does NOT: run domains concurrently, count outcomes, or retry failed calls.
"""

from __future__ import annotations

import ipaddress
import logging

from config import DomainConfig
from exceptions import DnsProviderError, IpFetchError
from models import AddressFamily, RecordOutcome, ResolvedAddress
from providers.dns_provider import DNSProvider, RemoteRecord, qualify_name
from services.address_cache import AddressCache

logger = logging.getLogger(__name__)


def canonical_address(text: str) -> str:
    """
    Returns the canonical text of an IP literal, or ``text`` unchanged when
    it does not parse (a provider may hold garbage, which then simply differs).
    """
    try:
        return ipaddress.ip_address(text.strip()).compressed
    except ValueError:
        return text.strip()


class DomainReconciler:
    """
    Drives one DNSProvider through fetch → match → diff → update.

    Each stage only ever fails the pairs it affects:
        - a resolution failure fails the pairs of that family only
        - a fetch failure fails every pair of the domain
        - an update failure fails that pair only

    Collaborators:
        - AddressCache: run-scoped, shared with every other domain
        - DNSProvider: the domain's provider client, passed per call
    """

    def __init__(self, address_cache: AddressCache) -> None:
        self._addresses = address_cache

    async def reconcile(self, domain: DomainConfig, provider: DNSProvider) -> list[RecordOutcome]:
        """
        Reconciles every configured record of ``domain``.

        Args:
            domain: The validated domain configuration.
            provider: The provider client built for ``domain``.

        Returns:
            One RecordOutcome per (record name, family) pair, ordered by
            record name then family as configured.
        """
        label = domain.display_name
        names = self._distinct_names(domain)
        families = domain.families

        # 1. Resolve: memoized across domains, failures isolated per family
        resolved: dict[AddressFamily, ResolvedAddress] = {}
        resolve_errors: dict[AddressFamily, str] = {}
        for family in families:
            try:
                resolved[family] = await self._addresses.get(family)
            except IpFetchError as exc:
                resolve_errors[family] = f"could not resolve {family.label} address: {exc}"

        # 2. Fetch: once per domain, only if some family has an address
        index: dict[tuple[str, str], RemoteRecord] = {}
        fetch_error: str | None = None
        if resolved:
            try:
                remote = await provider.fetch(domain.zone)
            except DnsProviderError as exc:
                fetch_error = f"could not fetch records: {exc}"
                logger.debug("%s: %s", label, fetch_error)
            else:
                index = self._index(remote, label)

        outcomes: list[RecordOutcome] = []
        for name, fqdn in names:
            for family in families:
                if family in resolve_errors:
                    outcomes.append(RecordOutcome.failed(label, name, family, resolve_errors[family]))
                elif fetch_error is not None:
                    outcomes.append(RecordOutcome.failed(label, name, family, fetch_error))
                else:
                    record = index.get((fqdn, family.record_type))
                    outcomes.append(
                        await self._reconcile_record(label, name, record, resolved[family], provider)
                    )
        return outcomes

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _reconcile_record(
        self,
        label: str,
        name: str,
        record: RemoteRecord | None,
        address: ResolvedAddress,
        provider: DNSProvider,
    ) -> RecordOutcome:
        """Match → diff → update for a single pair."""
        family = address.family

        # 3. Match
        if record is None:
            return RecordOutcome.missing(label, name, family)

        # 4. Diff
        if canonical_address(record.content) == canonical_address(address.ip):
            logger.debug("%s from %s is already current (%s)", record.name, label, address.ip)
            return RecordOutcome.already_current(label, name, family)

        # 5. Update
        try:
            await provider.update(record, address.ip)
        except DnsProviderError as exc:
            return RecordOutcome.failed(label, name, family, f"could not update record: {exc}")
        return RecordOutcome.updated(label, name, family, old=record.content, new=address.ip)

    @staticmethod
    def _distinct_names(domain: DomainConfig) -> list[tuple[str, str]]:
        """
        Pairs each configured name with its fully-qualified form, dropping
        names that qualify to a record already listed ("@" and the bare zone,
        "www" and "www.zone"). The first spelling is kept.
        """
        seen: dict[str, str] = {}
        for name in domain.record_names:
            fqdn = qualify_name(name, domain.zone)
            if fqdn in seen:
                logger.warning(
                    "%s lists %s and %s, which both name %s; managing it once",
                    domain.display_name, seen[fqdn], name, fqdn,
                )
                continue
            seen[fqdn] = name
        return [(name, fqdn) for fqdn, name in seen.items()]

    @staticmethod
    def _index(remote: list[RemoteRecord], label: str) -> dict[tuple[str, str], RemoteRecord]:
        """Keys fetched records by (name, type); the first of any duplicates wins."""
        index: dict[tuple[str, str], RemoteRecord] = {}
        for record in remote:
            key = (record.name, record.type.upper())
            if key in index:
                logger.warning(
                    "%s has more than one %s record for %s; only the first is managed",
                    label, key[1], key[0],
                )
                continue
            index[key] = record
        return index
