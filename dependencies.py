"""
dependencies.py

Responsibility: Wires validated configuration into the concrete collaborators
of a run: the WAN address resolver, the DNS lookup used by dynamic-DNS style
providers, one DNSProvider per configured domain, and the orchestrator.
Does NOT: contain reconciliation logic or make network calls itself.
"""

from __future__ import annotations

from collections.abc import Callable

import httpx

from config import (
    AppConfig,
    CloudflareConfig,
    DomainConfig,
    DynuConfig,
    GoDaddyConfig,
    HeConfig,
    NamecheapConfig,
    NoIpConfig,
    PorkbunConfig,
)
from providers.cloudflare_client import CloudflareClient
from providers.dns_provider import DNSProvider
from providers.dynu_client import DynuClient
from providers.godaddy_client import GoDaddyClient
from providers.he_client import HeClient
from providers.namecheap_client import NamecheapClient
from providers.noip_client import NoIpClient
from providers.porkbun_client import PorkbunClient
from services.address_cache import AddressCache
from services.dns_lookup import CLOUDFLARE_NAMESERVERS, DnsLookup
from services.ip_service import HttpIpResolver, IpResolver, OpenDnsIpResolver
from services.log_service import LogService
from services.orchestrator import DomainJob, Orchestrator
from services.reconciler import DomainReconciler
from services.stats_service import StatsService

# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


def build_ip_resolver(config: AppConfig, http_client: httpx.AsyncClient) -> IpResolver:
    """
    Returns the WAN address resolver selected by ``ip_resolver``.

    Args:
        config: The loaded application configuration.
        http_client: The run's shared httpx.AsyncClient (used by ipify).

    Returns:
        An IpResolver implementation.
    """
    if config.ip_resolver == "ipify":
        return HttpIpResolver(http_client)
    return OpenDnsIpResolver(timeout=config.timeout)


def build_lookup(timeout: float) -> DnsLookup:
    """Returns the lookup used to read currently published records (Cloudflare DNS)."""
    return DnsLookup(CLOUDFLARE_NAMESERVERS, timeout=timeout)


# ---------------------------------------------------------------------------
# Provider clients
# ---------------------------------------------------------------------------


def _cloudflare(domain: CloudflareConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    # A token takes precedence over email + key
    if domain.token:
        return CloudflareClient(http_client, token=domain.token)
    return CloudflareClient(http_client, email=domain.email, key=domain.key)


def _godaddy(domain: GoDaddyConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    return GoDaddyClient(
        http_client, domain.key, domain.secret, families=domain.families, base_url=domain.base_url
    )


def _namecheap(domain: NamecheapConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    return NamecheapClient(
        http_client, lookup, domain.ddns_password, domain.record_names, base_url=domain.base_url
    )


def _he(domain: HeConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    return HeClient(
        http_client,
        lookup,
        domain.password,
        domain.record_names,
        families=domain.families,
        base_url=domain.base_url,
    )


def _noip(domain: NoIpConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    return NoIpClient(
        http_client,
        lookup,
        domain.username,
        domain.password,
        families=domain.families,
        base_url=domain.base_url,
    )


def _dynu(domain: DynuConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    return DynuClient(
        http_client,
        lookup,
        domain.username,
        domain.password,
        domain.record_names,
        families=domain.families,
        base_url=domain.base_url,
    )


def _porkbun(domain: PorkbunConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    return PorkbunClient(http_client, domain.key, domain.secret, base_url=domain.base_url)


_BUILDERS: dict[str, Callable[..., DNSProvider]] = {
    "cloudflare": _cloudflare,
    "godaddy": _godaddy,
    "namecheap": _namecheap,
    "he": _he,
    "noip": _noip,
    "dynu": _dynu,
    "porkbun": _porkbun,
}


def build_provider(domain: DomainConfig, http_client: httpx.AsyncClient, lookup: DnsLookup) -> DNSProvider:
    """
    Builds the DNSProvider client for one configured domain.

    Args:
        domain: The validated domain entry.
        http_client: The run's shared httpx.AsyncClient.
        lookup: DNS lookup used by providers without a record-listing API.

    Returns:
        A client satisfying the DNSProvider protocol.

    Raises:
        ValueError: If the domain's provider type has no builder.
    """
    try:
        builder = _BUILDERS[domain.kind]
    except KeyError:
        raise ValueError(f"unsupported provider type: {domain.kind}") from None
    return builder(domain, http_client, lookup)


# ---------------------------------------------------------------------------
# Run wiring
# ---------------------------------------------------------------------------


def build_jobs(config: AppConfig, http_client: httpx.AsyncClient) -> list[DomainJob]:
    """Returns one DomainJob per configured domain, in configuration order."""
    lookup = build_lookup(config.timeout)
    return [DomainJob(domain, build_provider(domain, http_client, lookup)) for domain in config.domains]


def build_orchestrator(
    address_cache: AddressCache,
    stats_service: StatsService | None = None,
    log_service: LogService | None = None,
) -> Orchestrator:
    """
    Provides a fully wired Orchestrator around a run-scoped AddressCache.

    Args:
        address_cache: The cache shared by every domain of the run.
        stats_service: Optional pre-built StatsService (tests).
        log_service: Optional pre-built LogService (tests).

    Returns:
        An Orchestrator ready to run.
    """
    return Orchestrator(
        DomainReconciler(address_cache),
        stats_service or StatsService(),
        log_service or LogService(),
    )
