"""
providers/published_records.py

Responsibility: Builds RemoteRecords from the values currently published in
DNS, for providers that only expose a "set current IP" endpoint.
Does NOT: talk to provider APIs or decide whether an update is needed.

NOTE: DNS is a weaker cache than an authenticated read API. Until a previous
update has propagated, the published value is stale and the record is updated
again; providers answer such calls with "nochg" so the extra call is harmless.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from exceptions import DnsLookupError, FetchError, UpdateError
from models import AddressFamily
from providers.dns_provider import RemoteRecord, qualify_name
from services.dns_lookup import DnsLookup

logger = logging.getLogger(__name__)


async def fetch_published_records(
    lookup: DnsLookup,
    zone: str,
    record_names: Iterable[str],
    families: Iterable[AddressFamily],
    provider: str,
) -> list[RemoteRecord]:
    """
    Looks up every (record name, family) pair and returns the ones that exist.

    Names without a published record are simply absent from the result so
    the reconciler reports them as missing.

    Raises:
        FetchError: If any lookup fails for a reason other than the record
                    not existing.
    """
    families = list(families)
    records: list[RemoteRecord] = []
    for fqdn in dict.fromkeys(qualify_name(name, zone) for name in record_names):
        for family in families:
            try:
                content = await lookup.lookup(fqdn, family)
            except DnsLookupError as exc:
                raise FetchError(f"resolving {provider} record {fqdn}: {exc}") from exc

            if content is None:
                logger.debug("%s: no %s record published for %s", provider, family.record_type, fqdn)
                continue
            records.append(
                RemoteRecord(name=fqdn, type=family.record_type, content=content, zone_id=zone)
            )
    return records


def require_body(body: str, accepted: Iterable[str], provider: str, url: str) -> None:
    """
    Checks a dyndns-style plain-text response for one of the success markers.

    Raises:
        UpdateError: If none of ``accepted`` occurs in ``body``.
    """
    if not any(marker in body for marker in accepted):
        raise UpdateError(f"{provider} rejected update ({url}): {body.strip()[:200]}")
