"""
tests/unit/test_orchestrator.py

Unit tests for services/orchestrator.py.
Domains run against in-memory fake providers; the WAN resolver is an
AsyncMock shared through one AddressCache, as in a real run.
"""

from __future__ import annotations

import asyncio
import logging
from unittest.mock import AsyncMock

import httpx
import pytest

from config import CloudflareConfig, PorkbunConfig
from dependencies import build_orchestrator
from exceptions import FetchError
from models import AddressFamily, OutcomeKind
from providers.cloudflare_client import CloudflareClient
from providers.dns_provider import RemoteRecord
from providers.porkbun_client import PORKBUN_BASE, PorkbunClient
from services.address_cache import AddressCache
from services.log_service import LogService
from services.orchestrator import DomainJob
from services.stats_service import StatsService


class FakeZone:
    def __init__(self, records, fail_fetch=None, delay=0.0):
        self.records = list(records)
        self.fail_fetch = fail_fetch
        self.delay = delay
        self.updates = []

    async def fetch(self, zone):
        await asyncio.sleep(self.delay)
        if self.fail_fetch:
            raise self.fail_fetch
        return list(self.records)

    async def update(self, record, new_content):
        self.updates.append((record.name, new_content))


def _resolver():
    resolver = AsyncMock()

    async def _resolve(family):
        await asyncio.sleep(0.01)
        return "203.0.113.5" if family is AddressFamily.IPV4 else "2001:db8::5"

    resolver.resolve.side_effect = _resolve
    return resolver


def _cloudflare(zone, records):
    return CloudflareConfig(type="cloudflare", token="t", zone=zone, records=records)


def _record(name, content):
    return RemoteRecord(name=name, type="A", content=content, id=name, zone_id="z")


@pytest.mark.asyncio
async def test_failing_domain_does_not_affect_others():
    stats = StatsService()
    orchestrator = build_orchestrator(AddressCache(_resolver()), stats_service=stats)
    healthy = FakeZone([_record("a.example.com", "203.0.113.9")])
    broken = FakeZone([], fail_fetch=FetchError("401 unauthorized"))

    summary = await orchestrator.run(
        [
            DomainJob(_cloudflare("broken.example", ["@", "www"]), broken),
            DomainJob(_cloudflare("example.com", ["a"]), healthy),
        ]
    )

    assert healthy.updates == [("a.example.com", "203.0.113.5")]
    assert (summary.updated, summary.failed) == (1, 2)
    assert summary.has_failures


@pytest.mark.asyncio
async def test_malformed_provider_response_fails_only_its_domain(mock_http, http_client):
    """A Porkbun record listing without ids fails that domain while Cloudflare is updated."""
    cf_base = "https://api.cloudflare.com/client/v4"
    mock_http.post(f"{PORKBUN_BASE}/dns/retrieve/broken.example").mock(
        return_value=httpx.Response(
            200,
            json={
                "status": "SUCCESS",
                "records": [{"name": "broken.example", "type": "A", "content": "203.0.113.9"}],
            },
        )
    )
    mock_http.get(f"{cf_base}/zones").mock(
        return_value=httpx.Response(200, json={"success": True, "result": [{"id": "z1"}]})
    )
    mock_http.get(f"{cf_base}/zones/z1/dns_records").mock(
        return_value=httpx.Response(
            200,
            json={
                "success": True,
                "result": [{"id": "r1", "name": "example.com", "type": "A", "content": "203.0.113.9"}],
                "result_info": {"page": 1, "total_pages": 1},
            },
        )
    )
    patch = mock_http.patch(f"{cf_base}/zones/z1/dns_records/r1").mock(
        return_value=httpx.Response(200, json={"success": True, "result": {}})
    )
    porkbun = PorkbunConfig(type="porkbun", domain="broken.example", key="k", secret="s", records=["@"])

    summary = await build_orchestrator(AddressCache(_resolver())).run(
        [
            DomainJob(porkbun, PorkbunClient(http_client, "k", "s")),
            DomainJob(_cloudflare("example.com", ["@"]), CloudflareClient(http_client, token="t")),
        ]
    )

    assert (summary.updated, summary.failed) == (1, 1)
    assert patch.call_count == 1


@pytest.mark.asyncio
async def test_address_is_resolved_once_per_run():
    resolver = _resolver()
    orchestrator = build_orchestrator(AddressCache(resolver))
    jobs = [
        DomainJob(_cloudflare(f"d{i}.example", ["@"]), FakeZone([_record(f"d{i}.example", "203.0.113.5")]))
        for i in range(5)
    ]

    summary = await orchestrator.run(jobs)

    resolver.resolve.assert_awaited_once_with(AddressFamily.IPV4)
    assert summary.already_current == 5


@pytest.mark.asyncio
async def test_domains_run_concurrently():
    """Total time is close to the slowest domain, not the sum of all."""
    orchestrator = build_orchestrator(AddressCache(_resolver()))
    jobs = [
        DomainJob(_cloudflare(f"d{i}.example", ["@"]), FakeZone([], delay=0.2))
        for i in range(5)
    ]

    summary = await asyncio.wait_for(orchestrator.run(jobs), timeout=0.8)

    assert summary.missing == 5


@pytest.mark.asyncio
async def test_every_outcome_is_reported():
    log = LogService()
    orchestrator = build_orchestrator(AddressCache(_resolver()), log_service=log)
    job = DomainJob(
        PorkbunConfig(
            type="porkbun",
            domain="example.com",
            key="k",
            secret="s",
            records=["@", "www", "gone"],
        ),
        FakeZone([_record("example.com", "203.0.113.9"), _record("www.example.com", "203.0.113.5")]),
    )

    summary = await orchestrator.run([job])

    assert [o.kind for o in log.outcomes()] == [
        OutcomeKind.UPDATED,
        OutcomeKind.ALREADY_CURRENT,
        OutcomeKind.MISSING,
    ]
    assert summary.total == 3
    assert not summary.has_failures


@pytest.mark.asyncio
async def test_summary_lines_are_logged(caplog):
    caplog.set_level(logging.INFO)
    orchestrator = build_orchestrator(AddressCache(_resolver()))

    await orchestrator.run(
        [DomainJob(_cloudflare("example.com", ["@"]), FakeZone([_record("example.com", "203.0.113.9")]))]
    )

    assert "@ (A) in example.com (cloudflare) updated from 203.0.113.9 to 203.0.113.5" in caplog.text
    assert "processed example.com (cloudflare): (updated: 1, already current: 0, missing: 0, failed: 0)" in caplog.text
    assert "processed all: (updated: 1, already current: 0, missing: 0, failed: 0)" in caplog.text


@pytest.mark.asyncio
async def test_no_jobs_yields_empty_summary():
    summary = await build_orchestrator(AddressCache(_resolver())).run([])

    assert summary.total == 0
    assert not summary.has_failures
