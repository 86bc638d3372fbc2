"""
tests/conftest.py

Shared pytest fixtures used by both unit and integration test suites.
All HTTP fixtures use respx.mock and all DNS lookups are faked, so no real
network calls are made in any test.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from exceptions import DnsLookupError
from models import AddressFamily

# ---------------------------------------------------------------------------
# HTTP mock fixture: intercepts all httpx calls
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_http():
    """
    Yields a respx router that intercepts all httpx.AsyncClient calls.

    No real network traffic is allowed during tests. Use this fixture
    wherever a service or client would normally make an outbound request.
    """
    with respx.mock(assert_all_called=False) as router:
        yield router


# ---------------------------------------------------------------------------
# Shared httpx.AsyncClient fixture
# ---------------------------------------------------------------------------


@pytest.fixture()
async def http_client():
    """
    Yields a real httpx.AsyncClient instance for use in tests.

    Pair with the mock_http fixture so all requests are intercepted by respx.
    The client is closed after each test.
    """
    async with httpx.AsyncClient() as client:
        yield client


# ---------------------------------------------------------------------------
# Fake DNS lookup
# ---------------------------------------------------------------------------


class FakeLookup:
    """
    Stands in for services.dns_lookup.DnsLookup.

    ``answers`` maps (hostname without trailing dot, AddressFamily) to the
    address to return; anything unmapped is treated as absent. An Exception
    value is raised instead of returned.
    """

    def __init__(self, answers=None, nameservers=("192.0.2.53",)):
        self.answers = dict(answers or {})
        self.nameservers = tuple(nameservers)
        self.queries: list[tuple[str, AddressFamily]] = []

    async def lookup(self, hostname, family):
        key = (hostname.rstrip("."), family)
        self.queries.append(key)
        answer = self.answers.get(key)
        if isinstance(answer, Exception):
            raise answer
        return answer


@pytest.fixture()
def fake_lookup():
    """Returns a factory building FakeLookup instances."""

    def _make(answers=None, nameservers=("192.0.2.53",)):
        return FakeLookup(answers, nameservers)

    return _make


@pytest.fixture()
def failing_lookup():
    """A FakeLookup whose every query fails with a DNS error."""

    class _Failing(FakeLookup):
        async def lookup(self, hostname, family):
            self.queries.append((hostname.rstrip("."), family))
            raise DnsLookupError("SERVFAIL")

    return _Failing()
