"""
tests/unit/test_dependencies.py

Unit tests for dependencies.py: every configured provider type must map to
its client, wired with the domain's credentials and settings.
"""

from __future__ import annotations

import pytest

from config import parse_config
from dependencies import build_ip_resolver, build_jobs, build_lookup, build_provider
from providers.cloudflare_client import CloudflareClient
from providers.dynu_client import DynuClient
from providers.godaddy_client import GoDaddyClient
from providers.he_client import HeClient
from providers.namecheap_client import NamecheapClient
from providers.noip_client import NoIpClient
from providers.porkbun_client import PorkbunClient
from services.ip_service import HttpIpResolver, OpenDnsIpResolver

_ALL_PROVIDERS = """
[[domains]]
type = "cloudflare"
token = "t"
zone = "example.com"
records = ["@"]

[[domains]]
type = "godaddy"
key = "k"
secret = "s"
domain = "example.com"
records = ["@"]

[[domains]]
type = "namecheap"
domain = "example.com"
ddns_password = "p"
records = ["@"]

[[domains]]
type = "he"
hostname = "example.com"
password = "p"
records = ["@"]

[[domains]]
type = "noip"
username = "u"
password = "p"
hostname = "home.ddns.net"

[[domains]]
type = "dynu"
hostname = "home.dynu.net"
username = "u"
password = "p"
records = ["@"]

[[domains]]
type = "porkbun"
domain = "example.com"
key = "k"
secret = "s"
records = ["@"]
"""


@pytest.mark.asyncio
async def test_every_provider_type_has_a_client(http_client):
    config = parse_config(_ALL_PROVIDERS, {})

    jobs = build_jobs(config, http_client)

    assert [type(job.provider) for job in jobs] == [
        CloudflareClient,
        GoDaddyClient,
        NamecheapClient,
        HeClient,
        NoIpClient,
        DynuClient,
        PorkbunClient,
    ]
    assert [job.config for job in jobs] == config.domains


@pytest.mark.asyncio
async def test_cloudflare_prefers_token(http_client):
    config = parse_config(
        '[[domains]]\ntype = "cloudflare"\ntoken = "tok"\nemail = "e"\nkey = "k"\nzone = "example.com"\n', {}
    )

    client = build_provider(config.domains[0], http_client, build_lookup(1.0))

    assert client._headers["Authorization"] == "Bearer tok"
    assert "X-Auth-Key" not in client._headers


@pytest.mark.asyncio
async def test_base_url_override_reaches_client(http_client):
    config = parse_config(
        '[[domains]]\ntype = "porkbun"\nbase_url = "http://localhost:8080/"\n'
        'domain = "example.com"\nkey = "k"\nsecret = "s"\n',
        {},
    )

    client = build_provider(config.domains[0], http_client, build_lookup(1.0))

    assert client._base == "http://localhost:8080"


@pytest.mark.asyncio
async def test_ip_resolver_selection(http_client):
    assert isinstance(build_ip_resolver(parse_config('ip_resolver = "ipify"', {}), http_client), HttpIpResolver)
    assert isinstance(build_ip_resolver(parse_config("", {}), http_client), OpenDnsIpResolver)


def test_lookup_uses_cloudflare_dns():
    assert build_lookup(3.0).nameservers == ("1.1.1.1", "1.0.0.1")
