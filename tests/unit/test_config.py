"""
tests/unit/test_config.py

Unit tests for config.py: environment templating, TOML parsing and
validation of every provider's domain entry.
"""

from __future__ import annotations

import logging

import pytest

from config import (
    AppConfig,
    CloudflareConfig,
    DynuConfig,
    GoDaddyConfig,
    NoIpConfig,
    PorkbunConfig,
    load_config,
    parse_config,
    render_template,
)
from exceptions import ConfigLoadError
from models import AddressFamily
from providers.godaddy_client import GODADDY_BASE

# ---------------------------------------------------------------------------
# Templating
# ---------------------------------------------------------------------------


def test_render_template_substitutes_environment():
    text = 'token = "{{ CF_TOKEN }}"\n'

    assert render_template(text, {"CF_TOKEN": "abc"}) == 'token = "abc"\n'


def test_render_template_rejects_undefined_variable():
    with pytest.raises(ConfigLoadError, match="MISSING_VAR"):
        render_template('token = "{{ MISSING_VAR }}"', {})


def test_render_template_leaves_plain_text_untouched():
    text = 'ip_resolver = "ipify"\n'

    assert render_template(text, {}) == text


def test_render_template_reads_process_environment(monkeypatch):
    monkeypatch.setenv("DDNS_TEST_TOKEN", "from-env")

    assert render_template("{{ DDNS_TEST_TOKEN }}") == "from-env"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------


def test_empty_config_uses_defaults():
    config = parse_config("", {})

    assert config == AppConfig()
    assert config.ip_resolver == "opendns"
    assert config.timeout == 10.0
    assert config.log.level == "info"
    assert config.domains == []


def test_top_level_settings_are_parsed():
    config = parse_config('ip_resolver = "ipify"\ntimeout = 2.5\n[log]\nlevel = "DEBUG"\n', {})

    assert config.ip_resolver == "ipify"
    assert config.timeout == 2.5
    assert config.log.level == "debug"


@pytest.mark.parametrize(
    "text",
    [
        'ip_resolver = "whatismyip"',
        "timeout = 0",
        '[log]\nlevel = "loud"',
        'surprise = "field"',
    ],
)
def test_invalid_settings_are_rejected(text):
    with pytest.raises(ConfigLoadError, match="invalid configuration"):
        parse_config(text, {})


def test_malformed_toml_is_rejected():
    with pytest.raises(ConfigLoadError, match="parsing error"):
        parse_config("[[domains]\n", {})


# ---------------------------------------------------------------------------
# Domains
# ---------------------------------------------------------------------------

_CLOUDFLARE = """
[[domains]]
type = "cloudflare"
token = "{{ CF_TOKEN }}"
zone = "Example.com."
records = ["@", "n", "n", "*"]
ip_types = [4, "6"]
"""


def test_cloudflare_domain():
    config = parse_config(_CLOUDFLARE, {"CF_TOKEN": "tok"})

    (domain,) = config.domains
    assert isinstance(domain, CloudflareConfig)
    assert domain.token == "tok"
    assert domain.zone == "example.com"
    assert domain.record_names == ["@", "n", "*"]
    assert domain.families == [AddressFamily.IPV4, AddressFamily.IPV6]
    assert domain.display_name == "example.com (cloudflare)"


def test_cloudflare_zone_is_derived_from_records():
    config = parse_config(
        '[[domains]]\ntype = "cloudflare"\ntoken = "t"\nrecords = ["n.example.co.uk", "example.co.uk"]\n', {}
    )

    assert config.domains[0].zone == "example.co.uk"


def test_cloudflare_accepts_email_and_key():
    config = parse_config(
        '[[domains]]\ntype = "cloudflare"\nemail = "me@example.com"\nkey = "k"\nzone = "example.com"\n', {}
    )

    domain = config.domains[0]
    assert (domain.token, domain.email, domain.key) == (None, "me@example.com", "k")


def test_cloudflare_empty_token_counts_as_missing():
    with pytest.raises(ConfigLoadError, match="missing either token or email"):
        parse_config('[[domains]]\ntype = "cloudflare"\ntoken = ""\nzone = "example.com"\n', {})


def test_cloudflare_warns_when_token_and_key_given(caplog):
    with caplog.at_level(logging.WARNING):
        parse_config(
            '[[domains]]\ntype = "cloudflare"\ntoken = "t"\nemail = "e"\nkey = "k"\nzone = "example.com"\n', {}
        )

    assert "ignoring email and key" in caplog.text


def test_cloudflare_without_zone_or_records_is_rejected():
    with pytest.raises(ConfigLoadError, match="needs a zone"):
        parse_config('[[domains]]\ntype = "cloudflare"\ntoken = "t"\n', {})


def test_godaddy_domain_defaults():
    config = parse_config(
        '[[domains]]\ntype = "godaddy"\nkey = "k"\nsecret = "s"\ndomain = "example.com"\nrecords = ["@"]\n', {}
    )

    domain = config.domains[0]
    assert isinstance(domain, GoDaddyConfig)
    assert domain.base_url == GODADDY_BASE
    assert domain.families == [AddressFamily.IPV4]


def test_namecheap_rejects_ipv6():
    text = (
        '[[domains]]\ntype = "namecheap"\ndomain = "example.com"\nddns_password = "p"\n'
        'records = ["@"]\nip_types = ["4", "6"]\n'
    )

    with pytest.raises(ConfigLoadError, match="only supports IPv4"):
        parse_config(text, {})


def test_noip_manages_its_hostname_only():
    config = parse_config(
        '[[domains]]\ntype = "noip"\nusername = "u"\npassword = "p"\nhostname = "Home.ddns.net"\n', {}
    )

    domain = config.domains[0]
    assert isinstance(domain, NoIpConfig)
    assert domain.zone == "home.ddns.net"
    assert domain.record_names == ["@"]


def test_noip_rejects_records():
    with pytest.raises(ConfigLoadError, match="remove the records field"):
        parse_config(
            '[[domains]]\ntype = "noip"\nusername = "u"\npassword = "p"\nhostname = "h.ddns.net"\nrecords = ["x"]\n',
            {},
        )


def test_each_provider_type_is_selected_by_tag():
    text = """
[[domains]]
type = "dynu"
hostname = "home.dynu.net"
username = "u"
password = "p"
records = ["@"]

[[domains]]
type = "porkbun"
domain = "example.com"
key = "pk"
secret = "sk"
records = ["www"]

[[domains]]
type = "he"
hostname = "example.com"
password = "p"
records = ["@"]
"""
    config = parse_config(text, {})

    assert [d.kind for d in config.domains] == ["dynu", "porkbun", "he"]
    assert isinstance(config.domains[0], DynuConfig)
    assert isinstance(config.domains[1], PorkbunConfig)


def test_unknown_provider_type_is_rejected():
    with pytest.raises(ConfigLoadError):
        parse_config('[[domains]]\ntype = "route53"\n', {})


def test_unknown_domain_field_is_rejected():
    with pytest.raises(ConfigLoadError):
        parse_config(
            '[[domains]]\ntype = "porkbun"\ndomain = "example.com"\nkey = "k"\nsecret = "s"\nttl = 60\n', {}
        )


# ---------------------------------------------------------------------------
# load_config
# ---------------------------------------------------------------------------


def test_load_config_reads_file(tmp_path):
    path = tmp_path / "ddns.toml"
    path.write_text(_CLOUDFLARE, encoding="utf-8")

    config = load_config(path, {"CF_TOKEN": "tok"})

    assert config.domains[0].token == "tok"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigLoadError, match="file not found"):
        load_config(tmp_path / "absent.toml", {})
