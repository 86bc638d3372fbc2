"""
config.py

Responsibility: Loads the TOML configuration file, substitutes environment
variables into it, and validates it into typed, immutable models.
Does NOT: open network connections or build provider clients (see
dependencies.py).

Environment variables are referenced with template syntax, e.g.
``token = "{{ MY_CLOUDFLARE_TOKEN }}"``; an undefined variable is an error.
"""

from __future__ import annotations

import logging
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Annotated, Any, Literal, Union

import jinja2
import tldextract
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from exceptions import ConfigLoadError
from models import AddressFamily
from providers.dns_provider import normalize_name
from providers.dynu_client import DYNU_BASE
from providers.godaddy_client import GODADDY_BASE
from providers.he_client import HE_BASE
from providers.namecheap_client import NAMECHEAP_BASE
from providers.noip_client import NOIP_BASE
from providers.porkbun_client import PORKBUN_BASE

logger = logging.getLogger(__name__)

LOG_LEVELS = ("off", "error", "warn", "warning", "info", "debug", "trace")

# NOTE: an empty suffix_list_urls keeps tldextract on its bundled snapshot of
# the public suffix list; no HTTP fetch happens while loading configuration.
_extract = tldextract.TLDExtract(suffix_list_urls=())


class _Model(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class LogConfig(_Model):
    level: str = "info"

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.strip().lower()
        if value not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}, expected one of {', '.join(LOG_LEVELS)}")
        return value


class _DomainBase(_Model):
    """
    Fields and accessors shared by every provider's domain entry.

    Subclasses define ``type`` (the tag selecting the provider) and the
    provider's credentials.
    """

    records: list[str] = Field(default_factory=list)
    ip_types: list[AddressFamily] = Field(default_factory=lambda: [AddressFamily.IPV4])

    @field_validator("ip_types", mode="before")
    @classmethod
    def _coerce_ip_types(cls, value: Any) -> Any:
        # TOML allows both ip_types = ["4"] and ip_types = [4]
        if isinstance(value, list):
            return [str(v) if isinstance(v, int) else v for v in value]
        return value

    @property
    def kind(self) -> str:
        return self.type  # type: ignore[attr-defined]

    @property
    def zone(self) -> str:
        raise NotImplementedError

    @property
    def record_names(self) -> list[str]:
        """Configured record names, de-duplicated, in configuration order."""
        return list(dict.fromkeys(self.records))

    @property
    def families(self) -> list[AddressFamily]:
        return list(dict.fromkeys(self.ip_types))

    @property
    def display_name(self) -> str:
        return f"{self.zone} ({self.kind})"


class CloudflareConfig(_DomainBase):
    type: Literal["cloudflare"]
    token: str | None = None
    email: str | None = None
    key: str | None = None
    # The Cloudflare zone name; derived from the first record when omitted.
    zone_name: str | None = Field(default=None, alias="zone")

    model_config = ConfigDict(extra="forbid", frozen=True, populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _derive_zone(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = {k: (None if v == "" else v) for k, v in data.items()}
        if not data.get("zone") and not data.get("zone_name") and data.get("records"):
            ext = _extract(normalize_name(data["records"][0]).lstrip("*."))
            if ext.domain and ext.suffix:
                data["zone"] = f"{ext.domain}.{ext.suffix}"
        return data

    @model_validator(mode="after")
    def _check_credentials(self) -> CloudflareConfig:
        if not self.zone_name:
            raise ValueError("cloudflare domain needs a zone (or records to derive it from)")
        if not self.token and not (self.email and self.key):
            raise ValueError(
                f"missing either token or email + key in cloudflare config for zone: {self.zone_name}"
            )
        if self.token and (self.email or self.key):
            logger.warning(
                "ignoring email and key fields as token is already given for zone: %s",
                self.zone_name,
            )
        return self

    @property
    def zone(self) -> str:
        return normalize_name(self.zone_name or "")


class GoDaddyConfig(_DomainBase):
    type: Literal["godaddy"]
    base_url: str = GODADDY_BASE
    key: str
    secret: str
    domain: str

    @property
    def zone(self) -> str:
        return normalize_name(self.domain)


class NamecheapConfig(_DomainBase):
    type: Literal["namecheap"]
    base_url: str = NAMECHEAP_BASE
    domain: str
    ddns_password: str

    @field_validator("ip_types")
    @classmethod
    def _ipv4_only(cls, value: list[AddressFamily]) -> list[AddressFamily]:
        if any(family is not AddressFamily.IPV4 for family in value):
            raise ValueError("namecheap dynamic dns only supports IPv4 records")
        return value

    @property
    def zone(self) -> str:
        return normalize_name(self.domain)


class HeConfig(_DomainBase):
    type: Literal["he"]
    base_url: str = HE_BASE
    hostname: str
    password: str

    @property
    def zone(self) -> str:
        return normalize_name(self.hostname)


class NoIpConfig(_DomainBase):
    type: Literal["noip"]
    base_url: str = NOIP_BASE
    username: str
    password: str
    hostname: str

    @field_validator("records")
    @classmethod
    def _no_records(cls, value: list[str]) -> list[str]:
        if value:
            raise ValueError("noip manages only its hostname; remove the records field")
        return value

    @property
    def zone(self) -> str:
        return normalize_name(self.hostname)

    @property
    def record_names(self) -> list[str]:
        return ["@"]


class DynuConfig(_DomainBase):
    type: Literal["dynu"]
    base_url: str = DYNU_BASE
    hostname: str
    username: str
    password: str

    @property
    def zone(self) -> str:
        return normalize_name(self.hostname)


class PorkbunConfig(_DomainBase):
    type: Literal["porkbun"]
    base_url: str = PORKBUN_BASE
    domain: str
    key: str
    secret: str

    @property
    def zone(self) -> str:
        return normalize_name(self.domain)


DomainConfig = Annotated[
    Union[
        CloudflareConfig,
        GoDaddyConfig,
        NamecheapConfig,
        HeConfig,
        NoIpConfig,
        DynuConfig,
        PorkbunConfig,
    ],
    Field(discriminator="type"),
]


class AppConfig(_Model):
    ip_resolver: Literal["opendns", "ipify"] = "opendns"
    # Seconds allowed for each network call (resolution, fetch, update)
    timeout: float = Field(default=10.0, gt=0)
    log: LogConfig = Field(default_factory=LogConfig)
    domains: list[DomainConfig] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def render_template(text: str, env: Mapping[str, str] | None = None) -> str:
    """
    Substitutes ``{{ VAR }}`` references with values from ``env``.

    Raises:
        ConfigLoadError: If the template is malformed or references an
                         undefined variable.
    """
    environment = jinja2.Environment(
        undefined=jinja2.StrictUndefined,
        autoescape=False,
        keep_trailing_newline=True,
    )
    try:
        return environment.from_string(text).render(dict(os.environ if env is None else env))
    except jinja2.UndefinedError as exc:
        raise ConfigLoadError(f"config template rendering error: {exc.message}") from exc
    except jinja2.TemplateError as exc:
        raise ConfigLoadError(f"config template error: {exc}") from exc


def parse_config(text: str, env: Mapping[str, str] | None = None) -> AppConfig:
    """
    Renders, parses and validates configuration text.

    Raises:
        ConfigLoadError: On template, TOML or validation errors.
    """
    rendered = render_template(text, env)
    try:
        data = tomllib.loads(rendered)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigLoadError(f"a parsing error: {exc}") from exc

    try:
        return AppConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigLoadError(f"invalid configuration: {exc}") from exc


def load_config(path: str | Path, env: Mapping[str, str] | None = None) -> AppConfig:
    """
    Loads the configuration file at ``path``.

    Raises:
        ConfigLoadError: If the file cannot be read or is invalid.
    """
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigLoadError(f"file not found: {path}") from exc
    except OSError as exc:
        raise ConfigLoadError(f"unable to read file {path}: {exc}") from exc

    config = parse_config(text, env)
    logger.debug("Loaded %d domain(s) from %s", len(config.domains), path)
    return config
