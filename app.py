"""
app.py

Responsibility: Command-line entry point. Loads the configuration, configures
logging, runs one reconciliation pass over every configured domain, and maps
the result to a process exit code.
Does NOT: contain reconciliation logic or provider specifics; collaborators
are built in dependencies.py.

Usage:
    ddns-sync [-c CONFIG]

Exit codes:
    0  every record was updated, already current or missing
    1  a record failed, the configuration was invalid, or (without a
       configuration) the WAN address could not be resolved
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

import httpx

from config import AppConfig, load_config
from dependencies import build_ip_resolver, build_jobs, build_orchestrator
from exceptions import ConfigLoadError, IpFetchError
from logger import configure_logging
from models import AddressFamily
from services.address_cache import AddressCache

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ddns-sync",
        description="Keep DNS records at your providers pointed at this host's WAN address.",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="path to the TOML configuration file; without one the WAN IPv4 address is only printed",
    )
    return parser.parse_args(argv)


async def run(config: AppConfig) -> int:
    """
    Runs one pass for ``config`` and returns the exit code.

    A single httpx.AsyncClient is shared by the resolver and every provider
    client for the duration of the run.
    """
    async with httpx.AsyncClient(timeout=config.timeout) as http_client:
        address_cache = AddressCache(build_ip_resolver(config, http_client))

        if not config.domains:
            try:
                resolved = await address_cache.get(AddressFamily.IPV4)
            except IpFetchError as exc:
                logger.error("could not resolve WAN address: %s", exc)
                return EXIT_FAILURE
            logger.info("resolved address to %s", resolved.ip)
            return EXIT_OK

        orchestrator = build_orchestrator(address_cache)
        summary = await orchestrator.run(build_jobs(config, http_client))

    return EXIT_FAILURE if summary.has_failures else EXIT_OK


def main(argv: list[str] | None = None) -> int:
    """
    Parses arguments, loads configuration and runs the reconciliation.

    Returns:
        The process exit code.
    """
    args = parse_args(argv)

    if args.config:
        try:
            config = load_config(args.config)
        except ConfigLoadError as exc:
            # The configured level is unknown here; make sure the error is seen.
            configure_logging("warn")
            logger.error("could not load configuration from %s: %s", args.config, exc)
            return EXIT_FAILURE
    else:
        config = AppConfig()

    configure_logging(config.log.level)
    return asyncio.run(run(config))


def cli() -> None:
    sys.exit(main())


if __name__ == "__main__":
    cli()
