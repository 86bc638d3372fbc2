"""
services/address_cache.py

Responsibility: Memoizes the WAN address per address family for the
duration of one run so every domain observes the same value and each family
is resolved at most once.
Does NOT: persist anything between runs or retry failed resolutions.
"""

from __future__ import annotations

import asyncio
import logging
import time

from models import AddressFamily, ResolvedAddress
from services.ip_service import IpResolver

logger = logging.getLogger(__name__)


class AddressCache:
    """
    Single-assignment cell per AddressFamily.

    The first caller for a family starts the resolution task; every later
    or concurrent caller awaits that same task, so the underlying resolver
    is invoked exactly once per family. A failed resolution is memoized as
    well and re-raised to every caller.

    Collaborators:
        - IpResolver: the strategy selected by configuration
    """

    def __init__(self, resolver: IpResolver) -> None:
        self._resolver = resolver
        self._cells: dict[AddressFamily, asyncio.Task[ResolvedAddress]] = {}

    async def get(self, family: AddressFamily) -> ResolvedAddress:
        """
        Returns the resolved address for ``family``, resolving it on first use.

        Raises:
            IpFetchError: If resolution failed (for this and every later call).
        """
        cell = self._cells.get(family)
        if cell is None:
            # No await between the lookup and the assignment, so concurrent
            # first requesters cannot both get here.
            cell = asyncio.ensure_future(self._resolve(family))
            self._cells[family] = cell
        # NOTE: shield so one cancelled waiter cannot cancel the shared task.
        return await asyncio.shield(cell)

    async def _resolve(self, family: AddressFamily) -> ResolvedAddress:
        start = time.monotonic()
        ip = await self._resolver.resolve(family)
        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.info("resolved %s address to %s in %dms", family.label, ip, elapsed_ms)
        return ResolvedAddress(family=family, ip=ip)
