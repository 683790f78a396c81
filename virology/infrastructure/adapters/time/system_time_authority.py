"""System clock implementation of TimeAuthorityProtocol.

This is the only module allowed to read the wall clock, the monotonic
clock and the event loop timer directly.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone

from virology.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """Time authority backed by the host clocks and asyncio.sleep."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        """Suspend the calling coroutine without blocking the event loop."""
        await asyncio.sleep(max(0.0, seconds))
