"""Time Authority Protocol - interface for injected time.

All services that need the current time, a monotonic clock, or a timed
suspension MUST inject a TimeAuthorityProtocol implementation instead of
calling datetime.now(), time.monotonic() or asyncio.sleep() directly.

This keeps expiry, throttling deadlines and latency floors deterministic
in tests:
    For production: SystemTimeAuthority from
        virology/infrastructure/adapters/time/system_time_authority.py
    For testing: FakeTimeAuthority from tests/helpers/fake_time_authority.py
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Abstract interface for time authority.

    Example usage:
        class MyService:
            def __init__(self, time_authority: TimeAuthorityProtocol) -> None:
                self._time = time_authority

            def process(self) -> None:
                now = self._time.utcnow()  # NOT datetime.now()
                ...
    """

    @abstractmethod
    def now(self) -> datetime:
        """Return current time with timezone awareness (UTC recommended)."""
        ...

    @abstractmethod
    def utcnow(self) -> datetime:
        """Return current UTC time.

        Returns:
            Current datetime in UTC timezone (always timezone-aware).
        """
        ...

    @abstractmethod
    def monotonic(self) -> float:
        """Return monotonic clock value for measuring elapsed time.

        Returns:
            Monotonically increasing float value (in seconds).

        Note:
            Use this for deadlines, not for timestamps. The reference
            point is arbitrary - only differences are meaningful.
        """
        ...

    @abstractmethod
    async def sleep(self, seconds: float) -> None:
        """Suspend the caller for the given number of seconds.

        Args:
            seconds: Non-negative duration to wait.
        """
        ...
