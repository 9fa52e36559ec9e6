"""Time authority port.

Every time-based decision in the plan core (deadline sweep, RSVP cutoff,
past-event checks) reads the clock through this interface. Production
code never reads the wall clock directly;
scripts/check_no_datetime_now.py enforces that.

Tests inject FakeTimeAuthority from tests/helpers/fake_time_authority.py,
and every sweep entry point also accepts an explicit ``as_of`` instant.
"""

from abc import ABC, abstractmethod
from datetime import datetime


class TimeAuthorityProtocol(ABC):
    """Where services get "now" from.

    Services keep the authority as ``self._time`` and read it once per
    operation, so one mutation sees a single consistent instant.
    """

    @abstractmethod
    def utcnow(self) -> datetime:
        """Current instant in UTC, timezone-aware."""

    @abstractmethod
    def monotonic(self) -> float:
        """Seconds on a clock that never goes backwards.

        Only differences are meaningful; the deadline monitor uses them to
        pace its loop.
        """
