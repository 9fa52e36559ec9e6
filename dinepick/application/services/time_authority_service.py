"""Wall-clock time authority for production wiring."""

import time
from datetime import datetime, timezone

from dinepick.application.ports.time_authority import TimeAuthorityProtocol


class SystemTimeAuthority(TimeAuthorityProtocol):
    """TimeAuthorityProtocol backed by the system clock.

    The only place in the package allowed to read the wall clock.
    """

    def utcnow(self) -> datetime:
        return datetime.now(timezone.utc)

    def monotonic(self) -> float:
        return time.monotonic()
