"""User directory port.

Looks up display names used in notification text and invite snapshots.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID


class UserDirectoryProtocol(Protocol):
    """Protocol for user display-name lookups."""

    async def get_display_name(self, user_id: UUID) -> str | None:
        """Return the user's display name, or None if unknown.

        Implementations may raise on backend errors; callers fall back
        to a generic name.
        """
        ...
