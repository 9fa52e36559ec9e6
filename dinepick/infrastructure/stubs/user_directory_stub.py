"""User directory stub.

Serves display names from an in-memory map.
"""

from __future__ import annotations

from uuid import UUID

from dinepick.application.ports.user_directory import UserDirectoryProtocol


class UserDirectoryStub(UserDirectoryProtocol):
    """In-memory user directory.

    Attributes:
        _names: Map of user id to display name.
        fail_with: If set, lookups raise this exception.
    """

    def __init__(self, names: dict[UUID, str] | None = None) -> None:
        self._names: dict[UUID, str] = dict(names or {})
        self.fail_with: Exception | None = None

    async def get_display_name(self, user_id: UUID) -> str | None:
        if self.fail_with is not None:
            raise self.fail_with
        return self._names.get(user_id)

    def add_user(self, user_id: UUID, name: str) -> None:
        """Register a display name."""
        self._names[user_id] = name
