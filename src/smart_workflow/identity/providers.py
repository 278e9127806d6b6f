"""Identity provider implementations."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from smart_workflow.core.types import IdentityRecord, UserRole
from smart_workflow.identity.base import IdentityProvider

if TYPE_CHECKING:
    from collections.abc import Iterable

    from smart_workflow.core.types import User
    from smart_workflow.storage.record_store import Repository

logger = logging.getLogger(__name__)


class InMemoryIdentityProvider(IdentityProvider):
    """Fixed set of known identities (testing and development).

    Example:
        ```python
        identity = InMemoryIdentityProvider(["alice@example.com"])
        await identity.lookup("ALICE@example.com")   # IdentityRecord(...)
        ```
    """

    def __init__(self, emails: Iterable[str] = ()) -> None:
        self._records: dict[str, IdentityRecord] = {}
        for email in emails:
            self.add(email)

    def add(self, email: str, role: UserRole | None = None) -> IdentityRecord:
        record = IdentityRecord(email=email.strip().lower(), role=role)
        self._records[record.email] = record
        return record

    def remove(self, email: str) -> None:
        self._records.pop(email.strip().lower(), None)

    async def lookup(self, email: str) -> IdentityRecord | None:
        return self._records.get(email.strip().lower())


class UserDirectoryIdentityProvider(IdentityProvider):
    """Treat the local users collection as the identity directory.

    Used when no external provider is wired in: an email is registered
    exactly when a user record carries it.
    """

    def __init__(self, users: Repository[User]) -> None:
        self.users = users

    async def lookup(self, email: str) -> IdentityRecord | None:
        user = await self.users.find_one({"email": email.strip().lower()})
        if user is None:
            logger.debug("No identity for %s", email)
            return None
        return IdentityRecord(email=user.email, role=user.role)


__all__ = ["InMemoryIdentityProvider", "UserDirectoryIdentityProvider"]
