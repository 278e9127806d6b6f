"""Base identity provider interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from smart_workflow.core.types import IdentityRecord


class IdentityProvider(ABC):
    """Fact source for "is this email registered, and with which role?".

    Implementations wrap whatever owns sign-in (a hosted auth service, a
    directory, a fixture for tests). The service never creates or deletes
    identities through this interface.

    Example:
        ```python
        class HostedAuthProvider(IdentityProvider):
            async def lookup(self, email: str) -> IdentityRecord | None:
                account = await auth_client.get_user_by_email(email)
                if account is None:
                    return None
                return IdentityRecord(email=account.email)
        ```
    """

    @abstractmethod
    async def lookup(self, email: str) -> IdentityRecord | None:
        """Return the identity registered for *email*, or ``None``.

        Raises:
            CollaboratorError: If the provider cannot be reached
        """


__all__ = ["IdentityProvider"]
