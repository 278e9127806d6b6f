"""Identity lookup collaborators.

Credentials and sign-in belong to an external identity provider. The
service only asks it one question: does an account exist for this email?
"""

from smart_workflow.identity.base import IdentityProvider
from smart_workflow.identity.providers import (
    InMemoryIdentityProvider,
    UserDirectoryIdentityProvider,
)

__all__ = ["IdentityProvider", "InMemoryIdentityProvider", "UserDirectoryIdentityProvider"]
