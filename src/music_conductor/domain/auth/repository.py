"""
Credential Repository Interface

Abstract base class for credential persistence. Implementations live in
the infrastructure layer.
"""

from abc import ABC, abstractmethod

from music_conductor.domain.auth.entities import Credential


class CredentialRepository(ABC):
    """Abstract repository for linked-account credentials.

    The in-process CredentialStore is the source of truth while running;
    a repository only makes links survive restarts.
    """

    @abstractmethod
    async def get(self, user_id: str) -> Credential | None:
        """Retrieve the credential for a user.

        Args:
            user_id: The opaque application user id.

        Returns:
            The credential if the user is linked, None otherwise.
        """
        ...

    @abstractmethod
    async def save(self, credential: Credential) -> None:
        """Insert or replace a credential."""
        ...

    @abstractmethod
    async def delete(self, user_id: str) -> bool:
        """Delete a credential.

        Returns:
            True if a credential was removed.
        """
        ...

    @abstractmethod
    async def list_user_ids(self) -> list[str]:
        ...
