"""Port interface for the provider's OAuth2 token endpoint."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from music_conductor.domain.shared.types import NonEmptyStr

if TYPE_CHECKING:
    from ...domain.auth.entities import TokenGrant


class AuthorizationServer(ABC):
    """Interface for the authorization-code and refresh-token grants."""

    @abstractmethod
    def authorization_url(self, state: str, redirect_uri: str) -> str:
        """Consent-page URL the user opens to grant delegated access."""
        ...

    @abstractmethod
    async def exchange_code(self, code: NonEmptyStr, redirect_uri: str) -> "TokenGrant":
        """Exchange an authorization code.

        Raises:
            AuthExchangeError: On a non-2xx response, a transport failure, or
                a response without an access token.
        """
        ...

    @abstractmethod
    async def refresh(self, refresh_token: NonEmptyStr) -> "TokenGrant":
        """Redeem a refresh token.

        Raises:
            AuthRefreshError: On a non-2xx response, a transport failure, or
                a response without an access token.
        """
        ...
