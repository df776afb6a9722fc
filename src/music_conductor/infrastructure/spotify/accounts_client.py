"""Spotify Accounts service adapter for the OAuth2 token endpoint."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING
from urllib.parse import urlencode

import httpx
from pydantic import ValidationError as PydanticValidationError

from music_conductor.application.interfaces.authorization_server import AuthorizationServer
from music_conductor.domain.auth.entities import TokenGrant
from music_conductor.domain.shared.constants import GrantTypes, SpotifyEndpoints
from music_conductor.domain.shared.exceptions import (
    AuthExchangeError,
    AuthRefreshError,
    ProviderError,
)
from music_conductor.domain.shared.messages import ErrorMessages, LogTemplates
from music_conductor.infrastructure.spotify._http import error_detail, json_body

if TYPE_CHECKING:
    from ...config.settings import SpotifySettings

logger = logging.getLogger(__name__)


class SpotifyAccountsClient(AuthorizationServer):
    """Token endpoint client using HTTP Basic client authentication.

    The underlying ``httpx.AsyncClient`` is created on first use; pass
    ``transport`` to substitute an ``httpx.MockTransport`` in tests.
    """

    def __init__(
        self,
        settings: SpotifySettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._settings.accounts_base_url,
                auth=httpx.BasicAuth(
                    self._settings.client_id,
                    self._settings.client_secret.get_secret_value(),
                ),
                timeout=httpx.Timeout(self._settings.request_timeout_s),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        query = urlencode(
            {
                "client_id": self._settings.client_id,
                "response_type": "code",
                "redirect_uri": redirect_uri,
                "scope": self._settings.scope,
                "state": state,
                "show_dialog": "true",
            }
        )
        return f"{self._settings.accounts_base_url}{SpotifyEndpoints.AUTHORIZE}?{query}"

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenGrant:
        form = {
            "grant_type": GrantTypes.AUTHORIZATION_CODE,
            "code": code,
            "redirect_uri": redirect_uri,
        }
        try:
            return await self._post_token(form)
        except _TokenEndpointError as exc:
            raise AuthExchangeError(
                ErrorMessages.TOKEN_EXCHANGE_FAILED.format(status=exc.status, detail=exc.detail)
                if exc.status is not None
                else exc.detail,
                status_code=exc.status,
            ) from exc

    async def refresh(self, refresh_token: str) -> TokenGrant:
        form = {"grant_type": GrantTypes.REFRESH_TOKEN, "refresh_token": refresh_token}
        try:
            return await self._post_token(form)
        except _TokenEndpointError as exc:
            raise AuthRefreshError(
                ErrorMessages.TOKEN_REFRESH_FAILED.format(status=exc.status, detail=exc.detail)
                if exc.status is not None
                else exc.detail,
                status_code=exc.status,
            ) from exc

    async def _post_token(self, form: dict[str, str]) -> TokenGrant:
        grant_type = form["grant_type"]
        logger.debug(LogTemplates.HTTP_REQUEST, "POST", f"{SpotifyEndpoints.TOKEN} ({grant_type})")
        try:
            response = await self._get_client().post(SpotifyEndpoints.TOKEN, data=form)
        except httpx.HTTPError as exc:
            logger.warning(LogTemplates.HTTP_TRANSPORT_ERROR, "POST", SpotifyEndpoints.TOKEN, exc)
            raise _TokenEndpointError(
                None, ErrorMessages.TOKEN_ENDPOINT_UNREACHABLE.format(detail=exc)
            ) from exc

        if not response.is_success:
            detail, _ = error_detail(response)
            logger.warning(
                LogTemplates.HTTP_ERROR, "POST", SpotifyEndpoints.TOKEN, response.status_code, detail
            )
            raise _TokenEndpointError(response.status_code, detail)

        try:
            payload = json_body(response)
        except ProviderError as exc:
            raise _TokenEndpointError(response.status_code, exc.message) from exc
        if not payload:
            raise _TokenEndpointError(None, ErrorMessages.EMPTY_TOKEN_RESPONSE)
        if not payload.get("access_token"):
            raise _TokenEndpointError(None, ErrorMessages.MISSING_ACCESS_TOKEN)

        try:
            return TokenGrant.model_validate(payload)
        except PydanticValidationError as exc:
            raise _TokenEndpointError(response.status_code, str(exc)) from exc


class _TokenEndpointError(Exception):
    def __init__(self, status: int | None, detail: str) -> None:
        super().__init__(detail)
        self.status = status
        self.detail = detail
