"""Token Lifecycle Service - hands out valid access tokens per user.

Access tokens are reused while they are more than the configured skew away
from expiry and refreshed synchronously otherwise. Concurrent callers
holding the same stale token share one in-flight refresh task and all see
its outcome, so a failed refresh is counted once against the retry budget.
Refreshes for one user are serialized on that user's store lock.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from ...domain.auth.entities import Credential
from ...domain.shared.exceptions import (
    AuthExchangeError,
    AuthRefreshError,
    IntegrationNotConfiguredError,
    NotLinkedError,
    ProviderError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from ...config.settings import SpotifySettings, TokenSettings
    from ..interfaces.authorization_server import AuthorizationServer
    from ..interfaces.catalog_client import CatalogClient
    from .credential_store import CredentialStore

logger = logging.getLogger(__name__)


class TokenLifecycleManager:
    """Links accounts and keeps each user's delegated access token valid."""

    def __init__(
        self,
        *,
        store: CredentialStore,
        authorization_server: AuthorizationServer,
        spotify_settings: SpotifySettings,
        token_settings: TokenSettings,
        catalog_client: CatalogClient | None = None,
    ) -> None:
        self._store = store
        self._auth = authorization_server
        self._spotify = spotify_settings
        self._skew = timedelta(seconds=token_settings.refresh_skew_seconds)
        self._retry_budget = token_settings.refresh_retry_budget
        self._catalog = catalog_client
        self._inflight: dict[tuple[str, str], asyncio.Task[Credential]] = {}

    @property
    def is_configured(self) -> bool:
        return self._spotify.is_configured

    @property
    def refresh_skew(self) -> timedelta:
        return self._skew

    def _ensure_configured(self) -> None:
        if not self.is_configured:
            raise IntegrationNotConfiguredError()

    # === Linking ===

    def authorization_url(self, state: str, redirect_uri: str | None = None) -> str:
        self._ensure_configured()
        return self._auth.authorization_url(state, redirect_uri or self._spotify.redirect_uri)

    async def exchange_code(
        self, user_id: str, code: str, redirect_uri: str | None = None
    ) -> Credential:
        """Redeem an authorization code and store the resulting credential.

        Raises:
            IntegrationNotConfiguredError: Client id/secret are missing.
            AuthExchangeError: The provider rejected the code or returned no
                usable token pair.
        """
        self._ensure_configured()
        grant = await self._auth.exchange_code(code, redirect_uri or self._spotify.redirect_uri)
        try:
            credential = grant.to_credential(user_id)
        except ValueError as exc:
            raise AuthExchangeError(str(exc)) from exc

        async with self._store.lock_for(user_id):
            await self._store.put(credential)
            self._store.reset_refresh_failures(user_id)
        return credential

    async def link_account(
        self, user_id: str, code: str, redirect_uri: str | None = None
    ) -> Credential:
        """Exchange ``code`` and record which provider account was linked.

        A failed profile lookup leaves the link in place without the provider
        user id.
        """
        credential = await self.exchange_code(user_id, code, redirect_uri)
        if self._catalog is None:
            return credential

        try:
            profile = await self._catalog.get_profile(credential.access_token)
        except ProviderError as exc:
            logger.warning(LogTemplates.OPERATION_FAILED, "Profile lookup", user_id, exc.message)
            return credential

        async with self._store.lock_for(user_id):
            current = await self._store.get(user_id)
            if current is None:
                return credential
            credential = current.with_provider_user(profile.user_id)
            await self._store.put(credential)
        logger.info(LogTemplates.ACCOUNT_LINKED, user_id, profile.user_id)
        return credential

    async def unlink(self, user_id: str) -> bool:
        async with self._store.lock_for(user_id):
            removed = await self._store.remove(user_id)
        if removed:
            logger.info(LogTemplates.ACCOUNT_UNLINKED, user_id)
        return removed

    async def is_linked(self, user_id: str) -> bool:
        return await self._store.contains(user_id)

    # === Token access ===

    async def valid_token(self, user_id: str, *, force_refresh: bool = False) -> str:
        """Return a usable access token for ``user_id``.

        Args:
            user_id: The opaque application user id.
            force_refresh: Refresh even if the cached token looks fresh, used
                after the provider rejected it with 401.

        Raises:
            IntegrationNotConfiguredError: Client id/secret are missing.
            NotLinkedError: No credential is stored, or the refresh retry
                budget was just exhausted and the user was unlinked.
            AuthRefreshError: A refresh failed but the budget allows retrying.
        """
        self._ensure_configured()
        credential = await self._store.get(user_id)
        if credential is None:
            raise NotLinkedError(user_id)

        if not force_refresh and credential.is_fresh(self._skew):
            logger.debug(LogTemplates.TOKEN_CACHE_HIT, user_id)
            return credential.access_token

        # Singleflight: callers holding the same stale token share one refresh
        key = (user_id, credential.access_token)
        task = self._inflight.get(key)
        if task is None or task.done():
            task = asyncio.ensure_future(self._refresh_if_stale(user_id, credential.access_token))
            self._inflight[key] = task
            task.add_done_callback(lambda done: self._forget_inflight(key, done))
        else:
            logger.debug(LogTemplates.TOKEN_REFRESH_JOINED, user_id)
        refreshed = await asyncio.shield(task)
        return refreshed.access_token

    async def _refresh_if_stale(self, user_id: str, stale_token: str) -> Credential:
        async with self._store.lock_for(user_id):
            current = await self._store.get(user_id)
            if current is None:
                raise NotLinkedError(user_id)
            if current.access_token != stale_token and current.is_fresh(self._skew):
                logger.debug(LogTemplates.TOKEN_REFRESH_REUSED, user_id)
                return current
            return await self._refresh_locked(current)

    def _forget_inflight(self, key: tuple[str, str], task: asyncio.Task[Credential]) -> None:
        if self._inflight.get(key) is task:
            del self._inflight[key]
        if not task.cancelled():
            task.exception()

    async def refresh(self, credential: Credential) -> Credential:
        """Refresh ``credential`` unconditionally and store the result."""
        self._ensure_configured()
        async with self._store.lock_for(credential.user_id):
            return await self._refresh_locked(credential)

    async def _refresh_locked(self, credential: Credential) -> Credential:
        user_id = credential.user_id
        logger.debug(LogTemplates.TOKEN_REFRESHING, user_id)
        try:
            grant = await self._auth.refresh(credential.refresh_token)
        except AuthRefreshError as exc:
            failures = self._store.record_refresh_failure(user_id, exc.message)
            logger.warning(
                LogTemplates.TOKEN_REFRESH_FAILED,
                user_id,
                failures.count,
                self._retry_budget,
                exc.message,
            )
            if failures.exhausted(self._retry_budget):
                logger.warning(LogTemplates.TOKEN_REFRESH_BUDGET_EXHAUSTED, user_id)
                await self._store.remove(user_id)
                raise NotLinkedError(
                    user_id,
                    ErrorMessages.REFRESH_BUDGET_EXHAUSTED.format(
                        failures=failures.count, user_id=user_id
                    ),
                    revoked=True,
                ) from exc
            raise

        refreshed = credential.refreshed_with(grant)
        await self._store.put(refreshed)
        self._store.reset_refresh_failures(user_id)
        logger.info(LogTemplates.TOKEN_REFRESHED, user_id, refreshed.expires_at.isoformat())
        return refreshed
