"""Credential Store - the per-user credential table and its locks."""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from typing import TYPE_CHECKING

from ...domain.auth.entities import Credential, RefreshFailures
from ...domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ...domain.auth.repository import CredentialRepository

logger = logging.getLogger(__name__)


class CredentialStore:
    """Keyed map of user id to Credential.

    The in-memory table is authoritative while the process runs. When a
    repository is supplied, entries are loaded from it on first use and every
    write goes through to it so links survive restarts.

    Entries are only ever replaced whole. Each user also gets an
    ``asyncio.Lock`` that the token service holds across a refresh call, and a
    counter of consecutive refresh failures.
    """

    def __init__(self, repository: CredentialRepository | None = None) -> None:
        self._repository = repository
        self._credentials: dict[str, Credential] = {}
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._failures: dict[str, RefreshFailures] = {}

    def lock_for(self, user_id: str) -> asyncio.Lock:
        return self._locks[user_id]

    async def get(self, user_id: str) -> Credential | None:
        credential = self._credentials.get(user_id)
        if credential is not None or self._repository is None:
            return credential

        credential = await self._repository.get(user_id)
        if credential is not None:
            # A concurrent put may have won while the repository was read.
            credential = self._credentials.setdefault(user_id, credential)
            logger.debug(LogTemplates.CREDENTIAL_LOADED, user_id)
        return credential

    async def put(self, credential: Credential) -> None:
        self._credentials[credential.user_id] = credential
        if self._repository is not None:
            await self._repository.save(credential)
        logger.debug(
            LogTemplates.CREDENTIAL_STORED, credential.user_id, credential.expires_at.isoformat()
        )

    async def remove(self, user_id: str) -> bool:
        removed = self._credentials.pop(user_id, None) is not None
        if self._repository is not None:
            removed = await self._repository.delete(user_id) or removed
        self._failures.pop(user_id, None)
        if removed:
            logger.info(LogTemplates.CREDENTIAL_REMOVED, user_id)
        return removed

    async def contains(self, user_id: str) -> bool:
        return await self.get(user_id) is not None

    # === Refresh failure bookkeeping ===

    def failures(self, user_id: str) -> RefreshFailures:
        return self._failures.get(user_id, RefreshFailures())

    def record_refresh_failure(self, user_id: str, error: str) -> RefreshFailures:
        failures = self.failures(user_id).record(error)
        self._failures[user_id] = failures
        return failures

    def reset_refresh_failures(self, user_id: str) -> None:
        self._failures.pop(user_id, None)

    def __len__(self) -> int:
        return len(self._credentials)
