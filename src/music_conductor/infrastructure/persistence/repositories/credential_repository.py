"""SQLite implementation of the credential repository."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from music_conductor.domain.auth.entities import Credential
from music_conductor.domain.auth.repository import CredentialRepository
from music_conductor.domain.shared.constants import DatabaseTables
from music_conductor.domain.shared.datetime_utils import from_iso, to_iso, utcnow

if TYPE_CHECKING:
    from ..database import Database

logger = logging.getLogger(__name__)

_TABLE = DatabaseTables.CREDENTIALS


class SQLiteCredentialRepository(CredentialRepository):
    def __init__(self, database: Database) -> None:
        self._db = database

    async def get(self, user_id: str) -> Credential | None:
        row = await self._db.fetch_one(
            f"SELECT * FROM {_TABLE} WHERE user_id = ?",  # noqa: S608
            (user_id,),
        )
        if row is None:
            return None
        return self._row_to_credential(row)

    async def save(self, credential: Credential) -> None:
        await self._db.execute(
            f"""
            INSERT INTO {_TABLE} (
                user_id, access_token, refresh_token, expires_at,
                provider_user_id, scope, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                access_token = excluded.access_token,
                refresh_token = excluded.refresh_token,
                expires_at = excluded.expires_at,
                provider_user_id = excluded.provider_user_id,
                scope = excluded.scope,
                updated_at = excluded.updated_at
            """,  # noqa: S608
            (
                credential.user_id,
                credential.access_token,
                credential.refresh_token,
                to_iso(credential.expires_at),
                credential.provider_user_id,
                credential.scope,
                to_iso(utcnow()),
            ),
        )

    async def delete(self, user_id: str) -> bool:
        changed = await self._db.execute(
            f"DELETE FROM {_TABLE} WHERE user_id = ?",  # noqa: S608
            (user_id,),
        )
        return changed > 0

    async def list_user_ids(self) -> list[str]:
        rows = await self._db.fetch_all(
            f"SELECT user_id FROM {_TABLE} ORDER BY user_id ASC"  # noqa: S608
        )
        return [row["user_id"] for row in rows]

    @staticmethod
    def _row_to_credential(row: dict[str, Any]) -> Credential:
        return Credential(
            user_id=row["user_id"],
            access_token=row["access_token"],
            refresh_token=row["refresh_token"],
            expires_at=from_iso(row["expires_at"]),
            provider_user_id=row.get("provider_user_id"),
            scope=row.get("scope"),
        )
