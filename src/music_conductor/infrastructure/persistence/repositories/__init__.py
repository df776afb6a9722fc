"""SQLite repository implementations."""

from music_conductor.infrastructure.persistence.repositories.credential_repository import (
    SQLiteCredentialRepository,
)

__all__ = [
    "SQLiteCredentialRepository",
]
