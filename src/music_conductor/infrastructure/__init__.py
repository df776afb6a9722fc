"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Persistence (SQLite credential repository)
- Spotify (Accounts and Web API adapters over httpx)
"""

from music_conductor.infrastructure.persistence.database import Database
from music_conductor.infrastructure.spotify.accounts_client import SpotifyAccountsClient
from music_conductor.infrastructure.spotify.catalog_client import SpotifyCatalogClient

__all__ = [
    "Database",
    "SpotifyAccountsClient",
    "SpotifyCatalogClient",
]
