"""Spotify Web API and Accounts service adapters (httpx)."""

from music_conductor.infrastructure.spotify.accounts_client import SpotifyAccountsClient
from music_conductor.infrastructure.spotify.catalog_client import SpotifyCatalogClient

__all__ = [
    "SpotifyAccountsClient",
    "SpotifyCatalogClient",
]
