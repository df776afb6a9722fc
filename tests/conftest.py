from __future__ import annotations

import asyncio
from datetime import timedelta

import pytest
import pytest_asyncio

from music_conductor.application.interfaces.authorization_server import AuthorizationServer
from music_conductor.application.interfaces.catalog_client import CatalogClient
from music_conductor.domain.auth.entities import Credential, ProviderProfile, TokenGrant
from music_conductor.domain.catalog.entities import (
    AlbumTrack,
    DeviceState,
    NowPlaying,
    PlaybackIntent,
    PlaylistSummary,
    SearchResult,
)
from music_conductor.domain.shared.datetime_utils import utcnow

# ============================================================================
# Database Fixtures
# ============================================================================


@pytest_asyncio.fixture
async def in_memory_database():
    """Create an in-memory SQLite database for testing."""
    from music_conductor.infrastructure.persistence.database import Database

    db = Database(":memory:")
    await db.initialize()
    yield db
    await db.close()


@pytest_asyncio.fixture
async def credential_repository(in_memory_database):
    """Create a credential repository with in-memory database."""
    from music_conductor.infrastructure.persistence.repositories.credential_repository import (
        SQLiteCredentialRepository,
    )

    return SQLiteCredentialRepository(in_memory_database)


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture
def spotify_settings():
    from music_conductor.config.settings import SpotifySettings

    return SpotifySettings(client_id="client-id", client_secret="client-secret")


@pytest.fixture
def token_settings():
    from music_conductor.config.settings import TokenSettings

    return TokenSettings()


@pytest.fixture
def playback_settings():
    from music_conductor.config.settings import PlaybackSettings

    return PlaybackSettings()


# ============================================================================
# Domain Entity Fixtures
# ============================================================================


def make_credential(
    user_id: str = "user-1",
    *,
    access_token: str = "access-old",
    refresh_token: str = "refresh-old",
    expires_in: timedelta = timedelta(hours=1),
) -> Credential:
    return Credential(
        user_id=user_id,
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=utcnow() + expires_in,
    )


def make_search_result(
    uri: str,
    title: str,
    *,
    artist: str = "Itzhak Perlman",
    album_id: str | None = "album-1",
    album_name: str = "Brahms: Violin Sonatas",
    index: int = 0,
) -> SearchResult:
    return SearchResult(
        uri=uri,
        title=title,
        artist_name=artist,
        all_artists=(artist,),
        album_id=album_id,
        album_name=album_name,
        album_track_index=index,
    )


def make_album(titles: list[str], *, disc_number: int = 1) -> list[AlbumTrack]:
    return [
        AlbumTrack(
            uri=f"spotify:track:t{i}", title=title, track_index=i, disc_number=disc_number
        )
        for i, title in enumerate(titles)
    ]


@pytest.fixture
def sample_credential():
    return make_credential()


# ============================================================================
# Fakes
# ============================================================================


class FakeAuthorizationServer(AuthorizationServer):
    """Token endpoint double that records calls and can be scripted to fail."""

    def __init__(self) -> None:
        self.refresh_calls: list[str] = []
        self.exchange_calls: list[tuple[str, str]] = []
        self.refresh_errors: list[Exception] = []
        self.refresh_delay = 0.0
        self.rotate_refresh_token = False
        self._counter = 0

    def authorization_url(self, state: str, redirect_uri: str) -> str:
        return f"https://accounts.example/authorize?state={state}&redirect_uri={redirect_uri}"

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenGrant:
        self.exchange_calls.append((code, redirect_uri))
        return TokenGrant(access_token=f"access-{code}", refresh_token=f"refresh-{code}")

    async def refresh(self, refresh_token: str) -> TokenGrant:
        self.refresh_calls.append(refresh_token)
        if self.refresh_delay:
            await asyncio.sleep(self.refresh_delay)
        if self.refresh_errors:
            raise self.refresh_errors.pop(0)
        self._counter += 1
        return TokenGrant(
            access_token=f"access-new-{self._counter}",
            refresh_token=f"refresh-new-{self._counter}" if self.rotate_refresh_token else None,
            expires_in=3600,
        )


class FakeCatalogClient(CatalogClient):
    """In-memory catalog and player."""

    def __init__(self) -> None:
        self.search_results: list[SearchResult] = []
        self.album_tracks: dict[str, list[AlbumTrack]] = {}
        self.playlists: list[PlaylistSummary] = []
        self.devices: list[DeviceState] = []
        self.now_playing = NowPlaying.inactive()
        self.profile = ProviderProfile(user_id="spotify-user", display_name="Spotify User")
        self.played: list[PlaybackIntent] = []
        self.created: list[tuple[str, str, bool]] = []
        self.calls: list[tuple[str, str]] = []
        # Errors raised (and consumed) by the next call to the named method.
        self.errors: dict[str, list[Exception]] = {}

    def _record(self, name: str, token: str) -> None:
        self.calls.append((name, token))
        pending = self.errors.get(name)
        if pending:
            raise pending.pop(0)

    async def search_tracks(self, access_token, query, limit=15):
        self._record("search_tracks", access_token)
        return list(self.search_results[:limit])

    async def get_album_tracks(self, access_token, album_id, limit=50):
        self._record("get_album_tracks", access_token)
        return list(self.album_tracks.get(album_id, []))

    async def get_playlists(self, access_token, limit=50):
        self._record("get_playlists", access_token)
        return list(self.playlists)

    async def create_playlist(self, access_token, name, description="", *, public=False):
        self._record("create_playlist", access_token)
        self.created.append((name, description, public))
        playlist = PlaylistSummary(playlist_id=f"new-{len(self.created)}", name=name)
        self.playlists.append(playlist)
        return playlist

    async def get_devices(self, access_token):
        self._record("get_devices", access_token)
        return list(self.devices)

    async def get_playback_state(self, access_token):
        self._record("get_playback_state", access_token)
        return self.now_playing

    async def play(self, access_token, intent):
        self._record("play", access_token)
        self.played.append(intent)

    async def pause(self, access_token):
        self._record("pause", access_token)

    async def resume(self, access_token):
        self._record("resume", access_token)

    async def next_track(self, access_token):
        self._record("next_track", access_token)

    async def previous_track(self, access_token):
        self._record("previous_track", access_token)

    async def set_volume(self, access_token, volume_percent):
        self._record("set_volume", access_token)
        self.volume = volume_percent

    async def transfer_playback(self, access_token, device_id, *, play=True):
        self._record("transfer_playback", access_token)
        self.transferred_to = device_id

    async def get_profile(self, access_token):
        self._record("get_profile", access_token)
        return self.profile


@pytest.fixture
def fake_auth_server():
    return FakeAuthorizationServer()


@pytest.fixture
def fake_catalog():
    return FakeCatalogClient()


@pytest.fixture
def credential_store():
    from music_conductor.application.services.credential_store import CredentialStore

    return CredentialStore()


@pytest.fixture
def token_manager(credential_store, fake_auth_server, fake_catalog, spotify_settings, token_settings):
    from music_conductor.application.services.token_service import TokenLifecycleManager

    return TokenLifecycleManager(
        store=credential_store,
        authorization_server=fake_auth_server,
        spotify_settings=spotify_settings,
        token_settings=token_settings,
        catalog_client=fake_catalog,
    )
