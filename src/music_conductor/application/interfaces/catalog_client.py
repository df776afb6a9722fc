"""Port interface for the streaming provider's catalog and player API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from music_conductor.domain.shared.types import NonEmptyStr, PositiveInt, VolumePercent

if TYPE_CHECKING:
    from ...domain.auth.entities import ProviderProfile
    from ...domain.catalog.entities import (
        AlbumTrack,
        DeviceState,
        NowPlaying,
        PlaybackIntent,
        PlaylistSummary,
        SearchResult,
    )


class CatalogClient(ABC):
    """Interface for search, library and remote-player calls.

    Every call takes the caller's bearer token explicitly; the client holds
    no per-user state. Implementations raise ``ProviderError`` (or
    ``NoActiveDeviceError``) for non-2xx responses and transport failures.
    """

    @abstractmethod
    async def search_tracks(
        self, access_token: str, query: NonEmptyStr, limit: PositiveInt = 15
    ) -> list["SearchResult"]:
        """Search tracks, preserving the provider's result order."""
        ...

    @abstractmethod
    async def get_album_tracks(
        self, access_token: str, album_id: NonEmptyStr, limit: PositiveInt = 50
    ) -> list["AlbumTrack"]:
        """List an album's tracks in (disc, track) order."""
        ...

    @abstractmethod
    async def get_playlists(
        self, access_token: str, limit: PositiveInt = 50
    ) -> list["PlaylistSummary"]:
        ...

    @abstractmethod
    async def create_playlist(
        self,
        access_token: str,
        name: NonEmptyStr,
        description: str = "",
        *,
        public: bool = False,
    ) -> "PlaylistSummary":
        """Create an empty playlist owned by the linked account."""
        ...

    @abstractmethod
    async def get_devices(self, access_token: str) -> list["DeviceState"]:
        ...

    @abstractmethod
    async def get_playback_state(self, access_token: str) -> "NowPlaying":
        """Current player state; ``NowPlaying.inactive()`` when nothing is active."""
        ...

    @abstractmethod
    async def play(self, access_token: str, intent: "PlaybackIntent") -> None:
        ...

    @abstractmethod
    async def pause(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def resume(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def next_track(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def previous_track(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def set_volume(self, access_token: str, volume_percent: VolumePercent) -> None:
        ...

    @abstractmethod
    async def transfer_playback(
        self, access_token: str, device_id: NonEmptyStr, *, play: bool = True
    ) -> None:
        ...

    @abstractmethod
    async def get_profile(self, access_token: str) -> "ProviderProfile":
        """Identity of the linked provider account."""
        ...
