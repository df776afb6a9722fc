"""Catalog value objects: search hits, album tracks, devices, and playback intents.

Everything here is ephemeral and recomputed per request.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from music_conductor.domain.shared.constants import SpotifyEndpoints
from music_conductor.domain.shared.messages import ErrorMessages
from music_conductor.domain.shared.types import (
    NonEmptyStr,
    NonNegativeInt,
    PositiveInt,
    TrackIndex,
    VolumePercent,
)


class AlbumTrack(BaseModel):
    """One entry of an album listing, in album order."""

    model_config = ConfigDict(frozen=True, strict=True)

    uri: NonEmptyStr
    title: str
    track_index: TrackIndex
    disc_number: PositiveInt = 1
    artist_name: str = ""


class SearchResult(BaseModel):
    """A track returned by the provider's search endpoint."""

    model_config = ConfigDict(frozen=True, strict=True)

    uri: NonEmptyStr
    title: str
    artist_name: str = ""
    all_artists: tuple[str, ...] = ()
    album_id: str | None = None
    album_name: str = ""
    album_track_index: TrackIndex = 0
    disc_number: PositiveInt = 1

    @property
    def description(self) -> str:
        """Secondary searchable text: album name and every credited artist."""
        return " ".join([self.album_name, *self.all_artists]).strip()

    @property
    def display(self) -> str:
        return f"{self.title} by {self.artist_name} (from {self.album_name})"

    def to_album_track(self) -> AlbumTrack:
        return AlbumTrack(
            uri=self.uri,
            title=self.title,
            track_index=self.album_track_index,
            disc_number=self.disc_number,
            artist_name=self.artist_name,
        )


class ScoredResult(BaseModel):
    """SearchResult plus its match score; higher is better."""

    model_config = ConfigDict(frozen=True, strict=True)

    result: SearchResult
    match_score: int
    search_rank: NonNegativeInt

    @property
    def sort_key(self) -> tuple[int, int]:
        # Ties keep the provider's own ordering.
        return (-self.match_score, self.search_rank)


class MovementSet(BaseModel):
    """Ordered tracks making up one work; never empty."""

    model_config = ConfigDict(frozen=True, strict=True)

    tracks: tuple[AlbumTrack, ...]

    @model_validator(mode="after")
    def _check_invariants(self) -> MovementSet:
        if not self.tracks:
            raise ValueError(ErrorMessages.EMPTY_MOVEMENT_SET)
        indices = [t.track_index for t in self.tracks]
        if indices != sorted(indices) or len(set(indices)) != len(indices):
            raise ValueError(ErrorMessages.MIXED_ALBUM_MOVEMENTS)
        return self

    @classmethod
    def single(cls, track: AlbumTrack) -> MovementSet:
        return cls(tracks=(track,))

    @property
    def uris(self) -> list[str]:
        return [t.uri for t in self.tracks]

    @property
    def is_multi_movement(self) -> bool:
        return len(self.tracks) > 1

    def __len__(self) -> int:
        return len(self.tracks)


class PlaybackIntent(BaseModel):
    """What to send to the player's play endpoint."""

    model_config = ConfigDict(frozen=True, strict=True)

    target_uris: tuple[str, ...] = ()
    context_uri: str | None = None
    device_id: str | None = None

    @model_validator(mode="after")
    def _exactly_one_target(self) -> PlaybackIntent:
        if self.target_uris and self.context_uri:
            raise ValueError(ErrorMessages.INTENT_TARGET_EXCLUSIVE)
        if not self.target_uris and not self.context_uri:
            raise ValueError(ErrorMessages.INTENT_TARGET_REQUIRED)
        return self

    @classmethod
    def for_tracks(cls, uris: list[str], device_id: str | None = None) -> PlaybackIntent:
        return cls(target_uris=tuple(uris), device_id=device_id)

    @classmethod
    def for_context(cls, context_uri: str, device_id: str | None = None) -> PlaybackIntent:
        return cls(context_uri=context_uri, device_id=device_id)

    def to_request_body(self) -> dict[str, object]:
        if self.context_uri:
            return {"context_uri": self.context_uri}
        return {"uris": list(self.target_uris)}


class DeviceState(BaseModel):
    """Read-only snapshot of a Spotify Connect device."""

    model_config = ConfigDict(frozen=True, strict=True)

    device_id: str | None = None
    name: str
    type: str = "Unknown"
    is_active: bool = False
    volume_percent: VolumePercent | None = None


class PlaylistSummary(BaseModel):
    model_config = ConfigDict(frozen=True, strict=True)

    playlist_id: NonEmptyStr
    name: str
    track_count: NonNegativeInt = 0
    uri: str | None = None

    @property
    def context_uri(self) -> str:
        return self.uri or SpotifyEndpoints.PLAYLIST_URI.format(playlist_id=self.playlist_id)


class NowPlaying(BaseModel):
    """Current player state; ``inactive()`` when no device is playing anything."""

    model_config = ConfigDict(frozen=True, strict=True)

    is_active: bool
    is_playing: bool = False
    device_id: str | None = None
    device_name: str | None = None
    track_title: str | None = None
    artist_name: str | None = None
    album_name: str | None = None
    progress_ms: NonNegativeInt = 0
    duration_ms: NonNegativeInt = 0
    volume_percent: VolumePercent | None = Field(default=None)

    @classmethod
    def inactive(cls) -> NowPlaying:
        return cls(is_active=False)

    @property
    def has_track(self) -> bool:
        return self.is_active and self.track_title is not None
