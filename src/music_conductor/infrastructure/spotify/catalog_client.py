"""Spotify Web API adapter for search, library and player calls."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from music_conductor.application.interfaces.catalog_client import CatalogClient
from music_conductor.domain.auth.entities import ProviderProfile
from music_conductor.domain.catalog.entities import (
    AlbumTrack,
    DeviceState,
    NowPlaying,
    PlaybackIntent,
    PlaylistSummary,
    SearchResult,
)
from music_conductor.domain.shared.constants import SpotifyEndpoints
from music_conductor.domain.shared.exceptions import ProviderError
from music_conductor.domain.shared.messages import ErrorMessages, LogTemplates
from music_conductor.infrastructure.spotify._http import json_body, raise_for_provider_status

if TYPE_CHECKING:
    from ...config.settings import SpotifySettings

logger = logging.getLogger(__name__)


class SpotifyCatalogClient(CatalogClient):
    """Bearer-authenticated JSON client for ``api.spotify.com/v1``."""

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
                base_url=self._settings.api_base_url,
                timeout=httpx.Timeout(self._settings.request_timeout_s),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        access_token: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> httpx.Response:
        logger.debug(LogTemplates.HTTP_REQUEST, method, path)
        try:
            response = await self._get_client().request(
                method,
                path,
                params=params,
                json=json,
                headers={"Authorization": f"Bearer {access_token}"},
            )
        except httpx.HTTPError as exc:
            logger.warning(LogTemplates.HTTP_TRANSPORT_ERROR, method, path, exc)
            raise ProviderError(ErrorMessages.PROVIDER_UNREACHABLE.format(detail=exc)) from exc

        if not response.is_success:
            logger.warning(
                LogTemplates.HTTP_ERROR, method, path, response.status_code, response.text[:200]
            )
        raise_for_provider_status(response)
        return response

    # === Catalog ===

    async def search_tracks(
        self, access_token: str, query: str, limit: int = 15
    ) -> list[SearchResult]:
        response = await self._request(
            "GET",
            SpotifyEndpoints.SEARCH,
            access_token,
            params={"q": query, "type": "track", "limit": limit},
        )
        items = json_body(response).get("tracks", {}).get("items") or []
        return [_parse_search_item(item) for item in items if item and item.get("uri")]

    async def get_album_tracks(
        self, access_token: str, album_id: str, limit: int = 50
    ) -> list[AlbumTrack]:
        response = await self._request(
            "GET",
            SpotifyEndpoints.ALBUM_TRACKS.format(album_id=album_id),
            access_token,
            params={"limit": limit},
        )
        items = [i for i in json_body(response).get("items") or [] if i and i.get("uri")]
        items.sort(key=lambda i: (i.get("disc_number") or 1, i.get("track_number") or 0))
        return [
            AlbumTrack(
                uri=item["uri"],
                title=item.get("name") or "",
                track_index=index,
                disc_number=item.get("disc_number") or 1,
                artist_name=_first_artist(item),
            )
            for index, item in enumerate(items)
        ]

    async def get_playlists(self, access_token: str, limit: int = 50) -> list[PlaylistSummary]:
        response = await self._request(
            "GET", SpotifyEndpoints.MY_PLAYLISTS, access_token, params={"limit": limit}
        )
        items = json_body(response).get("items") or []
        return [_parse_playlist(item) for item in items if item and item.get("id")]

    async def create_playlist(
        self, access_token: str, name: str, description: str = "", *, public: bool = False
    ) -> PlaylistSummary:
        """Create an empty playlist owned by the token's account."""
        response = await self._request(
            "POST",
            SpotifyEndpoints.MY_PLAYLISTS,
            access_token,
            json={"name": name, "description": description, "public": public},
        )
        body = json_body(response)
        if not body.get("id"):
            raise ProviderError(
                ErrorMessages.PROVIDER_HTTP_ERROR.format(
                    status=response.status_code, detail="created playlist has no id"
                ),
                status_code=response.status_code,
            )
        return _parse_playlist(body)

    async def get_profile(self, access_token: str) -> ProviderProfile:
        response = await self._request("GET", SpotifyEndpoints.ME, access_token)
        body = json_body(response)
        return ProviderProfile(user_id=body.get("id") or "", display_name=body.get("display_name"))

    # === Player ===

    async def get_devices(self, access_token: str) -> list[DeviceState]:
        response = await self._request("GET", SpotifyEndpoints.PLAYER_DEVICES, access_token)
        return [_parse_device(d) for d in json_body(response).get("devices") or [] if d]

    async def get_playback_state(self, access_token: str) -> NowPlaying:
        response = await self._request("GET", SpotifyEndpoints.PLAYER, access_token)
        # 204 No Content: no device is currently active.
        if response.status_code == 204 or not response.content:
            return NowPlaying.inactive()

        body = json_body(response)
        device = body.get("device") or {}
        item = body.get("item") or {}
        return NowPlaying(
            is_active=bool(device) or bool(item),
            is_playing=bool(body.get("is_playing")),
            device_id=device.get("id"),
            device_name=device.get("name"),
            track_title=item.get("name"),
            artist_name=_first_artist(item) or None,
            album_name=(item.get("album") or {}).get("name"),
            progress_ms=int(body.get("progress_ms") or 0),
            duration_ms=int(item.get("duration_ms") or 0),
            volume_percent=device.get("volume_percent"),
        )

    async def play(self, access_token: str, intent: PlaybackIntent) -> None:
        params = {"device_id": intent.device_id} if intent.device_id else None
        await self._request(
            "PUT",
            SpotifyEndpoints.PLAYER_PLAY,
            access_token,
            params=params,
            json=intent.to_request_body(),
        )

    async def pause(self, access_token: str) -> None:
        await self._request("PUT", SpotifyEndpoints.PLAYER_PAUSE, access_token)

    async def resume(self, access_token: str) -> None:
        await self._request("PUT", SpotifyEndpoints.PLAYER_PLAY, access_token)

    async def next_track(self, access_token: str) -> None:
        await self._request("POST", SpotifyEndpoints.PLAYER_NEXT, access_token)

    async def previous_track(self, access_token: str) -> None:
        await self._request("POST", SpotifyEndpoints.PLAYER_PREVIOUS, access_token)

    async def set_volume(self, access_token: str, volume_percent: int) -> None:
        await self._request(
            "PUT",
            SpotifyEndpoints.PLAYER_VOLUME,
            access_token,
            params={"volume_percent": volume_percent},
        )

    async def transfer_playback(
        self, access_token: str, device_id: str, *, play: bool = True
    ) -> None:
        await self._request(
            "PUT",
            SpotifyEndpoints.PLAYER,
            access_token,
            json={"device_ids": [device_id], "play": play},
        )


def _first_artist(item: dict[str, Any]) -> str:
    artists = item.get("artists") or []
    return str(artists[0].get("name") or "") if artists and artists[0] else ""


def _parse_search_item(item: dict[str, Any]) -> SearchResult:
    album = item.get("album") or {}
    artists = tuple(str(a.get("name")) for a in item.get("artists") or [] if a and a.get("name"))
    track_number = int(item.get("track_number") or 1)
    return SearchResult(
        uri=item["uri"],
        title=item.get("name") or "",
        artist_name=artists[0] if artists else "",
        all_artists=artists,
        album_id=album.get("id"),
        album_name=album.get("name") or "",
        album_track_index=max(track_number - 1, 0),
        disc_number=int(item.get("disc_number") or 1),
    )


def _parse_playlist(item: dict[str, Any]) -> PlaylistSummary:
    return PlaylistSummary(
        playlist_id=item["id"],
        name=item.get("name") or "",
        track_count=int((item.get("tracks") or {}).get("total") or 0),
        uri=item.get("uri"),
    )


def _parse_device(device: dict[str, Any]) -> DeviceState:
    volume = device.get("volume_percent")
    return DeviceState(
        device_id=device.get("id"),
        name=device.get("name") or "",
        type=device.get("type") or "Unknown",
        is_active=bool(device.get("is_active")),
        volume_percent=int(volume) if volume is not None else None,
    )
