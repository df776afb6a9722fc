"""Chat-facing playback tools.

Each method takes the opaque user id handed over by the chat layer and
returns the single human-readable string to show the user.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .services.playback_orchestrator import PlaybackOrchestrator


class PlaybackTools:
    """Thin string-returning facade over :class:`PlaybackOrchestrator`."""

    def __init__(self, orchestrator: PlaybackOrchestrator) -> None:
        self._orchestrator = orchestrator

    async def play(self, user_id: str, query: str) -> str:
        """Play the best match for a free-text request, with all its movements."""
        return (await self._orchestrator.play_by_query(user_id, query)).text

    async def play_playlist(self, user_id: str, name: str) -> str:
        return (await self._orchestrator.play_by_playlist_name(user_id, name)).text

    async def pause(self, user_id: str) -> str:
        return (await self._orchestrator.pause(user_id)).text

    async def resume(self, user_id: str) -> str:
        return (await self._orchestrator.resume(user_id)).text

    async def skip(self, user_id: str) -> str:
        return (await self._orchestrator.skip_next(user_id)).text

    async def previous(self, user_id: str) -> str:
        return (await self._orchestrator.skip_previous(user_id)).text

    async def now_playing(self, user_id: str) -> str:
        return (await self._orchestrator.now_playing(user_id)).text

    async def devices(self, user_id: str) -> str:
        return (await self._orchestrator.list_devices(user_id)).text

    async def playlists(self, user_id: str) -> str:
        return (await self._orchestrator.list_playlists(user_id)).text

    async def create_playlist(self, user_id: str, name: str, description: str = "") -> str:
        """Create an empty private playlist named ``name``."""
        return (await self._orchestrator.create_playlist(user_id, name, description)).text

    async def search(self, user_id: str, query: str) -> str:
        return (await self._orchestrator.search_tracks(user_id, query)).text

    async def volume(self, user_id: str, percent: int) -> str:
        return (await self._orchestrator.set_volume(user_id, percent)).text

    async def transfer(self, user_id: str, device: str) -> str:
        return (await self._orchestrator.transfer_playback(user_id, device)).text

    async def status(self, user_id: str) -> str:
        return (await self._orchestrator.status(user_id)).text
