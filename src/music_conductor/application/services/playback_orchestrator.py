"""Playback Orchestrator - turns a user's request into playback on their device.

Every public operation returns a ``PlaybackResult``; provider, credential and
empty-result failures are classified into a status and a human-readable
message instead of propagating.
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, TypeVar

from ...domain.catalog.entities import (
    DeviceState,
    MovementSet,
    PlaybackIntent,
    PlaylistSummary,
    SearchResult,
)
from ...domain.playback.entities import PlaybackResult, UserPlaybackSession
from ...domain.playback.value_objects import PlaybackStatus
from ...domain.shared.exceptions import (
    CredentialError,
    DomainError,
    IntegrationNotConfiguredError,
    NoActiveDeviceError,
    NoResultsError,
    NotLinkedError,
    PlaylistNotFoundError,
    ProviderError,
    ValidationError,
)
from ...domain.shared.messages import ErrorMessages, LogTemplates, UserMessages

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings
    from ...domain.catalog.movements import MovementResolver
    from ...domain.catalog.scoring import MatchScorer
    from ..interfaces.catalog_client import CatalogClient
    from .token_service import TokenLifecycleManager

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PlaybackOrchestrator:
    """Search, score, group movements and command the user's player."""

    def __init__(
        self,
        *,
        token_manager: TokenLifecycleManager,
        catalog_client: CatalogClient,
        scorer: MatchScorer,
        movement_resolver: MovementResolver,
        settings: PlaybackSettings,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._tokens = token_manager
        self._catalog = catalog_client
        self._scorer = scorer
        self._movements = movement_resolver
        self._settings = settings
        self._sleep = sleep
        self._sessions: dict[str, UserPlaybackSession] = {}
        self._session_locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def session(self, user_id: str) -> UserPlaybackSession:
        session = self._sessions.get(user_id)
        if session is None:
            session = UserPlaybackSession(user_id=user_id)
            self._sessions[user_id] = session
        return session

    # === Plumbing ===

    async def _call(self, user_id: str, operation: Callable[[str], Awaitable[T]]) -> T:
        """Run a catalog call with a valid token, retrying once after a 401."""
        token = await self._tokens.valid_token(user_id)
        try:
            return await operation(token)
        except ProviderError as exc:
            if not exc.is_unauthorized:
                raise
            logger.info(LogTemplates.RETRY_AFTER_REFRESH, user_id)
            token = await self._tokens.valid_token(user_id, force_refresh=True)
            return await operation(token)

    async def _run(
        self,
        action: str,
        user_id: str,
        operation: Callable[[UserPlaybackSession], Awaitable[PlaybackResult]],
        *,
        commands_player: bool = True,
    ) -> PlaybackResult:
        session = self.session(user_id)
        if not commands_player:
            try:
                return await operation(session)
            except Exception as exc:
                return self._failure(action, user_id, exc)

        async with self._session_locks[user_id]:
            try:
                return await operation(session)
            except Exception as exc:
                session.fail()
                return self._failure(action, user_id, exc)

    def _failure(self, action: str, user_id: str, exc: Exception) -> PlaybackResult:
        if isinstance(exc, IntegrationNotConfiguredError):
            logger.warning(LogTemplates.CONFIG_NOT_CONFIGURED)
            return PlaybackResult.error(PlaybackStatus.NOT_CONFIGURED, UserMessages.NOT_CONFIGURED)
        if isinstance(exc, NotLinkedError):
            logger.info(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            if exc.revoked:
                return PlaybackResult.error(PlaybackStatus.RELINK_REQUIRED, UserMessages.RELINK)
            return PlaybackResult.error(PlaybackStatus.NOT_LINKED, UserMessages.NOT_LINKED)
        if isinstance(exc, CredentialError):
            logger.warning(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            return PlaybackResult.error(PlaybackStatus.RELINK_REQUIRED, UserMessages.RELINK)
        if isinstance(exc, NoActiveDeviceError):
            logger.info(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            return PlaybackResult.error(
                PlaybackStatus.NO_ACTIVE_DEVICE, UserMessages.NO_ACTIVE_DEVICE
            )
        if isinstance(exc, NoResultsError):
            logger.info(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            return PlaybackResult.error(
                PlaybackStatus.NO_RESULTS, UserMessages.NO_RESULTS.format(query=exc.query)
            )
        if isinstance(exc, PlaylistNotFoundError):
            logger.info(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            return PlaybackResult.error(
                PlaybackStatus.PLAYLIST_NOT_FOUND,
                UserMessages.PLAYLIST_NOT_FOUND.format(name=exc.name),
            )
        if isinstance(exc, ProviderError):
            logger.warning(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            return PlaybackResult.error(
                PlaybackStatus.PROVIDER_ERROR,
                UserMessages.PROVIDER_FAILURE.format(action=action, detail=exc.message),
            )
        if isinstance(exc, DomainError):
            logger.warning(LogTemplates.OPERATION_FAILED, action, user_id, exc.message)
            return PlaybackResult.error(PlaybackStatus.INVALID_REQUEST, exc.message)

        logger.exception(LogTemplates.OPERATION_FAILED, action, user_id, exc)
        return PlaybackResult.error(
            PlaybackStatus.PROVIDER_ERROR,
            UserMessages.PROVIDER_FAILURE.format(action=action, detail=str(exc) or type(exc).__name__),
        )

    # === Play by query ===

    async def play_by_query(self, user_id: str, text: str) -> PlaybackResult:
        """Search for ``text``, pick the best match and play its whole work."""

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            session.begin_search(text)
            results = await self._call(
                user_id,
                lambda token: self._catalog.search_tracks(
                    token, text, self._settings.search_limit
                ),
            )
            best = self._scorer.best(results, text)
            if best is None:
                raise NoResultsError(text)

            match = best.result
            low_confidence = self._scorer.is_low_confidence(best)
            if low_confidence:
                logger.info(LogTemplates.LOW_CONFIDENCE_MATCH, text, match.display, best.match_score)
            else:
                logger.info(LogTemplates.BEST_MATCH, text, match.display, best.match_score)

            movements = await self._resolve_movements(user_id, match, text)
            session.resolved(movements.uris)

            session.begin_command()
            intent = PlaybackIntent.for_tracks(movements.uris)
            await self._call(user_id, lambda token: self._catalog.play(token, intent))
            session.mark_active()
            logger.info(LogTemplates.PLAY_STARTED, len(movements), user_id)

            suffix = (
                UserMessages.MOVEMENTS_SUFFIX.format(count=len(movements))
                if movements.is_multi_movement
                else ""
            )
            return PlaybackResult.ok(
                PlaybackStatus.NOW_PLAYING,
                UserMessages.NOW_PLAYING.format(
                    title=match.title,
                    artist=match.artist_name or UserMessages.UNKNOWN_ARTIST,
                    album=match.album_name,
                    movements=suffix,
                ),
                warning=UserMessages.LOW_CONFIDENCE if low_confidence else None,
                track_uris=tuple(movements.uris),
                match_score=best.match_score,
            )

        return await self._run("play music", user_id, operation)

    async def _resolve_movements(
        self, user_id: str, match: SearchResult, query: str
    ) -> MovementSet:
        matched = match.to_album_track()
        album_id = match.album_id
        if not album_id:
            return MovementSet.single(matched)

        try:
            album_tracks = await self._call(
                user_id,
                lambda token: self._catalog.get_album_tracks(
                    token, album_id, self._settings.album_track_limit
                ),
            )
        except ProviderError as exc:
            logger.warning(LogTemplates.OPERATION_FAILED, "Album lookup", user_id, exc.message)
            return MovementSet.single(matched)

        movements = self._movements.resolve_movements(album_tracks, matched, query)
        if movements.is_multi_movement:
            logger.info(LogTemplates.MOVEMENTS_FOUND, len(movements), query)
        return movements

    # === Play by playlist ===

    async def play_by_playlist_name(self, user_id: str, name: str) -> PlaybackResult:
        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            playlists = await self._call(
                user_id,
                lambda token: self._catalog.get_playlists(token, self._settings.playlist_limit),
            )
            playlist = find_playlist(playlists, name)
            if playlist is None:
                raise PlaylistNotFoundError(name)

            session.begin_command(replaces_playback=True)
            intent = PlaybackIntent.for_context(playlist.context_uri)
            await self._call(user_id, lambda token: self._catalog.play(token, intent))
            session.mark_active()
            logger.info(LogTemplates.PLAYLIST_STARTED, playlist.name, user_id)

            return PlaybackResult.ok(
                PlaybackStatus.NOW_PLAYING,
                UserMessages.NOW_PLAYING_PLAYLIST.format(
                    name=playlist.name, count=playlist.track_count
                ),
            )

        return await self._run("play playlist", user_id, operation)

    # === Transport controls ===

    async def pause(self, user_id: str) -> PlaybackResult:
        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            session.begin_command()
            await self._call(user_id, self._catalog.pause)
            session.mark_paused()
            return PlaybackResult.ok(PlaybackStatus.PAUSED, UserMessages.PAUSED)

        return await self._run("pause", user_id, operation)

    async def resume(self, user_id: str) -> PlaybackResult:
        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            session.begin_command()
            await self._call(user_id, self._catalog.resume)
            session.mark_active()
            return PlaybackResult.ok(PlaybackStatus.RESUMED, UserMessages.RESUMED)

        return await self._run("resume", user_id, operation)

    async def skip_next(self, user_id: str) -> PlaybackResult:
        """Skip forward, then report the new track once the player has settled."""

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            session.begin_command()
            await self._call(user_id, self._catalog.next_track)
            session.mark_active()
            return await self._after_skip(user_id, UserMessages.SKIPPED)

        return await self._run("skip", user_id, operation)

    async def skip_previous(self, user_id: str) -> PlaybackResult:
        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            session.begin_command()
            await self._call(user_id, self._catalog.previous_track)
            session.mark_active()
            return await self._after_skip(user_id, UserMessages.PREVIOUS)

        return await self._run("go back", user_id, operation)

    async def _after_skip(self, user_id: str, fallback: str) -> PlaybackResult:
        await self._sleep(self._settings.skip_settle_ms / 1000)
        try:
            now = await self._call(user_id, self._catalog.get_playback_state)
        except ProviderError as exc:
            # Stale or missing now-playing data is tolerated after a skip.
            logger.debug(LogTemplates.OPERATION_FAILED, "Now playing", user_id, exc.message)
            return PlaybackResult.ok(PlaybackStatus.SKIPPED, fallback)

        if not now.has_track:
            return PlaybackResult.ok(PlaybackStatus.SKIPPED, fallback)
        return PlaybackResult.ok(
            PlaybackStatus.SKIPPED,
            UserMessages.SKIPPED_TO.format(
                title=now.track_title, artist=now.artist_name or UserMessages.UNKNOWN_ARTIST
            ),
        )

    async def set_volume(self, user_id: str, percent: int) -> PlaybackResult:
        volume = max(0, min(100, int(percent)))

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            await self._call(user_id, lambda token: self._catalog.set_volume(token, volume))
            return PlaybackResult.ok(
                PlaybackStatus.VOLUME_SET, UserMessages.VOLUME_SET.format(volume=volume)
            )

        return await self._run("set volume", user_id, operation, commands_player=False)

    async def transfer_playback(self, user_id: str, device: str) -> PlaybackResult:
        """Move playback to the device whose id or name matches ``device``."""

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            devices = await self._call(user_id, self._catalog.get_devices)
            target = find_device(devices, device)
            if target is None or target.device_id is None:
                raise ValidationError(ErrorMessages.DEVICE_NOT_FOUND.format(name=device))

            session.begin_command()
            device_id = target.device_id
            await self._call(
                user_id, lambda token: self._catalog.transfer_playback(token, device_id)
            )
            session.mark_active()
            return PlaybackResult.ok(
                PlaybackStatus.TRANSFERRED, UserMessages.TRANSFERRED.format(name=target.name)
            )

        return await self._run("transfer playback", user_id, operation)

    # === Read-only queries ===

    async def now_playing(self, user_id: str) -> PlaybackResult:
        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            now = await self._call(user_id, self._catalog.get_playback_state)
            if not now.has_track:
                return PlaybackResult.ok(PlaybackStatus.INFO, UserMessages.NOTHING_PLAYING)
            return PlaybackResult.ok(
                PlaybackStatus.INFO,
                UserMessages.CURRENTLY.format(
                    status="Playing" if now.is_playing else "Paused",
                    title=now.track_title,
                    artist=now.artist_name or UserMessages.UNKNOWN_ARTIST,
                    device=now.device_name or UserMessages.UNKNOWN_DEVICE,
                ),
            )

        return await self._run("get current track", user_id, operation, commands_player=False)

    async def list_devices(self, user_id: str) -> PlaybackResult:
        """List devices; an empty list is a normal outcome, not a failure."""

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            devices = await self._call(user_id, self._catalog.get_devices)
            if not devices:
                return PlaybackResult.ok(PlaybackStatus.INFO, UserMessages.NO_DEVICES)
            lines = [
                UserMessages.DEVICE_LINE.format(
                    name=d.name or UserMessages.UNKNOWN_DEVICE,
                    type=d.type,
                    active=UserMessages.DEVICE_ACTIVE_MARK if d.is_active else "",
                )
                for d in devices
            ]
            return PlaybackResult.ok(
                PlaybackStatus.INFO, UserMessages.DEVICES_HEADER + "\n".join(lines)
            )

        return await self._run("get devices", user_id, operation, commands_player=False)

    async def list_playlists(self, user_id: str) -> PlaybackResult:
        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            playlists = await self._call(
                user_id,
                lambda token: self._catalog.get_playlists(token, self._settings.playlist_limit),
            )
            if not playlists:
                return PlaybackResult.ok(PlaybackStatus.INFO, UserMessages.NO_PLAYLISTS)
            lines = [
                UserMessages.PLAYLIST_LINE.format(name=p.name, count=p.track_count)
                for p in playlists
            ]
            return PlaybackResult.ok(
                PlaybackStatus.INFO, UserMessages.PLAYLISTS_HEADER + "\n".join(lines)
            )

        return await self._run("get playlists", user_id, operation, commands_player=False)

    async def create_playlist(
        self, user_id: str, name: str, description: str = ""
    ) -> PlaybackResult:
        """Create an empty private playlist for the user."""
        title = name.strip()

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            if not title:
                raise ValidationError(ErrorMessages.EMPTY_PLAYLIST_NAME)
            playlist = await self._call(
                user_id,
                lambda token: self._catalog.create_playlist(token, title, description.strip()),
            )
            logger.info(LogTemplates.PLAYLIST_CREATED, playlist.name, user_id)
            return PlaybackResult.ok(
                PlaybackStatus.INFO, UserMessages.PLAYLIST_CREATED.format(name=playlist.name)
            )

        return await self._run("create playlist", user_id, operation, commands_player=False)

    async def search_tracks(self, user_id: str, query: str) -> PlaybackResult:
        """Ranked search results without starting playback."""

        async def operation(session: UserPlaybackSession) -> PlaybackResult:
            results = await self._call(
                user_id,
                lambda token: self._catalog.search_tracks(
                    token, query, self._settings.search_limit
                ),
            )
            ranked = self._scorer.rank(results, query)
            if not ranked:
                raise NoResultsError(query)
            lines = [
                UserMessages.SEARCH_LINE.format(
                    index=i,
                    title=s.result.title,
                    artist=s.result.artist_name or UserMessages.UNKNOWN_ARTIST,
                )
                for i, s in enumerate(ranked, start=1)
            ]
            return PlaybackResult.ok(
                PlaybackStatus.INFO,
                UserMessages.SEARCH_HEADER + "\n".join(lines),
                track_uris=tuple(s.result.uri for s in ranked),
            )

        return await self._run("search", user_id, operation, commands_player=False)

    async def status(self, user_id: str) -> PlaybackResult:
        """Whether the integration is configured and the user is linked."""
        if not self._tokens.is_configured:
            return PlaybackResult.error(PlaybackStatus.NOT_CONFIGURED, UserMessages.NOT_CONFIGURED)
        if not await self._tokens.is_linked(user_id):
            return PlaybackResult.error(PlaybackStatus.NOT_LINKED, UserMessages.NOT_LINKED)
        return PlaybackResult.ok(PlaybackStatus.INFO, UserMessages.LINKED)


def find_playlist(playlists: list[PlaylistSummary], name: str) -> PlaylistSummary | None:
    """Exact case-insensitive name match first, then the first substring match."""
    wanted = name.strip().lower()
    if not wanted:
        return None
    for playlist in playlists:
        if playlist.name.strip().lower() == wanted:
            return playlist
    for playlist in playlists:
        if wanted in playlist.name.lower():
            return playlist
    return None


def find_device(devices: list[DeviceState], device: str) -> DeviceState | None:
    """Match by device id, then exact name, then name substring (case-insensitive)."""
    wanted = device.strip().lower()
    if not wanted:
        return None
    for candidate in devices:
        if candidate.device_id == device.strip():
            return candidate
    for candidate in devices:
        if candidate.name.strip().lower() == wanted:
            return candidate
    for candidate in devices:
        if wanted in candidate.name.lower():
            return candidate
    return None
