"""Playback domain: the per-user session state machine and operation results."""

from music_conductor.domain.playback.entities import PlaybackResult, UserPlaybackSession
from music_conductor.domain.playback.value_objects import PlaybackStatus, SessionState

__all__ = [
    "PlaybackResult",
    "PlaybackStatus",
    "SessionState",
    "UserPlaybackSession",
]
