"""Value objects for the per-user playback session."""

from __future__ import annotations

from enum import Enum


class SessionState(Enum):
    """Playback session state with enforced transitions.

    State transitions:
    - IDLE/ACTIVE/PAUSED -> SEARCHING (new query)
    - SEARCHING -> RESOLVED (best match and movements chosen)
    - RESOLVED/IDLE/ACTIVE/PAUSED -> COMMANDING (player command in flight)
    - COMMANDING -> ACTIVE | PAUSED (provider acknowledged)
    - Any -> IDLE (failure with nothing playing, or reset)
    """

    IDLE = "idle"
    SEARCHING = "searching"
    RESOLVED = "resolved"
    COMMANDING = "commanding"
    ACTIVE = "active"
    PAUSED = "paused"

    def can_transition_to(self, target: SessionState) -> bool:
        """Check if transition to target state is valid."""
        if target == SessionState.IDLE:
            return True
        valid_transitions = {
            SessionState.IDLE: {SessionState.SEARCHING, SessionState.COMMANDING},
            SessionState.SEARCHING: {SessionState.RESOLVED},
            SessionState.RESOLVED: {SessionState.COMMANDING},
            SessionState.COMMANDING: {SessionState.ACTIVE, SessionState.PAUSED},
            SessionState.ACTIVE: {SessionState.SEARCHING, SessionState.COMMANDING},
            SessionState.PAUSED: {SessionState.SEARCHING, SessionState.COMMANDING},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_settled(self) -> bool:
        """True for states a session rests in between requests."""
        return self in {SessionState.IDLE, SessionState.ACTIVE, SessionState.PAUSED}

    @property
    def is_busy(self) -> bool:
        return not self.is_settled


class PlaybackStatus(Enum):
    """Outcome classification for orchestrator operations."""

    NOW_PLAYING = "now_playing"
    PAUSED = "paused"
    RESUMED = "resumed"
    SKIPPED = "skipped"
    VOLUME_SET = "volume_set"
    TRANSFERRED = "transferred"
    INFO = "info"
    NOT_CONFIGURED = "not_configured"
    NOT_LINKED = "not_linked"
    RELINK_REQUIRED = "relink_required"
    NO_RESULTS = "no_results"
    PLAYLIST_NOT_FOUND = "playlist_not_found"
    NO_ACTIVE_DEVICE = "no_active_device"
    PROVIDER_ERROR = "provider_error"
    INVALID_REQUEST = "invalid_request"

    @property
    def is_success(self) -> bool:
        return self in {
            PlaybackStatus.NOW_PLAYING,
            PlaybackStatus.PAUSED,
            PlaybackStatus.RESUMED,
            PlaybackStatus.SKIPPED,
            PlaybackStatus.VOLUME_SET,
            PlaybackStatus.TRANSFERRED,
            PlaybackStatus.INFO,
        }
