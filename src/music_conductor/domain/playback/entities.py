"""Per-user playback session and operation results."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from music_conductor.domain.playback.value_objects import PlaybackStatus, SessionState
from music_conductor.domain.shared.datetime_utils import utcnow
from music_conductor.domain.shared.exceptions import InvalidOperationError
from music_conductor.domain.shared.messages import ErrorMessages
from music_conductor.domain.shared.types import UserIdStr


class UserPlaybackSession(BaseModel):
    """Aggregate tracking where one user's current request is in its lifecycle."""

    model_config = ConfigDict(strict=True)

    user_id: UserIdStr
    state: SessionState = SessionState.IDLE
    last_query: str | None = None
    track_uris: list[str] = Field(default_factory=list)
    last_activity: datetime = Field(default_factory=utcnow)
    settled_state: SessionState = SessionState.IDLE
    replacing_playback: bool = False

    def touch(self) -> None:
        self.last_activity = utcnow()

    def transition_to(self, new_state: SessionState) -> None:
        if not self.state.can_transition_to(new_state):
            raise InvalidOperationError(
                operation=f"transition to {new_state.value}",
                current_state=self.state.value,
                message=ErrorMessages.INVALID_TRANSITION.format(
                    current=self.state.value, target=new_state.value
                ),
            )
        self.state = new_state
        if new_state.is_settled:
            self.settled_state = new_state
            self.replacing_playback = False
        self.touch()

    def begin_search(self, query: str) -> None:
        self.transition_to(SessionState.SEARCHING)
        self.replacing_playback = True
        self.last_query = query

    def resolved(self, uris: list[str]) -> None:
        self.transition_to(SessionState.RESOLVED)
        self.track_uris = list(uris)

    def begin_command(self, *, replaces_playback: bool = False) -> None:
        self.transition_to(SessionState.COMMANDING)
        if replaces_playback:
            self.replacing_playback = True

    def mark_active(self) -> None:
        self.transition_to(SessionState.ACTIVE)

    def mark_paused(self) -> None:
        self.transition_to(SessionState.PAUSED)

    def fail(self) -> None:
        """Settle the session after a request failed part-way.

        A failed play request leaves nothing known to be playing. Any other
        failed command leaves the player where it was before the command.
        """
        if not self.state.is_busy:
            return
        self.transition_to(
            SessionState.IDLE if self.replacing_playback else self.settled_state
        )


class PlaybackResult(BaseModel):
    """Result of an orchestrator operation.

    ``message`` is the only thing handed across the presentation boundary.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    status: PlaybackStatus
    message: str
    warning: str | None = None
    track_uris: tuple[str, ...] = ()
    match_score: int | None = None

    @property
    def is_success(self) -> bool:
        return self.status.is_success

    @property
    def text(self) -> str:
        if self.warning:
            return f"{self.message}\n{self.warning}"
        return self.message

    def __str__(self) -> str:
        return self.text

    @classmethod
    def ok(cls, status: PlaybackStatus, message: str, **extra: object) -> PlaybackResult:
        return cls(status=status, message=message, **extra)  # type: ignore[arg-type]

    @classmethod
    def error(cls, status: PlaybackStatus, message: str) -> PlaybackResult:
        return cls(status=status, message=message)
