"""
Unit Tests for the playback session state machine and operation results.
"""

import pytest

from music_conductor.domain.playback.entities import PlaybackResult, UserPlaybackSession
from music_conductor.domain.playback.value_objects import PlaybackStatus, SessionState
from music_conductor.domain.shared.exceptions import InvalidOperationError


class TestSessionState:
    """Tests for SessionState transitions."""

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (SessionState.IDLE, SessionState.SEARCHING),
            (SessionState.IDLE, SessionState.COMMANDING),
            (SessionState.SEARCHING, SessionState.RESOLVED),
            (SessionState.RESOLVED, SessionState.COMMANDING),
            (SessionState.COMMANDING, SessionState.ACTIVE),
            (SessionState.COMMANDING, SessionState.PAUSED),
            (SessionState.ACTIVE, SessionState.SEARCHING),
            (SessionState.PAUSED, SessionState.COMMANDING),
        ],
    )
    def test_valid_transitions(self, source, target):
        assert source.can_transition_to(target) is True

    @pytest.mark.parametrize(
        ("source", "target"),
        [
            (SessionState.IDLE, SessionState.ACTIVE),
            (SessionState.SEARCHING, SessionState.COMMANDING),
            (SessionState.SEARCHING, SessionState.SEARCHING),
            (SessionState.RESOLVED, SessionState.ACTIVE),
            (SessionState.ACTIVE, SessionState.RESOLVED),
        ],
    )
    def test_invalid_transitions(self, source, target):
        assert source.can_transition_to(target) is False

    def test_any_state_can_fall_back_to_idle(self):
        assert all(state.can_transition_to(SessionState.IDLE) for state in SessionState)

    def test_settled_states(self):
        assert SessionState.IDLE.is_settled
        assert SessionState.ACTIVE.is_settled
        assert SessionState.PAUSED.is_settled
        assert SessionState.SEARCHING.is_busy
        assert SessionState.COMMANDING.is_busy


class TestUserPlaybackSession:
    """Tests for the UserPlaybackSession aggregate."""

    def test_new_session_is_idle(self):
        session = UserPlaybackSession(user_id="user-1")

        assert session.state is SessionState.IDLE
        assert session.last_query is None
        assert session.track_uris == []

    def test_query_lifecycle(self):
        session = UserPlaybackSession(user_id="user-1")

        session.begin_search("brahms")
        session.resolved(["spotify:track:a", "spotify:track:b"])
        session.begin_command()
        session.mark_active()

        assert session.state is SessionState.ACTIVE
        assert session.last_query == "brahms"
        assert session.track_uris == ["spotify:track:a", "spotify:track:b"]

    def test_invalid_transition_raises(self):
        session = UserPlaybackSession(user_id="user-1")

        with pytest.raises(InvalidOperationError) as exc_info:
            session.mark_active()

        assert "idle" in exc_info.value.message
        assert "active" in exc_info.value.message

    def test_fail_returns_to_idle(self):
        session = UserPlaybackSession(user_id="user-1")
        session.begin_search("brahms")

        session.fail()

        assert session.state is SessionState.IDLE
        assert session.last_query == "brahms"

    def test_failed_command_keeps_settled_state(self):
        session = UserPlaybackSession(user_id="user-1")
        session.begin_command()
        session.mark_active()
        session.begin_command()

        session.fail()

        assert session.state is SessionState.ACTIVE

    def test_failed_command_while_paused_stays_paused(self):
        session = UserPlaybackSession(user_id="user-1")
        session.begin_command()
        session.mark_paused()
        session.begin_command()

        session.fail()

        assert session.state is SessionState.PAUSED

    def test_failed_search_while_active_drops_to_idle(self):
        session = UserPlaybackSession(user_id="user-1")
        session.begin_command()
        session.mark_active()
        session.begin_search("brahms")

        session.fail()

        assert session.state is SessionState.IDLE

    def test_failed_replacing_command_drops_to_idle(self):
        session = UserPlaybackSession(user_id="user-1")
        session.begin_command()
        session.mark_active()
        session.begin_command(replaces_playback=True)

        session.fail()

        assert session.state is SessionState.IDLE

    def test_fail_on_settled_session_is_a_no_op(self):
        session = UserPlaybackSession(user_id="user-1")
        session.begin_command()
        session.mark_paused()

        session.fail()

        assert session.state is SessionState.PAUSED

    def test_transition_updates_last_activity(self):
        session = UserPlaybackSession(user_id="user-1")
        before = session.last_activity

        session.begin_search("brahms")

        assert session.last_activity >= before


class TestPlaybackResult:
    """Tests for PlaybackResult."""

    def test_ok(self):
        result = PlaybackResult.ok(
            PlaybackStatus.NOW_PLAYING, "Now playing", track_uris=("spotify:track:a",), match_score=40
        )

        assert result.is_success is True
        assert result.track_uris == ("spotify:track:a",)
        assert result.match_score == 40
        assert str(result) == "Now playing"

    def test_error(self):
        result = PlaybackResult.error(PlaybackStatus.NO_ACTIVE_DEVICE, "No device")

        assert result.is_success is False
        assert result.text == "No device"

    def test_warning_is_appended_to_text(self):
        result = PlaybackResult.ok(PlaybackStatus.NOW_PLAYING, "Now playing", warning="Close match")

        assert result.text == "Now playing\nClose match"

    @pytest.mark.parametrize(
        "status",
        [
            PlaybackStatus.NOT_CONFIGURED,
            PlaybackStatus.NOT_LINKED,
            PlaybackStatus.RELINK_REQUIRED,
            PlaybackStatus.NO_RESULTS,
            PlaybackStatus.PLAYLIST_NOT_FOUND,
            PlaybackStatus.PROVIDER_ERROR,
            PlaybackStatus.INVALID_REQUEST,
        ],
    )
    def test_failure_statuses(self, status):
        assert status.is_success is False
