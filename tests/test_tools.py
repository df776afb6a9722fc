"""Tests for the string-returning PlaybackTools facade."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from music_conductor.application.tools import PlaybackTools
from music_conductor.domain.playback.entities import PlaybackResult
from music_conductor.domain.playback.value_objects import PlaybackStatus


def _result(message: str, warning: str | None = None) -> PlaybackResult:
    return PlaybackResult(status=PlaybackStatus.INFO, message=message, warning=warning)


@pytest.fixture
def orchestrator():
    mock = MagicMock()
    for name in (
        "play_by_query",
        "play_by_playlist_name",
        "pause",
        "resume",
        "skip_next",
        "skip_previous",
        "now_playing",
        "list_devices",
        "list_playlists",
        "create_playlist",
        "search_tracks",
        "set_volume",
        "transfer_playback",
        "status",
    ):
        setattr(mock, name, AsyncMock(return_value=_result(f"{name} done")))
    return mock


class TestPlaybackTools:
    """Each tool forwards to one orchestrator operation and returns its text."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("tool", "args", "operation"),
        [
            ("play", ("alice", "brahms"), "play_by_query"),
            ("play_playlist", ("alice", "evening"), "play_by_playlist_name"),
            ("pause", ("alice",), "pause"),
            ("resume", ("alice",), "resume"),
            ("skip", ("alice",), "skip_next"),
            ("previous", ("alice",), "skip_previous"),
            ("now_playing", ("alice",), "now_playing"),
            ("devices", ("alice",), "list_devices"),
            ("playlists", ("alice",), "list_playlists"),
            ("create_playlist", ("alice", "road trip", "for the drive"), "create_playlist"),
            ("search", ("alice", "bach"), "search_tracks"),
            ("volume", ("alice", 40), "set_volume"),
            ("transfer", ("alice", "kitchen"), "transfer_playback"),
            ("status", ("alice",), "status"),
        ],
    )
    async def test_delegates(self, orchestrator, tool, args, operation):
        tools = PlaybackTools(orchestrator)

        output = await getattr(tools, tool)(*args)

        assert output == f"{operation} done"
        getattr(orchestrator, operation).assert_awaited_once_with(*args)

    @pytest.mark.asyncio
    async def test_warning_appended(self, orchestrator):
        orchestrator.play_by_query.return_value = _result("Now playing: x", warning="Not sure")

        output = await PlaybackTools(orchestrator).play("alice", "x")

        assert output == "Now playing: x\nNot sure"
