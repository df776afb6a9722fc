"""
Tests for main.py - Main Entry Point

Tests for the command-line entry point including:
- Logging configuration
- Argument parsing
- Subcommand dispatch
- Settings validation
- Error handling
"""

import json
import logging
from unittest.mock import AsyncMock, MagicMock, mock_open, patch

import pytest

from conftest import FakeAuthorizationServer, FakeCatalogClient, make_search_result
from music_conductor.config.container import Container
from music_conductor.config.settings import DatabaseSettings, Settings, SpotifySettings
from music_conductor.domain.shared.exceptions import AuthExchangeError
from music_conductor.domain.shared.messages import UserMessages
from music_conductor.main import build_parser, main, run_command, setup_logging


class TestLoggingSetup:
    """Tests for logging configuration."""

    def _make_valid_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {},
            "loggers": {
                "aiosqlite": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
                "httpcore": {"level": "WARNING"},
            },
            "root": {"level": "INFO", "handlers": []},
        }

    def test_dictconfig_called_when_json_exists(self):
        """Should call dictConfig when logging_config.json exists."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig") as mock_dc,
        ):
            setup_logging()

            mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self):
        """Should fallback to basicConfig when logging_config.json is missing."""
        with (
            patch("builtins.open", side_effect=FileNotFoundError),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()
            assert mock_bc.call_args[1]["level"] == logging.INFO

    def test_fallback_to_basicconfig_when_json_malformed(self):
        """Should fallback to basicConfig when JSON is malformed."""
        m = mock_open(read_data="{invalid json")
        with (
            patch("builtins.open", m),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging("WARNING")

            mock_bc.assert_called_once()
            assert mock_bc.call_args[1]["level"] == logging.WARNING

    def test_root_logger_level_overridden_by_settings(self):
        """Should override root logger level with the provided log_level."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig"),
            patch("logging.getLogger") as mock_get_logger,
        ):
            mock_root = MagicMock()
            mock_get_logger.return_value = mock_root

            setup_logging("DEBUG")

            mock_root.setLevel.assert_called_once_with(logging.DEBUG)

    def test_shipped_config_redacts_tokens(self):
        """The bundled logging_config.json attaches the redaction filter to every handler."""
        from music_conductor import main as main_module

        with open(main_module._LOGGING_CONFIG_PATH) as f:
            config = json.load(f)

        assert "redact_tokens" in config["filters"]
        for handler in config["handlers"].values():
            assert "redact_tokens" in handler["filters"]
        for name in ("aiosqlite", "httpx", "httpcore"):
            assert config["loggers"][name]["level"] == "WARNING"


class TestArgumentParsing:
    """Tests for build_parser."""

    def test_play_joins_words(self):
        args = build_parser().parse_args(["play", "brahms", "violin", "sonata"])

        assert args.action == "play"
        assert args.query == ["brahms", "violin", "sonata"]
        assert args.user == "local"

    def test_user_option(self):
        args = build_parser().parse_args(["--user", "alice", "volume", "30"])

        assert args.user == "alice"
        assert args.percent == 30

    def test_link_requires_code(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["link"])

    def test_subcommand_required(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])


def _mock_container() -> MagicMock:
    container = MagicMock()
    container.tools = MagicMock()
    for name in (
        "status",
        "play",
        "play_playlist",
        "search",
        "pause",
        "resume",
        "skip",
        "previous",
        "now_playing",
        "devices",
        "playlists",
        "create_playlist",
        "volume",
        "transfer",
    ):
        setattr(container.tools, name, AsyncMock(return_value=f"{name} result"))
    container.token_manager = MagicMock()
    container.token_manager.authorization_url = MagicMock(return_value="https://consent")
    container.token_manager.link_account = AsyncMock()
    container.token_manager.unlink = AsyncMock(return_value=True)
    return container


class TestRunCommand:
    """Tests for subcommand dispatch."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("argv", "tool", "call_args"),
        [
            (["play", "brahms", "sonata"], "play", ("local", "brahms sonata")),
            (["playlist", "evening", "jazz"], "play_playlist", ("local", "evening jazz")),
            (["search", "bach"], "search", ("local", "bach")),
            (["pause"], "pause", ("local",)),
            (["resume"], "resume", ("local",)),
            (["next"], "skip", ("local",)),
            (["previous"], "previous", ("local",)),
            (["now-playing"], "now_playing", ("local",)),
            (["devices"], "devices", ("local",)),
            (["playlists"], "playlists", ("local",)),
            (
                ["create-playlist", "road", "trip", "--description", "for the drive"],
                "create_playlist",
                ("local", "road trip", "for the drive"),
            ),
            (["create-playlist", "jazz"], "create_playlist", ("local", "jazz", "")),
            (["volume", "55"], "volume", ("local", 55)),
            (["transfer", "kitchen", "speaker"], "transfer", ("local", "kitchen speaker")),
            (["-u", "bob", "status"], "status", ("bob",)),
        ],
    )
    async def test_dispatch_to_tools(self, argv, tool, call_args):
        container = _mock_container()

        output = await run_command(container, build_parser().parse_args(argv))

        assert output == f"{tool} result"
        getattr(container.tools, tool).assert_awaited_once_with(*call_args)

    @pytest.mark.asyncio
    async def test_authorize_url(self):
        container = _mock_container()

        output = await run_command(
            container, build_parser().parse_args(["authorize-url", "--state", "xyz"])
        )

        assert output == UserMessages.AUTHORIZE.format(url="https://consent")
        container.token_manager.authorization_url.assert_called_once_with("xyz", None)

    @pytest.mark.asyncio
    async def test_link(self):
        container = _mock_container()

        output = await run_command(container, build_parser().parse_args(["link", "--code", "c"]))

        assert output == UserMessages.LINKED
        container.token_manager.link_account.assert_awaited_once_with("local", "c", None)

    @pytest.mark.asyncio
    async def test_link_failure(self):
        container = _mock_container()
        container.token_manager.link_account.side_effect = AuthExchangeError("bad code", 400)

        output = await run_command(container, build_parser().parse_args(["link", "--code", "c"]))

        assert output == UserMessages.LINK_FAILED.format(detail="bad code")

    @pytest.mark.asyncio
    async def test_unlink(self):
        container = _mock_container()
        assert await run_command(container, build_parser().parse_args(["unlink"])) == (
            UserMessages.UNLINKED
        )

        container.token_manager.unlink.return_value = False
        assert await run_command(container, build_parser().parse_args(["unlink"])) == (
            UserMessages.NOT_LINKED
        )

    @pytest.mark.asyncio
    async def test_link_then_play_end_to_end(self):
        """Link with a code, then play through the real orchestrator against fakes."""
        catalog = FakeCatalogClient()
        catalog.search_results = [make_search_result("spotify:track:t0", "Prelude in C")]
        settings = Settings(
            _env_file=None,
            spotify=SpotifySettings(client_id="id", client_secret="secret"),
            database=DatabaseSettings(enabled=False),
        )
        container = Container(
            settings=settings,
            _catalog_client=catalog,
            _authorization_server=FakeAuthorizationServer(),
        )
        parser = build_parser()

        linked = await run_command(container, parser.parse_args(["link", "--code", "abc"]))
        played = await run_command(container, parser.parse_args(["play", "prelude"]))

        assert linked == UserMessages.LINKED
        assert played.startswith("Now playing: **Prelude in C**")
        assert catalog.calls[-1] == ("play", "access-abc")


class TestMainFunction:
    """Tests for main entry point function."""

    def _settings(self, configured: bool = True) -> Settings:
        spotify = (
            SpotifySettings(client_id="id", client_secret="secret")
            if configured
            else SpotifySettings()
        )
        return Settings(_env_file=None, spotify=spotify)

    def test_main_returns_error_when_not_configured(self, capsys):
        """Should return error code when the Spotify client credentials are missing."""
        with (
            patch(
                "music_conductor.config.settings.get_settings",
                return_value=self._settings(configured=False),
            ),
            patch("music_conductor.main.setup_logging"),
        ):
            exit_code = main(["status"])

        assert exit_code == 1
        assert UserMessages.NOT_CONFIGURED in capsys.readouterr().out

    def test_main_successful_run(self, capsys):
        """Should print the command output and return 0."""
        settings = self._settings()
        with (
            patch("music_conductor.config.settings.get_settings", return_value=settings),
            patch("music_conductor.main.setup_logging") as mock_setup,
            patch("music_conductor.config.container.create_container") as mock_create,
            patch("music_conductor.main._run", AsyncMock(return_value="Playback paused.")),
        ):
            exit_code = main(["pause"])

        assert exit_code == 0
        assert capsys.readouterr().out.strip() == "Playback paused."
        mock_setup.assert_called_once_with("INFO")
        mock_create.assert_called_once_with(settings)

    def test_main_handles_keyboard_interrupt(self):
        """Should return 0 on KeyboardInterrupt."""
        with (
            patch("music_conductor.config.settings.get_settings", return_value=self._settings()),
            patch("music_conductor.main.setup_logging"),
            patch("music_conductor.config.container.create_container"),
            patch("music_conductor.main._run", MagicMock()),
            patch("music_conductor.main.asyncio.run", side_effect=KeyboardInterrupt()),
        ):
            exit_code = main(["pause"])

        assert exit_code == 0

    def test_main_handles_exception(self):
        """Should return error code on unhandled exception."""
        with (
            patch("music_conductor.config.settings.get_settings", return_value=self._settings()),
            patch("music_conductor.main.setup_logging"),
            patch("music_conductor.config.container.create_container"),
            patch("music_conductor.main._run", AsyncMock(side_effect=RuntimeError("crashed"))),
        ):
            exit_code = main(["pause"])

        assert exit_code == 1
