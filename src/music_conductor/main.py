#!/usr/bin/env python3
"""Main entry point for music-conductor.

A small command-line front end over the playback tools: each subcommand runs
one operation for ``--user`` and prints the string the chat layer would show.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import logging.config
import secrets
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from music_conductor.domain.shared.exceptions import CredentialError
from music_conductor.domain.shared.messages import LogTemplates, UserMessages

if TYPE_CHECKING:
    from music_conductor.config.container import Container

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"

DEFAULT_USER = "local"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.warning(
            "Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH
        )
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    logging.getLogger().setLevel(resolved_level)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="music-conductor",
        description="Control Spotify playback for a linked user.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s authorize-url              # Print the consent URL
  %(prog)s link --code AQD...         # Finish linking with the returned code
  %(prog)s play brahms violin sonata 1 perlman
  %(prog)s playlist evening
  %(prog)s next
        """,
    )
    parser.add_argument(
        "--user",
        "-u",
        default=DEFAULT_USER,
        help=f"application user id (default: {DEFAULT_USER})",
    )

    subparsers = parser.add_subparsers(dest="action", required=True)

    authorize = subparsers.add_parser("authorize-url", help="print the Spotify consent URL")
    authorize.add_argument("--state", default=None, help="opaque state echoed back on redirect")
    authorize.add_argument("--redirect-uri", default=None)

    link = subparsers.add_parser("link", help="exchange an authorization code")
    link.add_argument("--code", required=True)
    link.add_argument("--redirect-uri", default=None)

    subparsers.add_parser("unlink", help="forget the user's Spotify credential")
    subparsers.add_parser("status", help="show whether the user is linked")

    play = subparsers.add_parser("play", help="play the best match for a request")
    play.add_argument("query", nargs="+")

    playlist = subparsers.add_parser("playlist", help="play one of the user's playlists")
    playlist.add_argument("name", nargs="+")

    search = subparsers.add_parser("search", help="list ranked matches without playing")
    search.add_argument("query", nargs="+")

    subparsers.add_parser("pause", help="pause playback")
    subparsers.add_parser("resume", help="resume playback")
    subparsers.add_parser("next", help="skip to the next track")
    subparsers.add_parser("previous", help="go back to the previous track")
    subparsers.add_parser("now-playing", help="show the current track")
    subparsers.add_parser("devices", help="list Spotify Connect devices")
    subparsers.add_parser("playlists", help="list the user's playlists")

    create = subparsers.add_parser("create-playlist", help="create an empty private playlist")
    create.add_argument("name", nargs="+")
    create.add_argument("--description", default="")

    volume = subparsers.add_parser("volume", help="set the device volume (0-100)")
    volume.add_argument("percent", type=int)

    transfer = subparsers.add_parser("transfer", help="move playback to another device")
    transfer.add_argument("device", nargs="+")

    return parser


async def run_command(container: Container, args: argparse.Namespace) -> str:
    """Dispatch one parsed subcommand and return the text to print."""
    user = args.user
    tools = container.tools
    tokens = container.token_manager

    if args.action == "authorize-url":
        state = args.state or secrets.token_urlsafe(16)
        return UserMessages.AUTHORIZE.format(url=tokens.authorization_url(state, args.redirect_uri))
    if args.action == "link":
        try:
            await tokens.link_account(user, args.code, args.redirect_uri)
        except CredentialError as exc:
            return UserMessages.LINK_FAILED.format(detail=exc.message)
        return UserMessages.LINKED
    if args.action == "unlink":
        return UserMessages.UNLINKED if await tokens.unlink(user) else UserMessages.NOT_LINKED
    if args.action == "status":
        return await tools.status(user)
    if args.action == "play":
        return await tools.play(user, " ".join(args.query))
    if args.action == "playlist":
        return await tools.play_playlist(user, " ".join(args.name))
    if args.action == "search":
        return await tools.search(user, " ".join(args.query))
    if args.action == "pause":
        return await tools.pause(user)
    if args.action == "resume":
        return await tools.resume(user)
    if args.action == "next":
        return await tools.skip(user)
    if args.action == "previous":
        return await tools.previous(user)
    if args.action == "now-playing":
        return await tools.now_playing(user)
    if args.action == "devices":
        return await tools.devices(user)
    if args.action == "playlists":
        return await tools.playlists(user)
    if args.action == "create-playlist":
        return await tools.create_playlist(user, " ".join(args.name), args.description)
    if args.action == "volume":
        return await tools.volume(user, args.percent)
    if args.action == "transfer":
        return await tools.transfer(user, " ".join(args.device))
    raise ValueError(f"Unknown action: {args.action}")


async def _run(container: Container, args: argparse.Namespace) -> str:
    await container.initialize()
    try:
        return await run_command(container, args)
    finally:
        await container.shutdown()


def main(argv: list[str] | None = None) -> int:
    from music_conductor.config.settings import get_settings

    args = build_parser().parse_args(argv)

    settings = get_settings()
    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    if not settings.spotify.is_configured:
        logger.error(LogTemplates.CONFIG_NOT_CONFIGURED)
        print(UserMessages.NOT_CONFIGURED)
        return 1

    logger.debug(LogTemplates.APP_STARTING.format(environment=settings.environment))

    from music_conductor.config.container import create_container

    container = create_container(settings)

    try:
        output = asyncio.run(_run(container, args))
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1

    print(output)
    return 0


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
