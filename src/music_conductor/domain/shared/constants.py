"""Centralized constants for provider endpoints, OAuth grant types, and database schema."""

from __future__ import annotations


class SpotifyEndpoints:
    """Spotify Web API and Accounts service paths."""

    ACCOUNTS_BASE_URL = "https://accounts.spotify.com"
    API_BASE_URL = "https://api.spotify.com/v1"

    AUTHORIZE = "/authorize"
    TOKEN = "/api/token"

    ME = "/me"
    SEARCH = "/search"
    ALBUM_TRACKS = "/albums/{album_id}/tracks"
    MY_PLAYLISTS = "/me/playlists"
    PLAYER = "/me/player"
    PLAYER_DEVICES = "/me/player/devices"
    PLAYER_PLAY = "/me/player/play"
    PLAYER_PAUSE = "/me/player/pause"
    PLAYER_NEXT = "/me/player/next"
    PLAYER_PREVIOUS = "/me/player/previous"
    PLAYER_VOLUME = "/me/player/volume"

    PLAYLIST_URI = "spotify:playlist:{playlist_id}"

    DEFAULT_SCOPE = (
        "user-read-private playlist-read-private playlist-read-collaborative "
        "user-read-playback-state user-modify-playback-state user-read-currently-playing"
    )

    NO_ACTIVE_DEVICE_REASON = "NO_ACTIVE_DEVICE"


class GrantTypes:
    """OAuth2 grant type identifiers for the token endpoint."""

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"


class DatabaseTables:
    """Database table names."""

    CREDENTIALS = "spotify_credentials"


class SQLPragmas:
    """SQLite PRAGMA statements applied to each connection."""

    JOURNAL_MODE_WAL = "PRAGMA journal_mode=WAL"
    FOREIGN_KEYS_ON = "PRAGMA foreign_keys=ON"
    BUSY_TIMEOUT = "PRAGMA busy_timeout={timeout}"
    TABLE_INFO = "PRAGMA table_info({table})"
