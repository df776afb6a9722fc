"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Configuration
    NOT_CONFIGURED = "Spotify client id/secret are not configured"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"

    # Credentials
    NOT_LINKED = "User '{user_id}' has not linked a Spotify account"
    EMPTY_TOKEN_RESPONSE = "Empty response from Spotify token endpoint"
    MISSING_ACCESS_TOKEN = "Spotify token response did not include an access_token"
    TOKEN_EXCHANGE_FAILED = "Spotify rejected the authorization code ({status}): {detail}"
    TOKEN_REFRESH_FAILED = "Spotify rejected the token refresh ({status}): {detail}"
    TOKEN_ENDPOINT_UNREACHABLE = "Spotify token endpoint unreachable: {detail}"
    REFRESH_BUDGET_EXHAUSTED = (
        "Token refresh failed {failures} times in a row for user '{user_id}'; account unlinked"
    )

    # Catalog / player
    NO_ACTIVE_DEVICE = "No active device found"
    NO_RESULTS = "No tracks found for: {query}"
    PLAYLIST_NOT_FOUND = "Could not find a playlist named '{name}'"
    PROVIDER_UNREACHABLE = "Spotify API unreachable: {detail}"
    PROVIDER_HTTP_ERROR = "Spotify API error ({status}): {detail}"
    DEVICE_NOT_FOUND = "No device named '{name}'"
    EMPTY_PLAYLIST_NAME = "A new playlist needs a name"

    # Domain validation
    EMPTY_MOVEMENT_SET = "A movement set needs at least one track"
    MIXED_ALBUM_MOVEMENTS = "Movement set tracks must come from one album listing"
    INTENT_TARGET_REQUIRED = "Playback intent needs either target URIs or a context URI"
    INTENT_TARGET_EXCLUSIVE = "Playback intent cannot carry both target URIs and a context URI"
    INVALID_TRANSITION = "Cannot move playback session from {current} to {target}"


class LogTemplates:
    """Log message templates, used with %-style logger arguments."""

    # Lifecycle
    APP_STARTING = "Starting music-conductor ({environment})"
    APP_FATAL_ERROR = "Fatal error: %s"
    CONFIG_NOT_CONFIGURED = "Spotify integration is not configured; client id/secret missing"

    # Database
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"
    TABLE_MIGRATED = "Migrated table %s: added column %s"

    # Credentials
    CREDENTIAL_STORED = "Stored Spotify credential for user %s (expires %s)"
    CREDENTIAL_REMOVED = "Removed Spotify credential for user %s"
    CREDENTIAL_LOADED = "Loaded Spotify credential for user %s from repository"
    TOKEN_CACHE_HIT = "Using cached access token for user %s"
    TOKEN_REFRESHING = "Refreshing Spotify token for user %s"
    TOKEN_REFRESH_REUSED = "Token for user %s was refreshed by a concurrent request"
    TOKEN_REFRESH_JOINED = "Waiting on the refresh already running for user %s"
    TOKEN_REFRESHED = "Refreshed Spotify token for user %s (expires %s)"
    TOKEN_REFRESH_FAILED = "Token refresh failed for user %s (%d/%d): %s"
    TOKEN_REFRESH_BUDGET_EXHAUSTED = "Refresh budget exhausted for user %s; unlinking"
    ACCOUNT_LINKED = "Linked Spotify for user %s (Spotify: %s)"
    ACCOUNT_UNLINKED = "Unlinked Spotify for user %s"

    # HTTP
    HTTP_REQUEST = "Spotify %s %s"
    HTTP_ERROR = "Spotify %s %s failed with %s: %s"
    HTTP_TRANSPORT_ERROR = "Spotify %s %s transport error: %s"

    # Orchestration
    BEST_MATCH = "Best match for '%s': %s (score: %d)"
    LOW_CONFIDENCE_MATCH = "Low confidence match for '%s': %s (score: %d)"
    MOVEMENTS_FOUND = "Found %d movements for '%s'"
    PLAY_STARTED = "Started playing %d track(s) for user %s"
    PLAYLIST_STARTED = "Started playing playlist '%s' for user %s"
    PLAYLIST_CREATED = "Created playlist '%s' for user %s"
    RETRY_AFTER_REFRESH = "Spotify rejected token for user %s; refreshing and retrying once"
    OPERATION_FAILED = "%s failed for user %s: %s"


class UserMessages:
    """Human-readable strings returned across the presentation boundary."""

    NOT_CONFIGURED = "Spotify integration is not configured on this server."
    NOT_LINKED = (
        "You haven't linked your Spotify account yet. "
        "Please link your Spotify account and try again."
    )
    RELINK = "Spotify access has expired or was revoked. Please relink your Spotify account."
    LINKED = "Your Spotify account is linked and ready to use!"
    LINK_FAILED = "Failed to link your Spotify account: {detail}"
    UNLINKED = "Your Spotify account has been unlinked."
    AUTHORIZE = "Open this URL to link your Spotify account:\n{url}"
    NO_ACTIVE_DEVICE = (
        "No active Spotify device found. Please open Spotify on one of your devices first."
    )
    NO_RESULTS = "No tracks found for: {query}"
    PLAYLIST_NOT_FOUND = (
        "Could not find a playlist named '{name}'. Ask for your playlists to see what's available."
    )
    PROVIDER_FAILURE = "Failed to {action}: {detail}"

    NOW_PLAYING = "Now playing: **{title}** by {artist} (from {album}){movements}"
    MOVEMENTS_SUFFIX = " ({count} movements)"
    LOW_CONFIDENCE = "This was the closest match I could find; it may not be the exact recording."
    NOW_PLAYING_PLAYLIST = "Now playing playlist: **{name}** ({count} tracks)"
    PAUSED = "Playback paused."
    RESUMED = "Playback resumed."
    SKIPPED_TO = "Skipped to: **{title}** by {artist}"
    SKIPPED = "Skipped to next track."
    PREVIOUS = "Went back to the previous track."
    VOLUME_SET = "Volume set to {volume}%."
    TRANSFERRED = "Playback moved to **{name}**."
    UNKNOWN_ARTIST = "Unknown"
    UNKNOWN_DEVICE = "Unknown device"

    CURRENTLY = "{status}: **{title}** by {artist} (on {device})"
    NOTHING_PLAYING = "Nothing is currently playing. Start playback on a Spotify device first."

    DEVICES_HEADER = "Available Spotify devices:\n"
    DEVICE_LINE = "- **{name}** ({type}){active}"
    DEVICE_ACTIVE_MARK = " (active)"
    NO_DEVICES = "No Spotify devices found. Make sure Spotify is open on at least one device."

    PLAYLISTS_HEADER = "Your Spotify playlists:\n"
    PLAYLIST_LINE = "- **{name}** ({count} tracks)"
    NO_PLAYLISTS = "You don't have any playlists yet."
    PLAYLIST_CREATED = "Created playlist: **{name}**"

    SEARCH_HEADER = "Found tracks:\n"
    SEARCH_LINE = "{index}. **{title}** by {artist}"
