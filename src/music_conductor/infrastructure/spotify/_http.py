"""Shared helpers for the Spotify httpx adapters."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from music_conductor.domain.shared.constants import SpotifyEndpoints
from music_conductor.domain.shared.exceptions import NoActiveDeviceError, ProviderError
from music_conductor.domain.shared.messages import ErrorMessages

logger = logging.getLogger(__name__)

_NO_ACTIVE_DEVICE_TEXT = "no active device"


def error_detail(response: httpx.Response) -> tuple[str, str | None]:
    """Extract ``(message, reason)`` from a Spotify error body.

    The Web API nests errors as ``{"error": {"status", "message", "reason"}}``
    while the Accounts service uses ``{"error", "error_description"}``.
    """
    try:
        payload: Any = response.json()
    except ValueError:
        return (response.text.strip() or response.reason_phrase or "unknown error", None)

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            return (str(error.get("message") or response.reason_phrase), error.get("reason"))
        if isinstance(error, str):
            return (str(payload.get("error_description") or error), None)
    return (response.reason_phrase or "unknown error", None)


def raise_for_provider_status(response: httpx.Response) -> None:
    """Translate a non-2xx Web API response into a domain exception."""
    if response.is_success:
        return

    message, reason = error_detail(response)
    if response.status_code == 404 and (
        reason == SpotifyEndpoints.NO_ACTIVE_DEVICE_REASON
        or _NO_ACTIVE_DEVICE_TEXT in message.lower()
    ):
        raise NoActiveDeviceError()

    raise ProviderError(
        ErrorMessages.PROVIDER_HTTP_ERROR.format(status=response.status_code, detail=message),
        status_code=response.status_code,
        reason=reason,
    )


def json_body(response: httpx.Response) -> dict[str, Any]:
    """Decode a JSON object body; empty or non-object bodies become ``{}``."""
    if not response.content:
        return {}
    try:
        payload = response.json()
    except ValueError as exc:
        raise ProviderError(
            ErrorMessages.PROVIDER_HTTP_ERROR.format(
                status=response.status_code, detail="invalid JSON body"
            ),
            status_code=response.status_code,
        ) from exc
    return payload if isinstance(payload, dict) else {}
