"""Exception taxonomy for credential, catalog, and playback failures."""

from __future__ import annotations

from music_conductor.domain.shared.messages import ErrorMessages


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class ValidationError(DomainError):
    """Raised when domain validation fails."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="VALIDATION_ERROR")
        self.field = field


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class IntegrationNotConfiguredError(DomainError):
    """Raised when the provider client id/secret are missing."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or ErrorMessages.NOT_CONFIGURED, code="NOT_CONFIGURED")


# ── Credential errors ───────────────────────────────────────────────


class CredentialError(DomainError):
    """Base for errors that mean the user must (re)link their account."""


class NotLinkedError(CredentialError):
    """No credential is stored for the user.

    ``revoked`` is set when the link was just dropped because refreshing kept
    failing, as opposed to the user never having linked.
    """

    def __init__(self, user_id: str, message: str | None = None, *, revoked: bool = False) -> None:
        super().__init__(
            message or ErrorMessages.NOT_LINKED.format(user_id=user_id), code="NOT_LINKED"
        )
        self.user_id = user_id
        self.revoked = revoked


class AuthExchangeError(CredentialError):
    """The authorization-code exchange was rejected or malformed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, code="AUTH_EXCHANGE_FAILED")
        self.status_code = status_code


class AuthRefreshError(CredentialError):
    """The refresh-token grant failed.

    Usually transient; the token service only unlinks after the configured
    retry budget of consecutive failures is used up.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message, code="AUTH_REFRESH_FAILED")
        self.status_code = status_code


# ── Provider errors ─────────────────────────────────────────────────


class ProviderError(DomainError):
    """Any other non-2xx response or transport failure from the provider."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        reason: str | None = None,
    ) -> None:
        super().__init__(message, code="PROVIDER_ERROR")
        self.status_code = status_code
        self.reason = reason

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class NoActiveDeviceError(ProviderError):
    """The provider reports no controllable playback device."""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(
            message or ErrorMessages.NO_ACTIVE_DEVICE, status_code=404, reason="NO_ACTIVE_DEVICE"
        )
        self.code = "NO_ACTIVE_DEVICE"


# ── Empty-result conditions ─────────────────────────────────────────


class NoResultsError(DomainError):
    """A search returned nothing."""

    def __init__(self, query: str) -> None:
        super().__init__(ErrorMessages.NO_RESULTS.format(query=query), code="NO_RESULTS")
        self.query = query


class PlaylistNotFoundError(DomainError):
    """No playlist matched the requested name exactly or by substring."""

    def __init__(self, name: str) -> None:
        super().__init__(
            ErrorMessages.PLAYLIST_NOT_FOUND.format(name=name), code="PLAYLIST_NOT_FOUND"
        )
        self.name = name
