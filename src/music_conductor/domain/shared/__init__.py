"""
Shared Domain Kernel

Contains exceptions, message catalogues and constrained types shared by
the auth, catalog and playback packages.
"""

from music_conductor.domain.shared.exceptions import (
    AuthExchangeError,
    AuthRefreshError,
    CredentialError,
    DomainError,
    IntegrationNotConfiguredError,
    NoActiveDeviceError,
    NoResultsError,
    NotLinkedError,
    PlaylistNotFoundError,
    ProviderError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ValidationError",
    "IntegrationNotConfiguredError",
    "CredentialError",
    "NotLinkedError",
    "AuthExchangeError",
    "AuthRefreshError",
    "ProviderError",
    "NoActiveDeviceError",
    "NoResultsError",
    "PlaylistNotFoundError",
]
