"""Auth domain: credentials, token grants, and their repository port."""

from music_conductor.domain.auth.entities import (
    Credential,
    ProviderProfile,
    RefreshFailures,
    TokenGrant,
)
from music_conductor.domain.auth.repository import CredentialRepository

__all__ = [
    "Credential",
    "TokenGrant",
    "ProviderProfile",
    "RefreshFailures",
    "CredentialRepository",
]
