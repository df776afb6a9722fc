"""Delegated-access credentials and token-endpoint responses."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator

from music_conductor.domain.shared.datetime_utils import expires_in, utcnow
from music_conductor.domain.shared.types import NonEmptyStr, NonNegativeInt, UserIdStr


class Credential(BaseModel):
    """Access/refresh token pair for one linked user.

    Replaced wholesale on refresh; never mutated in place.
    """

    model_config = ConfigDict(frozen=True, strict=True)

    user_id: UserIdStr
    access_token: NonEmptyStr
    refresh_token: NonEmptyStr
    expires_at: datetime
    provider_user_id: str | None = None
    scope: str | None = None

    @field_validator("expires_at")
    @classmethod
    def _require_aware(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            raise ValueError("expires_at must be timezone-aware")
        return v

    def is_fresh(self, skew: timedelta, *, now: datetime | None = None) -> bool:
        """True while ``now + skew`` is still before the expiry."""
        return (now or utcnow()) + skew < self.expires_at

    def refreshed_with(self, grant: TokenGrant, *, now: datetime | None = None) -> Credential:
        """Apply a refresh grant, keeping the old refresh token if none was rotated in."""
        return self.model_copy(
            update={
                "access_token": grant.access_token,
                "refresh_token": grant.refresh_token or self.refresh_token,
                "expires_at": expires_in(grant.expires_in, now=now),
                "scope": grant.scope or self.scope,
            }
        )

    def with_provider_user(self, provider_user_id: str) -> Credential:
        return self.model_copy(update={"provider_user_id": provider_user_id})

    def __repr__(self) -> str:
        return (
            f"Credential(user_id={self.user_id!r}, expires_at={self.expires_at.isoformat()!r}, "
            f"provider_user_id={self.provider_user_id!r})"
        )


class TokenGrant(BaseModel):
    """Parsed token-endpoint response."""

    model_config = ConfigDict(frozen=True)

    access_token: NonEmptyStr
    token_type: str = "Bearer"
    expires_in: NonNegativeInt = 3600
    refresh_token: str | None = None
    scope: str | None = None

    def to_credential(self, user_id: str, *, now: datetime | None = None) -> Credential:
        if not self.refresh_token:
            raise ValueError("An authorization-code grant must include a refresh_token")
        return Credential(
            user_id=user_id,
            access_token=self.access_token,
            refresh_token=self.refresh_token,
            expires_at=expires_in(self.expires_in, now=now),
            scope=self.scope,
        )


class ProviderProfile(BaseModel):
    """The linked Spotify account's identity (``GET /me``)."""

    model_config = ConfigDict(frozen=True)

    user_id: NonEmptyStr
    display_name: str | None = None


class RefreshFailures(BaseModel):
    """Consecutive refresh failure count for one user."""

    model_config = ConfigDict(frozen=True, strict=True)

    count: NonNegativeInt = 0
    last_error: str | None = None
    last_failed_at: datetime | None = Field(default=None)

    def record(self, error: str) -> RefreshFailures:
        return RefreshFailures(count=self.count + 1, last_error=error, last_failed_at=utcnow())

    def exhausted(self, budget: int) -> bool:
        return self.count >= budget
