"""Reusable Pydantic Annotated types for domain-wide validation.

Every constrained type used across the package is defined here once,
so models can simply annotate their fields::

    from music_conductor.domain.shared.types import NonEmptyStr, TrackIndex

    class MyModel(BaseModel):
        track_index: TrackIndex
        name: NonEmptyStr
"""

from __future__ import annotations

from typing import Annotated

from pydantic import Field

# ── Numeric constraints ─────────────────────────────────────────────

NonNegativeInt = Annotated[int, Field(ge=0)]
"""Integer >= 0."""

PositiveInt = Annotated[int, Field(gt=0)]
"""Integer > 0."""

VolumePercent = Annotated[int, Field(ge=0, le=100)]
"""Device volume in percent: 0 … 100."""

TrackIndex = Annotated[int, Field(ge=0)]
"""Zero-based position of a track within its album listing."""


# ── String constraints ──────────────────────────────────────────────

NonEmptyStr = Annotated[str, Field(min_length=1)]
"""String with at least one character."""

UserIdStr = Annotated[str, Field(min_length=1, max_length=255)]
"""Opaque authenticated-user identifier handed over by the session layer."""

