"""Catalog domain: search hits, relevance scoring, and movement grouping."""

from music_conductor.domain.catalog.entities import (
    AlbumTrack,
    DeviceState,
    MovementSet,
    NowPlaying,
    PlaybackIntent,
    PlaylistSummary,
    ScoredResult,
    SearchResult,
)
from music_conductor.domain.catalog.movements import MovementResolver, parse_title, work_stem
from music_conductor.domain.catalog.scoring import MatchScorer, ScoringVocabulary, ScoringWeights

__all__ = [
    "AlbumTrack",
    "DeviceState",
    "MovementSet",
    "NowPlaying",
    "PlaybackIntent",
    "PlaylistSummary",
    "ScoredResult",
    "SearchResult",
    "MatchScorer",
    "ScoringVocabulary",
    "ScoringWeights",
    "MovementResolver",
    "parse_title",
    "work_stem",
]
