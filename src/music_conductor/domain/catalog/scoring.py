"""Relevance scoring of search hits against the user's free-text request.

Scoring is a pure function of a ``SearchResult`` and the query. The word
lists it rewards or penalises live in a ``ScoringVocabulary`` so another
genre can supply its own table without touching the algorithm.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, field_validator

from music_conductor.domain.catalog.entities import ScoredResult, SearchResult

DEFAULT_LOW_CONFIDENCE_THRESHOLD: Final[int] = 30

_CLASSICAL_FORM_TERMS: Final[tuple[str, ...]] = (
    "symphony",
    "sonata",
    "concerto",
    "quartet",
    "opus",
    "op.",
    "no.",
    "major",
    "minor",
    "orchestra",
    "philharmonic",
    "chamber",
)

_CLASSICAL_PERFORMERS: Final[tuple[str, ...]] = (
    # violin
    "perlman",
    "heifetz",
    "oistrakh",
    "menuhin",
    "anne-sophie mutter",
    "hilary hahn",
    "joshua bell",
    "kremer",
    "zukerman",
    # piano
    "argerich",
    "horowitz",
    "rubinstein",
    "glenn gould",
    "pollini",
    "barenboim",
    "ashkenazy",
    "kissin",
    "brendel",
    "richter",
    "lang lang",
    # cello
    "yo-yo ma",
    "rostropovich",
    "du pré",
    "du pre",
    # conductors
    "karajan",
    "bernstein",
    "abbado",
    "rattle",
    "solti",
    "kleiber",
    "furtwängler",
    "furtwangler",
    # ensembles
    "berliner philharmoniker",
    "wiener philharmoniker",
    "berlin philharmonic",
    "vienna philharmonic",
    "london symphony",
    "emerson string quartet",
    "alban berg quartett",
    "academy of st martin",
)

_INSTRUCTIONAL_MARKERS: Final[tuple[str, ...]] = (
    "tutorial",
    "lesson",
    "how to",
    "learn",
)


class ScoringWeights(BaseModel):
    """Point values applied by :class:`MatchScorer`."""

    model_config = ConfigDict(frozen=True, strict=True)

    min_token_length: int = Field(default=3, ge=1)
    token_match: int = 10
    title_token_match: int = 15
    form_term: int = 5
    performer: int = 20
    instructional_penalty: int = 30


class ScoringVocabulary(BaseModel):
    """Curated term tables; all entries are matched lower-cased as substrings of the title."""

    model_config = ConfigDict(frozen=True, strict=True)

    form_terms: tuple[str, ...] = ()
    performers: tuple[str, ...] = ()
    instructional_markers: tuple[str, ...] = ()
    weights: ScoringWeights = Field(default_factory=ScoringWeights)

    @field_validator("form_terms", "performers", "instructional_markers", mode="before")
    @classmethod
    def _normalize_terms(cls, v: Iterable[str]) -> tuple[str, ...]:
        seen: dict[str, None] = {}
        for term in v:
            cleaned = " ".join(str(term).lower().split())
            if cleaned:
                seen.setdefault(cleaned, None)
        return tuple(seen)

    @classmethod
    def classical(cls) -> ScoringVocabulary:
        """Default table for classical repertoire."""
        return cls(
            form_terms=_CLASSICAL_FORM_TERMS,
            performers=_CLASSICAL_PERFORMERS,
            instructional_markers=_INSTRUCTIONAL_MARKERS,
        )


def query_tokens(query: str, min_length: int = 3) -> list[str]:
    """Lower-cased, de-duplicated whitespace tokens of at least ``min_length`` chars.

    Short tokens ("in", "no", "op") carry no signal and are dropped.
    """
    tokens: dict[str, None] = {}
    for raw in query.lower().split():
        if len(raw) >= min_length:
            tokens.setdefault(raw, None)
    return list(tokens)


class MatchScorer:
    """Ranks raw search results against the original query."""

    def __init__(
        self,
        vocabulary: ScoringVocabulary | None = None,
        *,
        low_confidence_threshold: int = DEFAULT_LOW_CONFIDENCE_THRESHOLD,
    ) -> None:
        self._vocabulary = vocabulary or ScoringVocabulary.classical()
        self._low_confidence_threshold = low_confidence_threshold

    @property
    def vocabulary(self) -> ScoringVocabulary:
        return self._vocabulary

    @property
    def low_confidence_threshold(self) -> int:
        return self._low_confidence_threshold

    def score(self, result: SearchResult, query: str) -> int:
        weights = self._vocabulary.weights
        title = result.title.lower()
        haystack = f"{title} {result.artist_name.lower()} {result.description.lower()}"

        total = 0
        for token in query_tokens(query, weights.min_token_length):
            if token in haystack:
                total += weights.token_match
                if token in title:
                    total += weights.title_token_match

        total += weights.form_term * _count_occurrences(self._vocabulary.form_terms, title)
        total += weights.performer * _count_present(self._vocabulary.performers, title)

        if _count_present(self._vocabulary.instructional_markers, title):
            total -= weights.instructional_penalty

        return total

    def rank(self, results: Sequence[SearchResult], query: str) -> list[ScoredResult]:
        """Score every result; descending score, ties in original search order."""
        scored = [
            ScoredResult(result=r, match_score=self.score(r, query), search_rank=i)
            for i, r in enumerate(results)
        ]
        return sorted(scored, key=lambda s: s.sort_key)

    def best(self, results: Sequence[SearchResult], query: str) -> ScoredResult | None:
        ranked = self.rank(results, query)
        return ranked[0] if ranked else None

    def is_low_confidence(self, scored: ScoredResult) -> bool:
        return scored.match_score < self._low_confidence_threshold


def _count_present(terms: Iterable[str], text: str) -> int:
    return sum(1 for term in terms if term in text)


def _count_occurrences(terms: Iterable[str], text: str) -> int:
    """Non-overlapping occurrences, so "Sonata for Two: Sonata No. 2" counts sonata twice."""
    return sum(text.count(term) for term in terms)
