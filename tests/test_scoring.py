"""
Unit Tests for Search Result Scoring

Tests for:
- Query tokenization (minimum length, de-duplication)
- Token, title, form-term and performer bonuses
- Instructional penalty
- Stable ranking and best-match selection
- Low-confidence classification
- Injectable vocabularies
"""

import pytest

from conftest import make_search_result
from music_conductor.domain.catalog.scoring import (
    MatchScorer,
    ScoringVocabulary,
    ScoringWeights,
    query_tokens,
)


def _result(title: str, *, artist: str = "X", album: str = "", uri: str = "spotify:track:a"):
    return make_search_result(uri, title, artist=artist, album_name=album)


@pytest.fixture
def scorer() -> MatchScorer:
    return MatchScorer()


class TestQueryTokens:
    """Tests for query tokenization."""

    def test_drops_short_tokens(self):
        assert query_tokens("No 1 in G op Brahms") == ["brahms"]

    def test_lowercases_and_deduplicates(self):
        assert query_tokens("Sonata SONATA sonata Violin") == ["sonata", "violin"]

    def test_custom_min_length(self):
        assert query_tokens("op no in", min_length=2) == ["op", "no", "in"]

    def test_empty_query(self):
        assert query_tokens("   ") == []


class TestMatchScorer:
    """Tests for MatchScorer.score."""

    def test_token_in_title_scores_both_bonuses(self, scorer):
        """A token found in the title earns the haystack and the title bonus."""
        assert scorer.score(_result("Prelude"), "prelude") == 25

    def test_token_only_in_album_scores_haystack_bonus(self, scorer):
        result = _result("Prelude", album="Brahms Collection")
        assert scorer.score(result, "brahms prelude") == 35

    def test_token_only_in_artist_scores_haystack_bonus(self, scorer):
        result = _result("Prelude", artist="Itzhak Perlman")
        # "perlman" matches the artist, not the title: +10 only
        assert scorer.score(result, "perlman") == 10

    def test_no_tokens_means_only_vocabulary_bonuses(self, scorer):
        """Queries made only of short tokens fall back to form-term bonuses."""
        assert scorer.score(_result("Sonata No. 1"), "no op in") == 10

    def test_score_non_decreasing_with_more_matching_tokens(self, scorer):
        result = _result("Brahms Violin Sonata")
        scores = [
            scorer.score(result, query)
            for query in ("brahms", "brahms violin", "brahms violin sonata")
        ]
        assert scores == sorted(scores)
        assert scores[0] < scores[-1]

    def test_duplicate_query_tokens_count_once(self, scorer):
        result = _result("Prelude")
        assert scorer.score(result, "prelude prelude") == scorer.score(result, "prelude")

    def test_performer_bonus_is_exact(self, scorer):
        """A curated performer in the title adds exactly the performer bonus."""
        with_performer = _result("Prelude - Perlman")
        without_performer = _result("Prelude - Somebody")

        diff = scorer.score(with_performer, "prelude") - scorer.score(without_performer, "prelude")

        assert diff == ScoringWeights().performer == 20

    def test_form_terms_counted_per_occurrence(self, scorer):
        assert scorer.score(_result("Sonata Sonata"), "") == 10
        assert scorer.score(_result("Symphony in C Major"), "") == 10

    def test_performer_counted_once_per_name(self, scorer):
        assert scorer.score(_result("Perlman plays Perlman"), "") == 20

    def test_instructional_penalty(self, scorer):
        plain = scorer.score(_result("Prelude"), "prelude")
        tutorial = scorer.score(_result("How to play Prelude"), "prelude")

        assert plain - tutorial == 30

    def test_instructional_penalty_applies_once(self, scorer):
        assert scorer.score(_result("Lesson: learn this tutorial"), "") == -30

    def test_case_insensitive(self, scorer):
        assert scorer.score(_result("PRELUDE"), "Prelude") == 25


class TestRanking:
    """Tests for ranking and best-match selection."""

    def test_rank_descending_by_score(self, scorer):
        results = [
            _result("Something else", uri="spotify:track:a"),
            _result("Violin Sonata", uri="spotify:track:b"),
        ]
        ranked = scorer.rank(results, "violin sonata")

        assert [s.result.uri for s in ranked] == ["spotify:track:b", "spotify:track:a"]
        assert ranked[0].match_score > ranked[1].match_score

    def test_rank_ties_preserve_search_order(self, scorer):
        results = [_result("Prelude", uri=f"spotify:track:{c}") for c in "abc"]
        ranked = scorer.rank(results, "prelude")

        assert [s.result.uri for s in ranked] == [
            "spotify:track:a",
            "spotify:track:b",
            "spotify:track:c",
        ]
        assert [s.search_rank for s in ranked] == [0, 1, 2]

    def test_best_of_empty_is_none(self, scorer):
        assert scorer.best([], "anything") is None

    def test_best_picks_top_ranked(self, scorer):
        results = [
            _result("Lesson: Brahms Sonata", uri="spotify:track:tutorial"),
            _result("Brahms Sonata", uri="spotify:track:real"),
        ]
        assert scorer.best(results, "brahms sonata").result.uri == "spotify:track:real"

    def test_low_confidence_threshold(self, scorer):
        weak = scorer.best([_result("Prelude")], "prelude")
        strong = scorer.best([_result("Violin Sonata")], "violin sonata")

        assert weak.match_score == 25
        assert scorer.is_low_confidence(weak) is True
        assert scorer.is_low_confidence(strong) is False

    def test_custom_threshold(self):
        scorer = MatchScorer(low_confidence_threshold=10)
        best = scorer.best([_result("Prelude")], "prelude")
        assert scorer.is_low_confidence(best) is False


class TestScoringVocabulary:
    """Tests for injectable vocabularies."""

    def test_entries_are_normalized(self):
        vocab = ScoringVocabulary(form_terms=["Sonata", " sonata ", "SONATA", "Raga"])
        assert vocab.form_terms == ("sonata", "raga")

    def test_classical_defaults(self):
        vocab = ScoringVocabulary.classical()
        assert "sonata" in vocab.form_terms
        assert "perlman" in vocab.performers
        assert "tutorial" in vocab.instructional_markers

    def test_scorer_uses_injected_vocabulary(self):
        vocab = ScoringVocabulary(form_terms=["raga"], performers=["Ravi Shankar"])
        scorer = MatchScorer(vocab)

        assert scorer.vocabulary is vocab
        assert scorer.score(_result("Raga Jog - Ravi Shankar"), "") == 25
        # Classical terms no longer score.
        assert scorer.score(_result("Sonata - Perlman"), "") == 0

    def test_custom_weights(self):
        vocab = ScoringVocabulary(
            performers=["perlman"], weights=ScoringWeights(performer=50)
        )
        assert MatchScorer(vocab).score(_result("Perlman"), "") == 50
