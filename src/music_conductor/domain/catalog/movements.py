"""Grouping of consecutive album tracks into one multi-movement work.

Classical works are usually split across consecutive tracks
("Sonata No. 1: I. Allegro", "Sonata No. 1: II. Adagio", ...). Each title
is split into a *work stem* and a *movement marker* with the grammar
below, tried in order; the first rule that matches wins.

A. Trailing numbered marker::

       <stem> <sep> <numeral> ("." | ")") [<movement title>]

   ``<sep>`` is one of ``: - – — ,`` (surrounding spaces optional) and
   ``<numeral>`` is a roman numeral I..XXXIX (upper case) or a 1-2 digit
   arabic number. "Sonata No.1: I. Allegro" -> stem "Sonata No.1", movement 1.

   A roman numeral may also stand bare after a colon or dash, when it ends
   the title or is followed by another colon or dash::

       <stem> (":" | "-" | "–" | "—") <roman> [(":" | "-" | "–" | "—") <movement title>]

   "Suite in D: II - Air" -> stem "Suite in D", movement 2, and
   "Symphony No. 9 - IV" -> stem "Symphony No. 9", movement 4. Arabic
   numbers always need the "." or ")" so that "Mix - 10" stays a plain title.

B. Trailing movement word::

       <stem> [<sep>] ("Movement" | "Mvt." | "Mov." | "Satz") <numeral> [...]

   Case-insensitive. "Suite - Movement 2" -> stem "Suite", movement 2.

C. Leading marker::

       <numeral> ("." | ")") <movement title>

   The whole title names a movement and the stem is empty.
   "II. Adagio" -> stem "", movement 2.

D. Catalogued work followed by a tempo title::

       <stem containing Op./No./BWV/K./D./RV/WoO + number> ":" <movement title>

   "Violin Sonata No. 1, Op. 78: Vivace" -> stem "Violin Sonata No. 1, Op. 78",
   movement number unknown.

Titles matching none of the rules are not movements; their stem is the whole
title. Stems compare with case and all whitespace ignored, so "No.1" and
"No. 1" are the same work.

Grouping extends outwards from the matched track while neighbours are
movements with the same stem on the same disc. Empty stems (rule C) only
chain when their numbers are consecutive, otherwise two works printed as
bare "I. / II. / III." would merge.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from music_conductor.domain.catalog.entities import AlbumTrack, MovementSet

logger = logging.getLogger(__name__)

# ── Precompiled patterns ────────────────────────────────────────────────

_ROMAN: Final[str] = r"(?:X{1,3}(?:IX|IV|V?I{0,3})|IX|IV|V?I{1,3}|V)"
_NUMERAL: Final[str] = rf"(?P<num>{_ROMAN}|\d{{1,2}})"
_SEPARATOR: Final[str] = r"[:\-–—,]"
_DASH_OR_COLON: Final[str] = r"[:\-–—]"

_TRAILING_NUMBERED: Final[re.Pattern[str]] = re.compile(
    rf"^(?P<stem>.+?)\s*{_SEPARATOR}\s*{_NUMERAL}[.)](?:\s+(?P<name>.*))?$"
)
_TRAILING_BARE_ROMAN: Final[re.Pattern[str]] = re.compile(
    rf"^(?P<stem>.+?)\s*{_DASH_OR_COLON}\s*(?P<num>{_ROMAN})"
    rf"(?:\s*{_DASH_OR_COLON}\s*(?P<name>.*)|\s*)$"
)
_TRAILING_MOVEMENT_WORD: Final[re.Pattern[str]] = re.compile(
    rf"^(?P<stem>.+?)\s*{_SEPARATOR}?\s*\b(?:movement|mvt\.?|mov\.?|satz)\s*"
    rf"(?P<num>{_ROMAN}|\d{{1,2}})\b.*$",
    re.IGNORECASE,
)
_LEADING_NUMBERED: Final[re.Pattern[str]] = re.compile(
    rf"^\s*{_NUMERAL}[.)]\s+(?P<name>\S.*)$"
)
_CATALOGUED_WORK: Final[re.Pattern[str]] = re.compile(
    r"^(?P<stem>.*\b(?:op|no|bwv|k|d|rv|woo)\.?\s*\d+.*?):\s*(?P<name>\S.*)$",
    re.IGNORECASE,
)

_ROMAN_VALUES: Final[dict[str, int]] = {"I": 1, "V": 5, "X": 10}
_WHITESPACE: Final[re.Pattern[str]] = re.compile(r"\s+")
_TRAILING_PUNCT: Final[str] = " :,-–—"


@dataclass(frozen=True, slots=True)
class ParsedTitle:
    """A track title split into work stem and movement marker."""

    stem: str
    number: int | None
    is_movement: bool

    @property
    def key(self) -> str:
        """Comparison key: case- and whitespace-insensitive stem."""
        return _WHITESPACE.sub("", self.stem.lower())


def _numeral_value(raw: str) -> int:
    if raw.isdigit():
        return int(raw)
    total = 0
    prev = 0
    for ch in reversed(raw):
        value = _ROMAN_VALUES[ch]
        total = total - value if value < prev else total + value
        prev = max(prev, value)
    return total


def _clean_stem(stem: str) -> str:
    return stem.strip().rstrip(_TRAILING_PUNCT).strip()


def parse_title(title: str) -> ParsedTitle:
    """Split ``title`` into work stem and movement number (see module docstring)."""
    text = title.strip()

    match = _TRAILING_NUMBERED.match(text) or _TRAILING_BARE_ROMAN.match(text)
    if match:
        return ParsedTitle(_clean_stem(match["stem"]), _numeral_value(match["num"]), True)

    match = _TRAILING_MOVEMENT_WORD.match(text)
    if match:
        num = match["num"]
        value = _numeral_value(num.upper() if not num.isdigit() else num)
        return ParsedTitle(_clean_stem(match["stem"]), value, True)

    match = _LEADING_NUMBERED.match(text)
    if match:
        return ParsedTitle("", _numeral_value(match["num"]), True)

    match = _CATALOGUED_WORK.match(text)
    if match:
        return ParsedTitle(_clean_stem(match["stem"]), None, True)

    return ParsedTitle(text, None, False)


def work_stem(title: str) -> str:
    """The work-identifying prefix of ``title`` with any movement marker removed."""
    return parse_title(title).stem


def _same_work(anchor: ParsedTitle, current: ParsedTitle, candidate: ParsedTitle) -> bool:
    if not candidate.is_movement or candidate.key != anchor.key:
        return False
    if anchor.key:
        return True
    # Bare "I. / II." titles: require consecutive numbering.
    return (
        current.number is not None
        and candidate.number is not None
        and abs(candidate.number - current.number) == 1
    )


class MovementResolver:
    """Finds the contiguous run of album tracks that make up the matched work."""

    def resolve_movements(
        self,
        album_tracks: Sequence[AlbumTrack],
        matched: AlbumTrack,
        query: str = "",
    ) -> MovementSet:
        start = next((i for i, t in enumerate(album_tracks) if t.uri == matched.uri), None)
        if start is None:
            logger.debug("Matched track %s not on album listing; playing it alone", matched.uri)
            return MovementSet.single(matched)

        anchor = parse_title(album_tracks[start].title)
        if not anchor.is_movement:
            return MovementSet.single(matched)

        disc = album_tracks[start].disc_number
        parsed = {start: anchor}

        lo = start
        while lo > 0:
            candidate = album_tracks[lo - 1]
            candidate_parsed = parse_title(candidate.title)
            if candidate.disc_number != disc or not _same_work(
                anchor, parsed[lo], candidate_parsed
            ):
                break
            lo -= 1
            parsed[lo] = candidate_parsed

        hi = start
        while hi < len(album_tracks) - 1:
            candidate = album_tracks[hi + 1]
            candidate_parsed = parse_title(candidate.title)
            if candidate.disc_number != disc or not _same_work(
                anchor, parsed[hi], candidate_parsed
            ):
                break
            hi += 1
            parsed[hi] = candidate_parsed

        if lo == hi:
            return MovementSet.single(matched)

        logger.debug(
            "Grouped tracks %d..%d as '%s' for query '%s'", lo, hi, anchor.stem, query
        )
        run = sorted(album_tracks[lo : hi + 1], key=lambda t: t.track_index)
        return MovementSet(tracks=tuple(run))
