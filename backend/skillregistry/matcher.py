"""
Trigger matching.

Scores skill records against a free-text work context. A trigger phrase
contributes its token count to a record's score when the normalized phrase
occurs as a contiguous substring of the normalized context. Normalization is
casefolding plus collapsing runs of whitespace to a single space; tokens are
whitespace-separated, so "two-way binding" weighs 2.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .models import SkillRecord
from .versions import try_parse_version


def normalize_text(text: str) -> str:
    """Casefold and collapse whitespace."""
    return " ".join(text.casefold().split())


def token_count(phrase: str) -> int:
    return len(phrase.split())


@dataclass(frozen=True)
class Match:
    """A record and its relevance score for one context."""

    record: SkillRecord
    score: int

    @property
    def name(self) -> str:
        return self.record.name


def _max_version_key(record: SkillRecord) -> Tuple[int, int, int]:
    version = try_parse_version(record.version_range.max)
    if version is None:
        return (0, 0, 0)
    return version.components


def rank_key(match: Match) -> Tuple:
    """
    Sort key giving a total order over matches of distinct records.

    Higher score first, then higher max version, then name ascending.
    """
    major, minor, patch = _max_version_key(match.record)
    return (-match.score, -major, -minor, -patch, match.record.name)


class TriggerMatcher:
    """Ranks records by how many trigger tokens a context mentions."""

    def score(self, context: str, record: SkillRecord) -> int:
        """Sum of token counts of the record's triggers found in ``context``."""
        haystack = normalize_text(context)
        if not haystack:
            return 0
        return self._score_normalized(haystack, record)

    def rank(self, context: str, records: Iterable[SkillRecord]) -> List[Match]:
        """
        Score and order records for a context.

        Records scoring 0 are left out, so an empty context gives an empty
        list.
        """
        haystack = normalize_text(context)
        if not haystack:
            return []

        matches = []
        for record in records:
            score = self._score_normalized(haystack, record)
            if score > 0:
                matches.append(Match(record=record, score=score))
        matches.sort(key=rank_key)
        return matches

    def _score_normalized(self, haystack: str, record: SkillRecord) -> int:
        total = 0
        for phrase in record.triggers:
            needle = normalize_text(phrase)
            if needle and needle in haystack:
                total += token_count(needle)
        return total
