"""Keyword relevance scoring for preprints (no index, no stemming)."""

from __future__ import annotations

from collections.abc import Iterable

from models import Preprint

# (field, weight for the whole query as a substring, weight per query word).
# Downstream ordering depends on these exact relative weights.
_FIELD_WEIGHTS: tuple[tuple[str, float, float], ...] = (
    ("title", 100.0, 10.0),
    ("abstract", 50.0, 5.0),
    ("authors", 30.0, 3.0),
    ("category", 40.0, 4.0),
    ("doi", 25.0, 0.0),
    ("author_corresponding", 20.0, 2.0),
    ("author_corresponding_institution", 15.0, 1.5),
)

_MIN_WORD_LENGTH = 3


def query_words(query: str) -> list[str]:
    """Lower-cased whitespace tokens longer than two characters."""
    return [word for word in query.lower().split() if len(word) >= _MIN_WORD_LENGTH]


def score_preprint(preprint: Preprint, query: str, words: list[str] | None = None) -> float:
    """Sum weighted field hits for ``query``; 0.0 means no match at all.

    Every field that contains the full query earns its phrase weight, and each
    query word found in a field earns that field's word weight. Hits add up
    without a cap.
    """
    phrase = query.lower()
    if words is None:
        words = query_words(query)

    score = 0.0
    for field, phrase_weight, word_weight in _FIELD_WEIGHTS:
        value = getattr(preprint, field).lower()
        if not value:
            continue
        if phrase in value:
            score += phrase_weight
        if word_weight:
            for word in words:
                if word in value:
                    score += word_weight
    return score


def rank_preprints(preprints: Iterable[Preprint], query: str) -> list[Preprint]:
    """Drop non-matching preprints and order the rest by descending score.

    The sort is stable, so equal scores keep their incoming order.
    """
    words = query_words(query)
    scored = [(preprint, score_preprint(preprint, query, words)) for preprint in preprints]
    scored = [item for item in scored if item[1] > 0]
    scored.sort(key=lambda item: item[1], reverse=True)
    return [preprint for preprint, _ in scored]
