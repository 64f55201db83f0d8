"""Reduce per-field match scores to one score per record."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from record_search.domain.model import Record
from record_search.search.fuzzy import match_field
from record_search.search.pattern import Pattern


logger = logging.getLogger(__name__)


def score_record(
    record: Record,
    pattern: Pattern,
    fields: Sequence[str] | None,
    threshold: float,
) -> float | None:
    """Score a record as the best (lowest) score across its searched fields.

    A record matches if any searched field matches well. Missing or empty
    fields are skipped rather than counted as bad matches.

    Args:
        record: Record to score.
        pattern: Compiled search pattern.
        fields: Field names to search; None searches every field of the record.
        threshold: Similarity threshold, forwarded to the field matcher.

    Returns:
        Best field score, or None when no field matches.
    """
    names = record.field_names() if fields is None else fields
    best: float | None = None
    for name in names:
        value = record.get(name)
        if value is None:
            continue
        score = match_field(value, pattern, threshold)
        if score is not None and (best is None or score < best):
            best = score
            if best == 0.0:
                break
    return best


def score_record_terms(
    record: Record,
    pattern: Pattern,
    fields: Sequence[str] | None,
    threshold: float,
) -> float | None:
    """Score a record requiring every query term to match some field.

    Each whitespace-separated term is scored independently with
    :func:`score_record`; the record score is the mean of the term scores.
    Terms too short to match on their own are ignored.

    Returns:
        Mean term score, or None when any matchable term finds no field.
    """
    terms = [term for term in pattern.terms() if term.matchable]
    if not terms:
        return None

    scores: list[float] = []
    for term in terms:
        score = score_record(record, term, fields, threshold)
        if score is None:
            return None
        scores.append(score)
    return sum(scores) / len(scores)
