"""Search pipeline: filter, score, threshold, stable sort, truncate."""

from __future__ import annotations

from collections.abc import Sequence
import logging

from record_search.domain.filters import RecordFilter
from record_search.domain.model import MatchResult, Record, SearchOptions
from record_search.search.filtering import iter_candidates
from record_search.search.pattern import compile_pattern, normalize_text
from record_search.search.scoring import score_record, score_record_terms


logger = logging.getLogger(__name__)


def is_empty_query(query: str | None) -> bool:
    """Check whether a query selects the filter-only pass-through mode."""
    return query is None or not normalize_text(query)


def search(
    corpus: Sequence[Record],
    query: str | None,
    options: SearchOptions | None = None,
    filters: Sequence[RecordFilter] | None = None,
) -> list[MatchResult]:
    """Rank corpus records by fuzzy similarity to ``query``.

    The computation is synchronous and stateless; ``corpus`` is treated as a
    read-only snapshot for the duration of the call.

    Args:
        corpus: Records to search, in store order.
        query: Free-text query. None or blank returns filtered records in
            corpus order, each with score 0.
        options: Fields, threshold, limit and minimum match length.
        filters: Predicates a record must all satisfy before scoring.

    Returns:
        At most ``options.limit`` results ordered by score ascending; equal
        scores keep corpus order. Records scoring above the threshold, and all
        records for an unmatchable query, are omitted.
    """
    options = options or SearchOptions()
    candidates = list(iter_candidates(corpus, filters))

    if not candidates:
        logger.info("No candidate records to search (corpus size %d)", len(corpus))
        return []

    if is_empty_query(query):
        return [
            MatchResult(record=record, score=0.0, index=index)
            for index, record in candidates[: options.limit]
        ]

    pattern = compile_pattern(query or "", options.min_match_length)
    if not pattern.matchable:
        return []

    scorer = score_record_terms if options.match_mode == "all_terms" else score_record
    scored: list[tuple[float, int, Record]] = []
    for index, record in candidates:
        score = scorer(record, pattern, options.fields, options.threshold)
        if score is not None and score <= options.threshold:
            scored.append((score, index, record))

    # list.sort is stable: ties keep corpus order
    scored.sort(key=lambda item: item[0])

    logger.debug(
        "Query %r matched %d of %d candidates (threshold %.2f)",
        pattern.text,
        len(scored),
        len(candidates),
        options.threshold,
    )

    return [
        MatchResult(record=record, score=score, index=index)
        for score, index, record in scored[: options.limit]
    ]
