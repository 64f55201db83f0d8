"""Conjunctive pre-filtering of the corpus before scoring."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
import logging

from record_search.domain.filters import RecordFilter
from record_search.domain.model import Record


logger = logging.getLogger(__name__)


def iter_candidates(
    corpus: Sequence[Record],
    filters: Sequence[RecordFilter] | None = None,
) -> Iterator[tuple[int, Record]]:
    """Yield ``(corpus_index, record)`` for every record admitted by all filters.

    Corpus order is preserved. With no filters every record is a candidate.
    """
    active = list(filters or [])
    for index, record in enumerate(corpus):
        if all(record_filter.admits(record) for record_filter in active):
            yield index, record


def apply_filters(
    corpus: Sequence[Record],
    filters: Sequence[RecordFilter] | None = None,
) -> list[Record]:
    """Return the records admitted by every filter, in corpus order."""
    candidates = [record for _, record in iter_candidates(corpus, filters)]
    if filters:
        logger.debug("Filters admitted %d of %d records", len(candidates), len(corpus))
    return candidates
