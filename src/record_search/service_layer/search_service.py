"""Search service orchestration layer.

Fetches a fresh corpus snapshot, runs the ranking engine over it and shapes
the response. Provides the high-level search API for the HTTP layer.
"""

from collections.abc import Sequence
import logging
import time

from record_search.adapters.record_source import AbstractRecordSource
from record_search.domain.errors import CorpusFetchError, InvalidQueryError
from record_search.domain.filters import RecordFilter
from record_search.domain.model import MatchResult, SearchOptions, SearchResponse
from record_search.observability import (
    CORPUS_FETCH_ERRORS,
    CORPUS_SIZE,
    SEARCH_LATENCY,
    SEARCH_REQUESTS,
    SEARCH_RESULTS,
    create_span,
    track_latency,
)
from record_search.search.ranker import is_empty_query, search


logger = logging.getLogger(__name__)

MATCH_MODES = ("phrase", "all_terms")


class SearchService:
    """High-level search orchestration service.

    Stateless between calls: every search fetches the corpus anew from the
    record source and keeps nothing afterwards.
    """

    def __init__(
        self,
        record_source: AbstractRecordSource,
        *,
        default_options: SearchOptions | None = None,
        allowed_fields: Sequence[str] | None = None,
    ):
        """Initialize search service with dependencies.

        Args:
            record_source: Corpus supplier (required)
            default_options: Options used for anything a caller leaves unset
            allowed_fields: Whitelist applied to returned records; empty or
                None returns every field
        """
        self.record_source = record_source
        self.default_options = default_options or SearchOptions()
        self.allowed_fields = tuple(allowed_fields or ())

    def build_options(
        self,
        *,
        fields: Sequence[str] | None = None,
        limit: int | None = None,
        threshold: float | None = None,
        match_mode: str | None = None,
    ) -> SearchOptions:
        """Overlay caller-supplied values on the service defaults.

        Raises:
            InvalidQueryError: match_mode is not a supported mode.
        """
        if match_mode is not None and match_mode not in MATCH_MODES:
            raise InvalidQueryError(f"Unknown match mode {match_mode!r}; expected one of {', '.join(MATCH_MODES)}")

        updates: dict[str, object] = {}
        if fields is not None:
            updates["fields"] = tuple(fields)
        if limit is not None:
            updates["limit"] = limit
        if threshold is not None:
            updates["threshold"] = threshold
        if match_mode is not None:
            updates["match_mode"] = match_mode
        if not updates:
            return self.default_options
        return SearchOptions.model_validate({**self.default_options.model_dump(), **updates})

    async def search(
        self,
        query: str | None,
        *,
        fields: Sequence[str] | None = None,
        limit: int | None = None,
        threshold: float | None = None,
        filters: Sequence[RecordFilter] | None = None,
        match_mode: str | None = None,
    ) -> SearchResponse:
        """Execute a fuzzy search over a freshly fetched corpus.

        Args:
            query: Free-text query; None or blank lists filtered records
            fields: Field names to search (default: every field)
            limit: Maximum number of results to return
            threshold: Maximum score for a record to count as a match
            filters: Conjunctive predicates applied before scoring
            match_mode: "phrase" (default) or "all_terms"

        Returns:
            SearchResponse with ranked results

        Raises:
            CorpusFetchError: the record source failed; not retried here
            InvalidQueryError: the request options are invalid
        """
        options = self.build_options(fields=fields, limit=limit, threshold=threshold, match_mode=match_mode)
        mode = "filter_only" if is_empty_query(query) else options.match_mode

        with create_span("record_search.search", attributes={"search.mode": mode}) as span:
            started = time.perf_counter()
            try:
                with track_latency(SEARCH_LATENCY, stage="fetch"):
                    corpus = await self.record_source.fetch_records()
            except CorpusFetchError:
                CORPUS_FETCH_ERRORS.inc()
                SEARCH_REQUESTS.labels(mode=mode, status="error").inc()
                raise

            CORPUS_SIZE.set(len(corpus))
            if not corpus:
                logger.info("Record source returned an empty corpus")

            with track_latency(SEARCH_LATENCY, stage="rank"):
                results = search(corpus, query, options, filters)

            results = [self._restrict_fields(result) for result in results]

            span.set_attribute("search.corpus_size", len(corpus))
            span.set_attribute("search.result_count", len(results))
            SEARCH_REQUESTS.labels(mode=mode, status="ok").inc()
            SEARCH_RESULTS.observe(len(results))

            logger.debug(
                "Search completed: %d results from %d records in %.3fs",
                len(results),
                len(corpus),
                time.perf_counter() - started,
            )

        return SearchResponse(query=query or "", total_candidates=len(corpus), results=results)

    def _restrict_fields(self, result: MatchResult) -> MatchResult:
        if not self.allowed_fields:
            return result
        return result.model_copy(update={"record": result.record.with_fields(self.allowed_fields)})

    async def aclose(self) -> None:
        """Release resources held by the record source."""

        await self.record_source.aclose()
