"""Domain layer - pure business objects with no infrastructure dependencies.

This layer contains:
- Value objects: Record, SearchOptions, MatchResult, SearchResponse
- Filters: deterministic predicates evaluated before scoring
- Errors: the exception taxonomy shared by every layer
"""

from record_search.domain.errors import (
    CorpusFetchError,
    InvalidQueryError,
    RecordSearchError,
    UnparseableFilterValue,
)
from record_search.domain.filters import (
    DateOnOrAfterFilter,
    DateOnOrBeforeFilter,
    EqualsFilter,
    NumberRangeFilter,
    RecordFilter,
)
from record_search.domain.model import (
    FieldValue,
    MatchMode,
    MatchResult,
    Record,
    SearchOptions,
    SearchResponse,
    stringify_field_value,
)


__all__ = [
    "CorpusFetchError",
    "DateOnOrAfterFilter",
    "DateOnOrBeforeFilter",
    "EqualsFilter",
    "FieldValue",
    "InvalidQueryError",
    "MatchMode",
    "MatchResult",
    "NumberRangeFilter",
    "Record",
    "RecordFilter",
    "RecordSearchError",
    "SearchOptions",
    "SearchResponse",
    "UnparseableFilterValue",
    "stringify_field_value",
]
