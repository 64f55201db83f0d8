"""Domain exceptions.

Only corpus acquisition failures are fatal for a request. Per-record anomalies
(missing fields, unparseable filter values, unmatchable queries) are absorbed
by the engine and surface as exclusion from the results.
"""


class RecordSearchError(Exception):
    """Base class for record-search errors."""


class CorpusFetchError(RecordSearchError):
    """The record store could not be reached or returned a malformed payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidQueryError(RecordSearchError, ValueError):
    """A search request is structurally invalid (not merely too short to match)."""


class UnparseableFilterValue(RecordSearchError, ValueError):
    """A filter predicate cannot be evaluated against a record's field value."""

    def __init__(self, field: str, value: object) -> None:
        super().__init__(f"Cannot evaluate filter on field {field!r} with value {value!r}")
        self.field = field
        self.value = value
