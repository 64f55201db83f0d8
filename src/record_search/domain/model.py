"""Domain model - records, search options and match results.

Following the same principles as the rest of the domain layer:
- No dependencies on infrastructure (no HTTP clients, no settings)
- Value objects are immutable (frozen=True)
- Absence is explicit: a missing or null field reads as ``None``, never an undefined lookup
"""

from datetime import date, datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


ScalarValue = str | bool | int | float | datetime | date
FieldValue = ScalarValue | list[Any] | dict[str, Any] | None

MatchMode = Literal["phrase", "all_terms"]

LIST_SEPARATOR = ", "


def stringify_field_value(value: Any) -> str | None:
    """Render a field value as text in a canonical format.

    Returns None for values that carry no searchable text (missing values,
    nested objects such as attachments).

    Examples:
        >>> stringify_field_value(True)
        'true'
        >>> stringify_field_value(2.0)
        '2'
        >>> stringify_field_value(date(2024, 3, 1))
        '2024-03-01'
        >>> stringify_field_value(["Biology", "Ecology"])
        'Biology, Ecology'
    """
    if value is None:
        return None
    if isinstance(value, str):
        return value
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if value.is_integer():
            return str(int(value))
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        parts = [text for text in (stringify_field_value(item) for item in value) if text]
        return LIST_SEPARATOR.join(parts) if parts else None
    return None


class Record(BaseModel):
    """A store record: an opaque identifier plus an ordered set of named fields.

    Records are immutable for the duration of a search. The identifier is not a
    field and is never matched against.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    fields: dict[str, FieldValue] = Field(default_factory=dict)

    def get(self, name: str) -> FieldValue:
        """Return the value of a field, or None when the record lacks it."""
        return self.fields.get(name)

    def field_names(self) -> tuple[str, ...]:
        return tuple(self.fields)

    def with_fields(self, names: list[str] | tuple[str, ...]) -> "Record":
        """Return a copy holding only the whitelisted fields that are present."""
        kept = {name: self.fields[name] for name in names if name in self.fields}
        return Record(id=self.id, fields=kept)


class SearchOptions(BaseModel):
    """Tuning knobs for a single search call."""

    model_config = ConfigDict(frozen=True)

    fields: tuple[str, ...] | None = None
    threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    limit: int = Field(default=10, ge=0)
    min_match_length: int = Field(default=2, ge=1)
    match_mode: MatchMode = "phrase"


class MatchResult(BaseModel):
    """A ranked record with its similarity score (0 = exact match)."""

    model_config = ConfigDict(frozen=True)

    record: Record
    score: float = Field(ge=0.0, le=1.0)
    index: int = Field(ge=0, description="Position of the record in the searched corpus")

    @property
    def id(self) -> str:
        return self.record.id


class SearchResponse(BaseModel):
    """Results of one search request, with the size of the scanned corpus."""

    model_config = ConfigDict(frozen=True)

    query: str
    total_candidates: int = Field(ge=0)
    results: list[MatchResult] = Field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.results)
