"""Deterministic record predicates applied before fuzzy scoring.

Filters only shrink the candidate set; they never influence scores. Every
filter fails closed: a record whose target field is missing or cannot be
interpreted is excluded rather than reported as an error.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
import logging
import math
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from record_search.domain.errors import UnparseableFilterValue
from record_search.domain.model import Record, stringify_field_value


logger = logging.getLogger(__name__)


def parse_date_value(field: str, value: Any) -> date:
    """Interpret a field value as a calendar date.

    Accepts ``date``/``datetime`` objects and ISO-8601 strings (a trailing
    ``Z`` is read as UTC). Datetimes are truncated to their date.

    Raises:
        UnparseableFilterValue: value is missing or not a recognizable date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            pass
        try:
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise UnparseableFilterValue(field, value) from exc
    raise UnparseableFilterValue(field, value)


def parse_number_value(field: str, value: Any) -> float:
    """Interpret a field value as a number.

    Raises:
        UnparseableFilterValue: value is missing, boolean, NaN or not numeric.
    """
    if isinstance(value, bool):
        raise UnparseableFilterValue(field, value)
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value.strip().replace(",", ""))
        except ValueError as exc:
            raise UnparseableFilterValue(field, value) from exc
    else:
        raise UnparseableFilterValue(field, value)
    # NaN compares false against every bound
    if math.isnan(number):
        raise UnparseableFilterValue(field, value)
    return number


class _BaseFilter(BaseModel, ABC):
    """Common base: a target field plus the fail-closed ``admits`` wrapper.

    Subclasses implement ``_evaluate`` against the raw field value and raise
    UnparseableFilterValue when the value cannot be interpreted.
    """

    model_config = ConfigDict(frozen=True)

    field: str = Field(min_length=1)

    def admits(self, record: Record) -> bool:
        """Return True when the record satisfies the predicate."""
        try:
            return self._evaluate(record.get(self.field))
        except UnparseableFilterValue as exc:
            logger.debug("Excluding record %s: %s", record.id, exc)
            return False

    @abstractmethod
    def _evaluate(self, value: Any) -> bool:
        raise NotImplementedError


class DateOnOrAfterFilter(_BaseFilter):
    """Admit records whose date field is on or after ``cutoff``."""

    kind: Literal["date_on_or_after"] = "date_on_or_after"
    cutoff: date

    def _evaluate(self, value: Any) -> bool:
        return parse_date_value(self.field, value) >= self.cutoff


class DateOnOrBeforeFilter(_BaseFilter):
    """Admit records whose date field is on or before ``cutoff``."""

    kind: Literal["date_on_or_before"] = "date_on_or_before"
    cutoff: date

    def _evaluate(self, value: Any) -> bool:
        return parse_date_value(self.field, value) <= self.cutoff


class EqualsFilter(_BaseFilter):
    """Admit records whose field equals ``value``, ignoring case.

    For list fields (e.g. multi-select columns) any element may match.
    """

    kind: Literal["equals"] = "equals"
    value: str | int | float | bool

    def _evaluate(self, value: Any) -> bool:
        expected = stringify_field_value(self.value)
        candidates = value if isinstance(value, (list, tuple)) else [value]
        texts = [stringify_field_value(candidate) for candidate in candidates]
        if expected is None or not any(text is not None for text in texts):
            raise UnparseableFilterValue(self.field, value)
        target = expected.strip().casefold()
        return any(text is not None and text.strip().casefold() == target for text in texts)


class NumberRangeFilter(_BaseFilter):
    """Admit records whose numeric field lies within an inclusive range."""

    kind: Literal["number_range"] = "number_range"
    minimum: float | None = None
    maximum: float | None = None

    @model_validator(mode="after")
    def _check_bounds(self) -> "NumberRangeFilter":
        if self.minimum is None and self.maximum is None:
            raise ValueError("number_range filter needs a minimum, a maximum, or both")
        if self.minimum is not None and self.maximum is not None and self.minimum > self.maximum:
            raise ValueError("number_range minimum must not exceed maximum")
        return self

    def _evaluate(self, value: Any) -> bool:
        number = parse_number_value(self.field, value)
        if self.minimum is not None and number < self.minimum:
            return False
        if self.maximum is not None and number > self.maximum:
            return False
        return True


RecordFilter = Annotated[
    DateOnOrAfterFilter | DateOnOrBeforeFilter | EqualsFilter | NumberRangeFilter,
    Field(discriminator="kind"),
]
