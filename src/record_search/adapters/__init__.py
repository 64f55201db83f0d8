"""Adapters layer - corpus supplier implementations.

Abstracts where records come from so the search core only ever sees an
immutable snapshot.
"""

from .record_source import (
    AbstractRecordSource,
    AirtableRecordSource,
    InMemoryRecordSource,
    parse_airtable_page,
)


__all__ = [
    "AbstractRecordSource",
    "AirtableRecordSource",
    "InMemoryRecordSource",
    "parse_airtable_page",
]
