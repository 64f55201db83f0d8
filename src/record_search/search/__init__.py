"""
Fuzzy matching and ranking engine.

This package provides a pure-Python search core:
- pattern: query normalization into a search pattern
- fuzzy: approximate matching of a pattern inside one field
- scoring: per-record reduction of field scores
- filtering: conjunctive pre-filters
- ranker: the search pipeline
"""

from record_search.search.filtering import apply_filters
from record_search.search.fuzzy import approximate_find, match_field
from record_search.search.pattern import Pattern, compile_pattern, normalize_text
from record_search.search.ranker import search
from record_search.search.scoring import score_record, score_record_terms


__all__ = [
    "Pattern",
    "apply_filters",
    "approximate_find",
    "compile_pattern",
    "match_field",
    "normalize_text",
    "score_record",
    "score_record_terms",
    "search",
]
