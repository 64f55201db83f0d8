"""Approximate matching of a search pattern inside field text.

This module scores how closely a pattern occurs anywhere within a field's
text, tolerating typos. It is the dynamic-programming form of a Bitap scan:
every alignment of the pattern against the text is tried at once, with the
pattern free to start at any offset.

Errors counted per alignment:
- Substitution of one character
- Transposition of two adjacent characters (one error, not two)
- Insertion or deletion of one character

Scoring (0 = perfect, 1 = worst):
- Error term: errors / pattern length, weighted 0.6
- Location term: match start / text length, weighted 0.4
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Any

from record_search.domain.model import stringify_field_value
from record_search.search.pattern import Pattern, normalize_text


ERROR_WEIGHT = 0.6
LOCATION_WEIGHT = 0.4

# Guards threshold * length products such as 0.3 * 10 == 2.9999999999999996
_BUDGET_EPSILON = 1e-9


@dataclass(frozen=True)
class Alignment:
    """Best placement of a pattern in a text: error count and text span."""

    errors: int
    start: int
    end: int


def get_error_budget(threshold: float, pattern_length: int) -> int:
    """Get the maximum number of errors tolerated for a pattern.

    Higher thresholds and longer patterns tolerate more errors; the budget
    never exceeds the pattern length. It is the largest error count whose
    error term alone still fits within the threshold, so the budget never
    rejects an alignment that would score at or below the threshold.

    Examples:
        >>> get_error_budget(0.4, 14)
        9
        >>> get_error_budget(0.0, 14)
        0
    """
    if pattern_length <= 0:
        return 0
    budget = math.floor(threshold * pattern_length / ERROR_WEIGHT + _BUDGET_EPSILON)
    return max(0, min(budget, pattern_length))


def approximate_find(pattern: str, text: str, max_errors: int | None = None) -> Alignment | None:
    """Find the best approximate occurrence of ``pattern`` inside ``text``.

    Uses an optimal-string-alignment edit distance where the pattern may begin
    at any offset of the text without penalty (semi-global alignment). Among
    alignments with the fewest errors, the earliest start wins.

    Args:
        pattern: Normalized pattern text.
        text: Normalized field text.
        max_errors: If provided, alignments with more errors are rejected.

    Returns:
        The best Alignment, or None when the inputs are empty or every
        alignment exceeds ``max_errors``.

    Examples:
        >>> approximate_find("biology", "marine biology grant")
        Alignment(errors=0, start=7, end=14)
        >>> approximate_find("bilogy", "marine biology grant").errors
        1
    """
    if not pattern or not text:
        return None

    # An exact occurrence is always the best alignment
    offset = text.find(pattern)
    if offset >= 0:
        return Alignment(0, offset, offset + len(pattern))
    if max_errors == 0:
        return None

    m, n = len(pattern), len(text)

    # Column j holds, for every pattern prefix length i, the cheapest alignment
    # of pattern[:i] ending right before text[j], plus where that alignment began.
    prev2_cost: list[int] = []
    prev2_start: list[int] = []
    prev_cost = list(range(m + 1))
    prev_start = [0] * (m + 1)

    best: tuple[int, int, int] | None = None

    for j in range(1, n + 1):
        char = text[j - 1]
        curr_cost = [0] * (m + 1)
        curr_start = [j] * (m + 1)

        for i in range(1, m + 1):
            # substitution (or match)
            cost = prev_cost[i - 1] + (0 if pattern[i - 1] == char else 1)
            start = prev_start[i - 1]

            # pattern character missing from the text
            candidate = curr_cost[i - 1] + 1
            if candidate < cost or (candidate == cost and curr_start[i - 1] < start):
                cost, start = candidate, curr_start[i - 1]

            # extra text character inside the match
            candidate = prev_cost[i] + 1
            if candidate < cost or (candidate == cost and prev_start[i] < start):
                cost, start = candidate, prev_start[i]

            # adjacent transposition
            if (
                i > 1
                and j > 1
                and pattern[i - 1] == text[j - 2]
                and pattern[i - 2] == char
                and pattern[i - 1] != pattern[i - 2]
            ):
                candidate = prev2_cost[i - 2] + 1
                if candidate < cost or (candidate == cost and prev2_start[i - 2] < start):
                    cost, start = candidate, prev2_start[i - 2]

            curr_cost[i] = cost
            curr_start[i] = start

        key = (curr_cost[m], curr_start[m], j)
        if best is None or key[:2] < best[:2]:
            best = key
            if best[0] == 0 and best[1] == 0:
                break

        prev2_cost, prev2_start = prev_cost, prev_start
        prev_cost, prev_start = curr_cost, curr_start

    if best is None:
        return None
    errors, start, end = best
    if max_errors is not None and errors > max_errors:
        return None
    return Alignment(errors, start, end)


def score_alignment(alignment: Alignment, pattern_length: int, text_length: int) -> float:
    """Combine error and location terms into a score in [0, 1].

    More errors never improve the score, and a match at the start of the text
    never scores worse than the same match further in.
    """
    error_term = min(alignment.errors / pattern_length, 1.0) if pattern_length else 1.0
    location_term = min(alignment.start / text_length, 1.0) if text_length else 0.0
    score = ERROR_WEIGHT * error_term + LOCATION_WEIGHT * location_term
    return min(max(score, 0.0), 1.0)


def match_field(value: Any, pattern: Pattern, threshold: float) -> float | None:
    """Score one field value against a compiled pattern.

    Args:
        value: Raw field value; non-text values are stringified canonically.
        pattern: Compiled search pattern.
        threshold: Similarity threshold, used to derive the error budget.

    Returns:
        Score in [0, 1] (0 = exact), or None when there is no acceptable match
        (empty field, unmatchable pattern, or too many errors).
    """
    if not pattern.matchable:
        return None

    raw_text = stringify_field_value(value)
    if raw_text is None:
        return None
    text = normalize_text(raw_text)
    if not text:
        return None

    alignment = approximate_find(pattern.text, text, get_error_budget(threshold, pattern.length))
    if alignment is None:
        return None
    return score_alignment(alignment, pattern.length, len(text))
