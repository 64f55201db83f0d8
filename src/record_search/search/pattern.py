"""Query normalization into a fuzzy search pattern."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import re
import unicodedata


logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str) -> str:
    """Normalize text for comparison: NFKC, case-folded, trimmed, single-spaced.

    Both queries and field values go through this function so that they are
    compared on equal terms.

    Examples:
        >>> normalize_text("  Marine   BIOLOGY ")
        'marine biology'
    """
    folded = unicodedata.normalize("NFKC", text).casefold()
    return _WHITESPACE_RE.sub(" ", folded).strip()


@dataclass(frozen=True)
class Pattern:
    """A compiled search pattern.

    An unmatchable pattern (shorter than the minimum matchable length) makes
    every field a no-match instead of raising.
    """

    text: str
    min_match_length: int = 1

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def matchable(self) -> bool:
        return self.length >= max(self.min_match_length, 1)

    def terms(self) -> list[Pattern]:
        """Split into one pattern per whitespace-separated term."""
        return [Pattern(term, self.min_match_length) for term in self.text.split(" ") if term]


def compile_pattern(raw_query: str, min_match_length: int = 2) -> Pattern:
    """Compile a raw query string into a normalized pattern.

    Multi-word queries stay a single contiguous pattern.

    Args:
        raw_query: Query text as supplied by the caller.
        min_match_length: Minimum normalized length for the pattern to match.

    Returns:
        The compiled Pattern; check ``matchable`` before scanning.
    """
    pattern = Pattern(normalize_text(raw_query), min_match_length)
    if not pattern.matchable:
        logger.debug(
            "Query %r normalizes to %d chars, below minimum %d; no record can match",
            raw_query,
            pattern.length,
            min_match_length,
        )
    return pattern
