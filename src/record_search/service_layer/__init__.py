"""Service layer - use-case orchestration over the search core."""

from .search_service import SearchService


__all__ = [
    "SearchService",
]
