# Makes the folder importable as a package.
# Exports the ranker and result types for convenience.

from .rank import COMPACT_CAPS, cap_groups, group_results
from .ranker import SearchRanker, search
from .types import ResultKind, SearchResult

__all__ = ["SearchRanker", "search", "SearchResult", "ResultKind", "group_results", "cap_groups", "COMPACT_CAPS"]
