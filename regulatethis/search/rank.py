# Merge, regroup and cap helpers for per-collection search results.
# Stateless; the ranker produces the per-kind lists.

from __future__ import annotations
from typing import Dict, Iterable, List, Mapping, Optional

from .types import KIND_ORDER, ResultKind, SearchResult

# dropdown view caps; the results page shows everything
COMPACT_CAPS: Dict[ResultKind, int] = {
    ResultKind.ARTICLE: 5,
    ResultKind.AUTHOR: 3,
    ResultKind.TAG: 3,
    ResultKind.CATEGORY: 3,
    ResultKind.SUBCATEGORY: 3,
}


def merge_and_rank(per_kind: Iterable[List[SearchResult]]) -> List[SearchResult]:
    """Concatenate the per-collection lists and sort globally by score (stable)."""
    combined: List[SearchResult] = []
    for results in per_kind:
        combined.extend(results)
    return sorted(combined, key=lambda r: r.score)


def group_results(results: Iterable[SearchResult]) -> Dict[ResultKind, List[SearchResult]]:
    """Partition by kind, keeping rank order inside each group."""
    groups: Dict[ResultKind, List[SearchResult]] = {kind: [] for kind in KIND_ORDER}
    for r in results:
        groups[r.kind].append(r)
    return groups


def cap_groups(
    groups: Mapping[ResultKind, List[SearchResult]],
    caps: Optional[Mapping[ResultKind, int]] = None,
) -> Dict[ResultKind, List[SearchResult]]:
    caps = COMPACT_CAPS if caps is None else caps
    return {kind: (items[: caps[kind]] if kind in caps else list(items)) for kind, items in groups.items()}
