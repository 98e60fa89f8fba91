# Multi-entity search: one fuzzy scan per collection, merged into a single
# list ordered by score across all entity kinds.

from __future__ import annotations

import os
from functools import lru_cache
from typing import Dict, List, Mapping, Optional, Sequence

import yaml

from ..content.types import ContentSnapshot
from .fuzzy import FuzzyIndex, WeightedField
from .rank import merge_and_rank
from .types import KIND_ORDER, CollectionSpec, ResultKind, SearchResult

FIELDS_PATH = os.path.join(os.path.dirname(__file__), "fields.yaml")

MIN_QUERY_LENGTH = 2


@lru_cache(maxsize=4)
def load_field_config(path: str = FIELDS_PATH) -> Dict[str, object]:
    if not os.path.exists(path):
        raise FileNotFoundError(f"Search field config not found: {path}")
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_collection_specs(path: str = FIELDS_PATH) -> Dict[ResultKind, CollectionSpec]:
    cfg = load_field_config(path)
    collections = cfg.get("collections", {})
    specs: Dict[ResultKind, CollectionSpec] = {}
    for kind in KIND_ORDER:
        if kind.value not in collections:
            raise KeyError(f"Collection '{kind.value}' missing from {path}")
        c = collections[kind.value]
        specs[kind] = CollectionSpec(
            kind=kind,
            fields=tuple(WeightedField(f["path"], float(f.get("weight", 1.0))) for f in c.get("fields", [])),
            threshold=float(c.get("threshold", 0.6)),
        )
    return specs


class SearchRanker:
    """
    Answers free-text queries against a content snapshot.

    The snapshot is passed on every call; the ranker keeps no copy of it.
    """

    def __init__(self, specs: Optional[Mapping[ResultKind, CollectionSpec]] = None, distance: Optional[int] = None):
        self.specs = dict(specs) if specs is not None else load_collection_specs()
        if distance is None:
            distance = int(load_field_config().get("distance", 100))
        self.distance = distance

    def _collections(self, snapshot: ContentSnapshot) -> Dict[ResultKind, Sequence[object]]:
        return {
            ResultKind.ARTICLE: snapshot.articles,
            ResultKind.AUTHOR: snapshot.authors,
            ResultKind.TAG: snapshot.tags,
            ResultKind.CATEGORY: snapshot.categories,
            ResultKind.SUBCATEGORY: snapshot.subcategories,
        }

    def scan(self, kind: ResultKind, query: str, records: Sequence[object]) -> List[SearchResult]:
        spec = self.specs[kind]
        index = FuzzyIndex(records, spec.fields, threshold=spec.threshold, distance=self.distance)
        return [SearchResult(kind=kind, item=item, score=score) for item, score in index.search(query)]

    def search(self, query: Optional[str], snapshot: ContentSnapshot) -> List[SearchResult]:
        """Ranked results, best first. Queries shorter than two characters return []."""
        q = (query or "").strip()
        if len(q) < MIN_QUERY_LENGTH:
            return []
        collections = self._collections(snapshot)
        return merge_and_rank(self.scan(kind, q, collections[kind]) for kind in KIND_ORDER)


def search(query: Optional[str], snapshot: ContentSnapshot) -> List[SearchResult]:
    return SearchRanker().search(query, snapshot)
