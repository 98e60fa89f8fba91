# Data models for the search layer.

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple, Union

from ..content.types import Article, Author, Category, Subcategory, Tag
from .fuzzy import WeightedField

SearchItem = Union[Article, Author, Tag, Category, Subcategory]


class ResultKind(str, Enum):
    ARTICLE = "article"
    AUTHOR = "author"
    TAG = "tag"
    CATEGORY = "category"
    SUBCATEGORY = "subcategory"


# scan order; also the tie-break order of the merged list
KIND_ORDER: Tuple[ResultKind, ...] = (
    ResultKind.ARTICLE,
    ResultKind.AUTHOR,
    ResultKind.TAG,
    ResultKind.CATEGORY,
    ResultKind.SUBCATEGORY,
)


@dataclass(frozen=True)
class CollectionSpec:
    """Which fields of one collection are searched, how heavily, and how loosely."""
    kind: ResultKind
    fields: Tuple[WeightedField, ...]
    threshold: float


@dataclass(frozen=True)
class SearchResult:
    """One matched entity. score is in [0, 1]; 0 is a perfect match."""
    kind: ResultKind
    item: SearchItem
    score: float
