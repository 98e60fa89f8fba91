# Approximate string matching over weighted record fields.
#
# Field score: errors / len(query) + offset / distance, where errors is the
# edit distance between the query and the closest substring of the field and
# offset is where that substring starts. 0.0 is a perfect match at the start.
# Record score: product over matched fields of score ** (weight * norm), with
# weights normalized to sum to 1 and norm = 1 / sqrt(tokens in the field).

from __future__ import annotations

import math
import sys
from dataclasses import dataclass
from typing import Any, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

T = TypeVar("T")

EPSILON = sys.float_info.epsilon


@dataclass(frozen=True)
class WeightedField:
    """A dotted attribute path (e.g. "author.name") and its relative weight."""
    path: str
    weight: float = 1.0


def substring_score(pattern: str, text: str, distance: int = 100) -> float:
    """
    Best score for `pattern` against any substring of `text` (lower is better).

    Both strings are compared as given; callers lowercase them.
    """
    m = len(pattern)
    if m == 0:
        return 0.0

    # column over the pattern for the current text prefix
    cost = list(range(m + 1))
    start = [0] * (m + 1)
    best = _combine(cost[m], start[m], m, distance)

    for j, ch in enumerate(text, start=1):
        new_cost = [0] * (m + 1)
        new_start = [j] * (m + 1)
        for i in range(1, m + 1):
            options = (
                (cost[i - 1] + (pattern[i - 1] != ch), start[i - 1]),
                (cost[i] + 1, start[i]),
                (new_cost[i - 1] + 1, new_start[i - 1]),
            )
            new_cost[i], new_start[i] = min(options)
        cost, start = new_cost, new_start
        score = _combine(cost[m], start[m], m, distance)
        if score < best:
            best = score
            if best == 0.0:
                break
    return best


def _combine(errors: int, offset: int, m: int, distance: int) -> float:
    accuracy = errors / m
    if not distance:
        return 1.0 if offset else accuracy
    return accuracy + offset / distance


def field_norm(text: str) -> float:
    tokens = len(text.split())
    return round(1.0 / math.sqrt(max(tokens, 1)), 3)


def resolve(record: Any, path: str) -> Optional[str]:
    """Follow a dotted path through attributes (or dict keys)."""
    value = record
    for part in path.split("."):
        if value is None:
            return None
        if isinstance(value, dict):
            value = value.get(part)
        else:
            value = getattr(value, part, None)
    return value if isinstance(value, str) and value else None


class FuzzyIndex(Generic[T]):
    """
    Scores records of one collection against a query.

    Built per query from the current records; no state survives a search.
    """

    def __init__(self, records: Sequence[T], fields: Iterable[WeightedField], threshold: float = 0.6, distance: int = 100):
        self.records = records
        self.fields = tuple(fields)
        self.threshold = threshold
        self.distance = distance
        total = sum(f.weight for f in self.fields) or 1.0
        self._weights = tuple(f.weight / total for f in self.fields)

    def score(self, query: str, record: T) -> Optional[float]:
        """Return the record's combined score, or None when no field matches."""
        pattern = query.lower()
        total = 1.0
        matched = False
        for f, weight in zip(self.fields, self._weights):
            text = resolve(record, f.path)
            if text is None:
                continue
            s = substring_score(pattern, text.lower(), self.distance)
            if s > self.threshold:
                continue
            matched = True
            total *= (s if s > 0 else EPSILON) ** (weight * field_norm(text))
        return total if matched else None

    def search(self, query: str) -> List[Tuple[T, float]]:
        """Matching records sorted by score, ties kept in collection order."""
        hits = []
        for record in self.records:
            s = self.score(query, record)
            if s is not None:
                hits.append((record, s))
        hits.sort(key=lambda h: h[1])
        return hits
