# Resolve a scoped feed request (kind + slug).
# Against the CMS each scope is its own filtered article query; against a
# local snapshot the cached articles are filtered in place.

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, Optional, Tuple

from ..content.client import StrapiClient
from ..content.types import Article, ContentSnapshot
from ..settings import Settings, settings
from .rss import MAX_ITEMS


@dataclass(frozen=True)
class FeedScope:
    title: str
    description: str
    feed_url: str
    articles: Tuple[Article, ...]


def strip_xml_suffix(slug: str) -> str:
    return re.sub(r"\.xml$", "", slug)


def _describe(kind: str, entity: Any, site: Settings) -> Tuple[str, str]:
    if kind == "authors":
        return f"Articles by {entity.name} - {site.SITE_NAME}", entity.bio
    if kind == "tags":
        return f"{entity.name} - {site.SITE_NAME}", f"Articles tagged {entity.name}"
    if kind == "subcategories":
        return f"{entity.name} - {site.SITE_NAME}", entity.description or f"Articles in {entity.name}"
    return f"{entity.name} - {site.SITE_NAME}", entity.description


def _scope(kind: str, slug: str, entity: Any, articles: Iterable[Article], site: Settings) -> FeedScope:
    title, description = _describe(kind, entity, site)
    return FeedScope(
        title=title,
        description=description,
        feed_url=site.full_url(f"/feed/{kind}/{slug}.xml"),
        articles=tuple(articles),
    )


# -------------------------
# Snapshot
# -------------------------
SNAPSHOT_LOOKUPS: Dict[str, Callable[[ContentSnapshot, str], Any]] = {
    "categories": ContentSnapshot.category_by_slug,
    "subcategories": ContentSnapshot.subcategory_by_slug,
    "authors": ContentSnapshot.author_by_slug,
    "tags": ContentSnapshot.tag_by_slug,
}

SNAPSHOT_FILTERS: Dict[str, Callable[[Article, Any], bool]] = {
    "categories": lambda a, e: a.category.slug == e.slug,
    "subcategories": lambda a, e: any(s.slug == e.slug for s in a.subcategories),
    "authors": lambda a, e: a.author.id == e.id,
    "tags": lambda a, e: any(t.slug == e.slug for t in a.tags),
}


def resolve_scope(kind: str, raw_slug: str, snapshot: ContentSnapshot, site: Settings = settings) -> Optional[FeedScope]:
    """Return None for an unknown kind or slug."""
    lookup = SNAPSHOT_LOOKUPS.get(kind)
    if lookup is None:
        return None
    slug = strip_xml_suffix(raw_slug)
    entity = lookup(snapshot, slug)
    if entity is None:
        return None
    keep = SNAPSHOT_FILTERS[kind]
    return _scope(kind, slug, entity, (a for a in snapshot.articles if keep(a, entity)), site)


# -------------------------
# CMS
# -------------------------
# client method names
CMS_LOOKUPS: Dict[str, str] = {
    "categories": "fetch_category_by_slug",
    "subcategories": "fetch_subcategory_by_slug",
    "authors": "fetch_author_by_slug",
    "tags": "fetch_tag_by_slug",
}

CMS_FILTERS: Dict[str, Callable[[Any], Dict[str, str]]] = {
    "categories": lambda e: {"category_slug": e.slug},
    "subcategories": lambda e: {"subcategory_slug": e.slug},
    "authors": lambda e: {"author_id": e.id},
    "tags": lambda e: {"tag_slug": e.slug},
}


def fetch_scope(kind: str, raw_slug: str, client: StrapiClient, site: Settings = settings) -> Optional[FeedScope]:
    """
    Resolve a scope with one by-slug lookup and one filtered article query.

    Returns None for an unknown kind or slug. Errors from the article query
    propagate as ContentAPIError.
    """
    lookup = CMS_LOOKUPS.get(kind)
    if lookup is None:
        return None
    slug = strip_xml_suffix(raw_slug)
    entity = getattr(client, lookup)(slug)
    if entity is None:
        return None
    articles = client.fetch_articles(limit=MAX_ITEMS, **CMS_FILTERS[kind](entity))
    return _scope(kind, slug, entity, articles, site)
