# Content sources and the snapshot provider.
# A source loads all five collections at once; the provider caches the
# resulting snapshot and reloads it on a time-based interval.

from __future__ import annotations

import threading
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import yaml
from loguru import logger

from .client import StrapiClient
from .transform import parse_datetime
from .types import Article, Author, Category, ContentSnapshot, Subcategory, Tag


class ContentSource(Protocol):
    def load(self) -> ContentSnapshot: ...


class CMSContentSource:
    """Loads a snapshot from the Strapi API."""

    def __init__(self, client: StrapiClient):
        self.client = client

    def load(self) -> ContentSnapshot:
        return ContentSnapshot(
            articles=tuple(self.client.fetch_articles()),
            authors=tuple(self.client.fetch_authors()),
            categories=tuple(self.client.fetch_categories()),
            subcategories=tuple(self.client.fetch_subcategories()),
            tags=tuple(self.client.fetch_tags()),
            loaded_at=datetime.now(timezone.utc),
        )


class FileContentSource:
    """
    Loads a snapshot from a YAML document (local development, fixtures).

    Articles reference their category, author, tags and subcategories by slug.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def load(self) -> ContentSnapshot:
        if not self.path.exists():
            raise FileNotFoundError(f"Content file not found: {self.path}")
        with open(self.path, "r", encoding="utf-8") as f:
            data: Dict[str, Any] = yaml.safe_load(f) or {}
        return snapshot_from_dict(data)


def snapshot_from_dict(data: Dict[str, Any]) -> ContentSnapshot:
    categories = tuple(
        Category(
            id=str(c["id"]),
            name=c["name"],
            slug=c["slug"],
            subtitle=c.get("subtitle", ""),
            description=c.get("description", ""),
            details=tuple(c.get("details") or ()),
            order=int(c.get("order", 0)),
        )
        for c in data.get("categories") or []
    )
    subcategories = tuple(
        Subcategory(
            id=str(s["id"]),
            name=s["name"],
            slug=s["slug"],
            description=s.get("description"),
            category_id=str(s.get("category_id", "")),
        )
        for s in data.get("subcategories") or []
    )
    tags = tuple(Tag(id=str(t["id"]), name=t["name"], slug=t["slug"]) for t in data.get("tags") or [])
    authors = tuple(
        Author(
            id=str(a["id"]),
            name=a["name"],
            slug=a.get("slug") or str(a["id"]),
            title=a.get("title", ""),
            bio=a.get("bio", ""),
            photo=a.get("photo", ""),
            linkedin=a.get("linkedin"),
            twitter=a.get("twitter"),
            email=a.get("email"),
        )
        for a in data.get("authors") or []
    )

    cat_by_slug = {c.slug: c for c in categories}
    sub_by_slug = {s.slug: s for s in subcategories}
    tag_by_slug = {t.slug: t for t in tags}
    author_by_slug = {a.slug: a for a in authors}

    articles = []
    for raw in data.get("articles") or []:
        category = cat_by_slug.get(raw.get("category"))
        author = author_by_slug.get(raw.get("author"))
        if category is None or author is None:
            logger.warning("Article {} has an unresolved category/author reference - skipping", raw.get("slug"))
            continue
        articles.append(
            Article(
                id=str(raw["id"]),
                title=raw["title"],
                subtitle=raw.get("subtitle"),
                slug=raw["slug"],
                content=raw.get("content", ""),
                excerpt=raw.get("excerpt", ""),
                category=category,
                author=author,
                publish_date=parse_datetime(raw["publish_date"]),
                subcategories=tuple(sub_by_slug[s] for s in raw.get("subcategories") or [] if s in sub_by_slug),
                tags=tuple(tag_by_slug[t] for t in raw.get("tags") or [] if t in tag_by_slug),
                featured_image=raw.get("featured_image", ""),
                read_time=int(raw.get("read_time", 0)),
                is_featured=bool(raw.get("is_featured", False)),
            )
        )

    articles.sort(key=lambda a: a.publish_date, reverse=True)
    return ContentSnapshot(
        articles=tuple(articles),
        authors=authors,
        categories=tuple(sorted(categories, key=lambda c: c.order)),
        subcategories=subcategories,
        tags=tags,
        loaded_at=datetime.now(timezone.utc),
    )


class ContentProvider:
    """Caches one ContentSnapshot and refreshes it every `refresh_seconds`."""

    def __init__(self, source: ContentSource, refresh_seconds: float = 60.0, clock=time.monotonic):
        self.source = source
        self.refresh_seconds = refresh_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._snapshot: Optional[ContentSnapshot] = None
        self._loaded: float = 0.0

    def _is_fresh(self) -> bool:
        return self._snapshot is not None and (self._clock() - self._loaded) < self.refresh_seconds

    def snapshot(self) -> ContentSnapshot:
        with self._lock:
            if self._is_fresh():
                return self._snapshot
            try:
                snap = self.source.load()
            except Exception as e:
                if self._snapshot is None:
                    raise
                # next attempt waits out a full interval
                self._loaded = self._clock()
                logger.error("Content refresh failed, serving previous snapshot: {}", e)
                return self._snapshot
            self._snapshot = snap
            self._loaded = self._clock()
            logger.info(
                "Loaded content snapshot: {} articles, {} authors, {} categories, {} subcategories, {} tags",
                len(snap.articles), len(snap.authors), len(snap.categories), len(snap.subcategories), len(snap.tags),
            )
            return snap

    def invalidate(self) -> None:
        with self._lock:
            self._loaded = float("-inf")
