# Map Strapi v5 flat JSON records onto the entity dataclasses.
# Strapi v5 no longer nests fields under "attributes".

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from loguru import logger

from .types import Article, Author, Category, SEOMetadata, Subcategory, Tag

PLACEHOLDER_IMAGE = "/images/placeholder.jpg"


def parse_datetime(value: Any) -> datetime:
    """Parse an ISO date or datetime; naive values are taken as UTC."""
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def media_url(media: Optional[Dict[str, Any]], base_url: str) -> str:
    if not media or not media.get("url"):
        return PLACEHOLDER_IMAGE
    url = media["url"]
    if url.startswith("http"):
        return url
    return f"{base_url.rstrip('/')}{url}"


def to_seo(raw: Optional[Dict[str, Any]], base_url: str) -> Optional[SEOMetadata]:
    if not raw:
        return None
    return SEOMetadata(
        meta_title=raw.get("metaTitle") or None,
        meta_description=raw.get("metaDescription") or None,
        keywords=raw.get("keywords") or None,
        canonical_url=raw.get("canonicalURL") or None,
        no_index=bool(raw.get("noIndex")),
        og_image=media_url(raw["ogImage"], base_url) if raw.get("ogImage") else None,
    )


def to_tag(raw: Dict[str, Any]) -> Tag:
    return Tag(id=str(raw["id"]), name=raw["name"], slug=raw["slug"])


def to_subcategory(raw: Dict[str, Any]) -> Subcategory:
    parent = raw.get("category") or {}
    return Subcategory(
        id=str(raw["id"]),
        name=raw["name"],
        slug=raw["slug"],
        description=raw.get("description") or None,
        category_id=str(parent["id"]) if parent.get("id") is not None else "",
    )


def to_category(raw: Dict[str, Any]) -> Category:
    return Category(
        id=str(raw["id"]),
        name=raw["name"],
        slug=raw["slug"],
        subtitle=raw.get("subtitle") or "",
        description=raw.get("description") or "",
        details=tuple(d["detail"] for d in raw.get("details") or []),
        order=int(raw.get("order") or 0),
    )


def to_author(raw: Dict[str, Any], base_url: str) -> Author:
    return Author(
        id=str(raw["id"]),
        name=raw["name"],
        slug=raw.get("slug") or str(raw["id"]),
        title=raw.get("title") or "",
        bio=raw.get("bio") or "",
        photo=media_url(raw.get("photo"), base_url),
        linkedin=raw.get("linkedin") or None,
        twitter=raw.get("twitter") or None,
        email=raw.get("email") or None,
    )


def to_article(raw: Dict[str, Any], base_url: str) -> Optional[Article]:
    """Return None when the record lacks its author or category relation."""
    author = raw.get("author")
    category = raw.get("category")
    if not author:
        logger.warning("Article {} ({}) missing required relation: author - skipping", raw.get("id"), raw.get("title"))
        return None
    if not category:
        logger.warning("Article {} ({}) missing required relation: category - skipping", raw.get("id"), raw.get("title"))
        return None

    return Article(
        id=str(raw["id"]),
        title=raw["title"],
        subtitle=raw.get("subtitle") or None,
        slug=raw["slug"],
        content=raw.get("content") or "",
        excerpt=raw.get("excerpt") or "",
        category=to_category(category),
        author=to_author(author, base_url),
        publish_date=parse_datetime(raw["publishDate"]),
        subcategories=tuple(to_subcategory(s) for s in raw.get("subcategories") or []),
        tags=tuple(to_tag(t) for t in raw.get("tags") or []),
        featured_image=media_url(raw.get("featuredImage"), base_url),
        read_time=int(raw.get("readTime") or 0),
        is_featured=bool(raw.get("isFeatured")),
        seo=to_seo(raw.get("seo"), base_url),
    )
