# Entity models served by the headless CMS.
# Snapshots are immutable for the duration of a request; nothing here mutates.

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple


@dataclass(frozen=True)
class Category:
    id: str
    name: str
    slug: str
    subtitle: str = ""
    description: str = ""
    details: Tuple[str, ...] = ()
    order: int = 0


@dataclass(frozen=True)
class Subcategory:
    id: str
    name: str
    slug: str
    description: Optional[str] = None
    category_id: str = ""


@dataclass(frozen=True)
class Tag:
    id: str
    name: str
    slug: str


@dataclass(frozen=True)
class Author:
    id: str
    name: str
    slug: str
    title: str = ""
    bio: str = ""
    photo: str = ""
    linkedin: Optional[str] = None
    twitter: Optional[str] = None
    email: Optional[str] = None


@dataclass(frozen=True)
class SEOMetadata:
    meta_title: Optional[str] = None
    meta_description: Optional[str] = None
    keywords: Optional[str] = None
    canonical_url: Optional[str] = None
    no_index: bool = False
    og_image: Optional[str] = None


@dataclass(frozen=True)
class Article:
    """A published article. Always owned by exactly one category and one author."""
    id: str
    title: str
    slug: str
    excerpt: str
    category: Category
    author: Author
    publish_date: datetime
    subtitle: Optional[str] = None
    content: str = ""
    subcategories: Tuple[Subcategory, ...] = ()
    tags: Tuple[Tag, ...] = ()
    featured_image: str = ""
    read_time: int = 0
    is_featured: bool = False
    seo: Optional[SEOMetadata] = None


@dataclass(frozen=True)
class ContentSnapshot:
    """The five collections as loaded together from one content source."""
    articles: Tuple[Article, ...] = ()
    authors: Tuple[Author, ...] = ()
    categories: Tuple[Category, ...] = ()
    subcategories: Tuple[Subcategory, ...] = ()
    tags: Tuple[Tag, ...] = ()
    loaded_at: Optional[datetime] = field(default=None, compare=False)

    def category_by_slug(self, slug: str) -> Optional[Category]:
        return next((c for c in self.categories if c.slug == slug), None)

    def subcategory_by_slug(self, slug: str) -> Optional[Subcategory]:
        return next((s for s in self.subcategories if s.slug == slug), None)

    def author_by_slug(self, slug: str) -> Optional[Author]:
        return next((a for a in self.authors if a.slug == slug), None)

    def tag_by_slug(self, slug: str) -> Optional[Tag]:
        return next((t for t in self.tags if t.slug == slug), None)

    def article_by_slug(self, slug: str) -> Optional[Article]:
        return next((a for a in self.articles if a.slug == slug), None)
