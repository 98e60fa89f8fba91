# sitemap.xml and robots.txt.

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from ..content.types import Article, Author, Category, Subcategory, Tag
from ..settings import Settings, settings

SITEMAP_NS = "http://www.sitemaps.org/schemas/sitemap/0.9"


@dataclass(frozen=True)
class SitemapURL:
    loc: str
    lastmod: Optional[str] = None
    changefreq: Optional[str] = None  # always|hourly|daily|weekly|monthly|yearly|never
    priority: Optional[float] = None


def format_date(dt: datetime) -> str:
    return dt.astimezone(timezone.utc).strftime("%Y-%m-%d")


def sitemap_urls(
    articles: Sequence[Article],
    authors: Sequence[Author],
    categories: Sequence[Category],
    subcategories: Sequence[Subcategory],
    tags: Sequence[Tag],
    *,
    site: Settings = settings,
    now: Optional[datetime] = None,
) -> List[SitemapURL]:
    now = now or datetime.now(timezone.utc)
    ordered = sorted(articles, key=lambda a: a.publish_date, reverse=True)
    url = site.full_url

    urls = [
        SitemapURL(url("/"), format_date(now), "daily", 1.0),
        SitemapURL(url("/about"), None, "monthly", 0.8),
        SitemapURL(url("/blog"), format_date(ordered[0].publish_date) if ordered else None, "daily", 0.9),
        SitemapURL(url("/authors"), None, "weekly", 0.7),
        SitemapURL(url("/search"), None, "weekly", 0.5),
        SitemapURL(url("/feeds"), None, "monthly", 0.4),
    ]
    urls += [SitemapURL(url(f"/blog/{a.slug}"), format_date(a.publish_date), "monthly", 0.8) for a in ordered]
    urls += [SitemapURL(url(f"/authors/{a.slug}"), None, "monthly", 0.6) for a in authors]
    urls += [SitemapURL(url(f"/categories/{c.slug}"), None, "weekly", 0.8) for c in categories]
    urls += [SitemapURL(url(f"/subcategories/{s.slug}"), None, "weekly", 0.7) for s in subcategories]
    urls += [SitemapURL(url(f"/tags/{t.slug}"), None, "weekly", 0.5) for t in tags]
    return urls


def generate_sitemap(
    articles: Sequence[Article],
    authors: Sequence[Author],
    categories: Sequence[Category],
    subcategories: Sequence[Subcategory],
    tags: Sequence[Tag],
    *,
    site: Settings = settings,
    now: Optional[datetime] = None,
) -> str:
    urlset = ET.Element("urlset", {"xmlns": SITEMAP_NS})
    for u in sitemap_urls(articles, authors, categories, subcategories, tags, site=site, now=now):
        node = ET.SubElement(urlset, "url")
        ET.SubElement(node, "loc").text = u.loc
        if u.lastmod:
            ET.SubElement(node, "lastmod").text = u.lastmod
        if u.changefreq:
            ET.SubElement(node, "changefreq").text = u.changefreq
        if u.priority is not None:
            ET.SubElement(node, "priority").text = f"{u.priority:.1f}"

    ET.indent(urlset, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(urlset, encoding="unicode")


def generate_robots(site: Settings = settings) -> str:
    return (
        f"# Robot Rules for {site.SITE_NAME}\n"
        "# Allow all search engines to crawl the site\n"
        "\n"
        "User-agent: *\n"
        "Allow: /\n"
        "\n"
        "Disallow: /api/\n"
        "Disallow: /admin/\n"
        "\n"
        f"Sitemap: {site.full_url('/sitemap.xml')}\n"
    )
