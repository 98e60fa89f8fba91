# RSS 2.0 syndication documents for all articles or one scope
# (category, subcategory, author, tag).

from __future__ import annotations

import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Iterable, Optional

from ..content.types import Article
from ..settings import Settings, settings

ATOM_NS = "http://www.w3.org/2005/Atom"
MAX_ITEMS = 50

ET.register_namespace("atom", ATOM_NS)


def rfc822(dt: datetime) -> str:
    return format_datetime(dt.astimezone(timezone.utc), usegmt=True)


def latest_articles(articles: Iterable[Article], limit: int = MAX_ITEMS) -> list[Article]:
    return sorted(articles, key=lambda a: a.publish_date, reverse=True)[:limit]


def _text(parent: ET.Element, tag: str, value: str, **attrib: str) -> ET.Element:
    el = ET.SubElement(parent, tag, attrib)
    el.text = value
    return el


def _item(channel: ET.Element, article: Article, site: Settings) -> None:
    url = site.full_url(f"/blog/{article.slug}")
    item = ET.SubElement(channel, "item")
    _text(item, "title", article.title)
    _text(item, "link", url)
    _text(item, "guid", url, isPermaLink="true")
    _text(item, "description", article.excerpt)
    _text(item, "pubDate", rfc822(article.publish_date))
    _text(item, "author", f"{article.author.email or site.SITE_EMAIL} ({article.author.name})")
    _text(item, "category", article.category.name)
    for tag in article.tags:
        _text(item, "category", tag.name)
    if article.featured_image:
        ET.SubElement(item, "enclosure", {"url": article.featured_image, "type": "image/jpeg"})


def generate_rss(
    articles: Iterable[Article],
    *,
    title: Optional[str] = None,
    description: Optional[str] = None,
    feed_url: Optional[str] = None,
    site: Settings = settings,
    now: Optional[datetime] = None,
) -> str:
    """Render the newest MAX_ITEMS articles as an RSS 2.0 document."""
    latest = latest_articles(articles)
    last_build = latest[0].publish_date if latest else (now or datetime.now(timezone.utc))

    rss = ET.Element("rss", {"version": "2.0"})
    channel = ET.SubElement(rss, "channel")
    _text(channel, "title", title or site.SITE_NAME)
    _text(channel, "description", description or site.SITE_DESCRIPTION)
    _text(channel, "link", site.base_url)
    _text(channel, "language", site.SITE_LANGUAGE)
    _text(channel, "lastBuildDate", rfc822(last_build))
    ET.SubElement(
        channel,
        f"{{{ATOM_NS}}}link",
        {"href": feed_url or site.full_url("/feed.xml"), "rel": "self", "type": "application/rss+xml"},
    )
    for article in latest:
        _item(channel, article, site)

    ET.indent(rss, space="  ")
    return '<?xml version="1.0" encoding="UTF-8"?>\n' + ET.tostring(rss, encoding="unicode")
