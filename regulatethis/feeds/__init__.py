# Syndication and crawler documents: RSS feeds, sitemap.xml, robots.txt.

from .rss import generate_rss
from .scopes import FeedScope, fetch_scope, resolve_scope
from .sitemap import generate_robots, generate_sitemap

__all__ = ["generate_rss", "FeedScope", "fetch_scope", "resolve_scope", "generate_robots", "generate_sitemap"]
