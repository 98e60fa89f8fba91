# Strapi v5 REST client.
# Reads are retried (fixed wait) before a ContentAPIError is surfaced;
# writes go out once.

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

import requests
from loguru import logger
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_fixed

from ..exceptions import ContentAPIError
from .transform import to_article, to_author, to_category, to_subcategory, to_tag
from .types import Article, Author, Category, Subcategory, Tag

Params = Sequence[Tuple[str, str]]

ARTICLE_POPULATE: Params = [
    ("populate[0]", "author"),
    ("populate[1]", "author.photo"),
    ("populate[2]", "category"),
    ("populate[3]", "category.details"),
    ("populate[4]", "subcategories"),
    ("populate[5]", "subcategories.category"),
    ("populate[6]", "tags"),
    ("populate[7]", "featuredImage"),
    ("populate[8]", "seo"),
    ("populate[9]", "seo.ogImage"),
]


class StrapiClient:
    def __init__(
        self,
        base_url: str,
        api_token: Optional[str] = None,
        timeout: float = 10.0,
        retries: int = 3,
        retry_wait: float = 1.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_token = api_token
        self.timeout = timeout
        self.retries = retries
        self.retry_wait = retry_wait
        self.session = session or requests.Session()

    # -------------------------
    # Transport
    # -------------------------
    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_token:
            headers["Authorization"] = f"Bearer {self.api_token}"
        if extra:
            headers.update(extra)
        return headers

    def _send(
        self,
        method: str,
        path: str,
        params: Optional[Params] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Any:
        url = f"{self.base_url}/api{path}"
        try:
            resp = self.session.request(
                method,
                url,
                params=list(params) if params else None,
                json=json,
                headers=self._headers(headers),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ContentAPIError(f"Strapi request failed: {e}", path=path) from e
        if not resp.ok:
            raise ContentAPIError(
                f"Strapi API error ({resp.status_code}): {resp.text}",
                status_code=resp.status_code,
                path=path,
            )
        try:
            return resp.json()
        except ValueError as e:
            raise ContentAPIError(f"Strapi returned a non-JSON body: {e}", status_code=resp.status_code, path=path) from e

    def get(self, path: str, params: Optional[Params] = None, headers: Optional[Dict[str, str]] = None) -> Any:
        """GET /api{path}, retrying on any ContentAPIError."""
        retrying = Retrying(
            stop=stop_after_attempt(self.retries + 1),
            wait=wait_fixed(self.retry_wait),
            retry=retry_if_exception_type(ContentAPIError),
            reraise=True,
            before_sleep=lambda rs: logger.warning(
                "Retrying API call to {}... ({} attempts left)", path, self.retries - rs.attempt_number + 1
            ),
        )
        try:
            return retrying(self._send, "GET", path, params=params, headers=headers)
        except ContentAPIError:
            logger.error("Failed to fetch from Strapi: {}", path)
            raise

    def post(self, path: str, json: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        return self._send("POST", path, json=json, headers=headers)

    def put(self, path: str, json: Dict[str, Any], headers: Optional[Dict[str, str]] = None) -> Any:
        return self._send("PUT", path, json=json, headers=headers)

    def _first(self, path: str, params: Params) -> Optional[Dict[str, Any]]:
        """Return the first record of a filtered collection, or None (errors logged)."""
        try:
            data = self.get(path, params).get("data") or []
        except ContentAPIError as e:
            logger.error("Error fetching {} with {}: {}", path, dict(params), e)
            return None
        return data[0] if data else None

    # -------------------------
    # Articles
    # -------------------------
    def fetch_articles(
        self,
        limit: int = 100,
        page: int = 1,
        featured: Optional[bool] = None,
        category_slug: Optional[str] = None,
        subcategory_slug: Optional[str] = None,
        tag_slug: Optional[str] = None,
        author_id: Optional[str] = None,
    ) -> List[Article]:
        params: List[Tuple[str, str]] = [
            ("pagination[page]", str(page)),
            ("pagination[pageSize]", str(limit)),
            ("sort[0]", "publishDate:desc"),
            *ARTICLE_POPULATE,
        ]
        if featured is not None:
            params.append(("filters[isFeatured][$eq]", "true" if featured else "false"))
        if category_slug:
            params.append(("filters[category][slug][$eq]", category_slug))
        if subcategory_slug:
            params.append(("filters[subcategories][slug][$eq]", subcategory_slug))
        if tag_slug:
            params.append(("filters[tags][slug][$eq]", tag_slug))
        if author_id:
            params.append(("filters[author][id][$eq]", author_id))
        params.append(("filters[publishedAt][$notNull]", "true"))

        rows = self.get("/articles", params).get("data") or []
        articles = [to_article(r, self.base_url) for r in rows]
        return [a for a in articles if a is not None]

    def fetch_article_by_slug(self, slug: str) -> Optional[Article]:
        row = self._first("/articles", [("filters[slug][$eq]", slug), *ARTICLE_POPULATE])
        return to_article(row, self.base_url) if row else None

    # -------------------------
    # Authors
    # -------------------------
    def fetch_authors(self) -> List[Author]:
        params = [("populate[0]", "photo"), ("filters[isActive][$eq]", "true"), ("sort[0]", "name:asc")]
        return [to_author(r, self.base_url) for r in self.get("/authors", params).get("data") or []]

    def fetch_author_by_slug(self, slug: str) -> Optional[Author]:
        row = self._first("/authors", [("filters[slug][$eq]", slug), ("populate[0]", "photo")])
        return to_author(row, self.base_url) if row else None

    # -------------------------
    # Taxonomy
    # -------------------------
    def fetch_categories(self) -> List[Category]:
        params = [("populate[0]", "details"), ("sort[0]", "order:asc")]
        return [to_category(r) for r in self.get("/categories", params).get("data") or []]

    def fetch_category_by_slug(self, slug: str) -> Optional[Category]:
        row = self._first("/categories", [("filters[slug][$eq]", slug), ("populate[0]", "details")])
        return to_category(row) if row else None

    def fetch_subcategories(self) -> List[Subcategory]:
        params = [("populate[0]", "category"), ("sort[0]", "name:asc")]
        return [to_subcategory(r) for r in self.get("/subcategories", params).get("data") or []]

    def fetch_subcategory_by_slug(self, slug: str) -> Optional[Subcategory]:
        row = self._first("/subcategories", [("filters[slug][$eq]", slug), ("populate[0]", "category")])
        return to_subcategory(row) if row else None

    def fetch_tags(self) -> List[Tag]:
        return [to_tag(r) for r in self.get("/tags", [("sort[0]", "name:asc")]).get("data") or []]

    def fetch_tag_by_slug(self, slug: str) -> Optional[Tag]:
        row = self._first("/tags", [("filters[slug][$eq]", slug)])
        return to_tag(row) if row else None
