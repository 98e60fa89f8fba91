"""
Tests for the CMS client, record transforms and the snapshot provider.
"""

from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

from regulatethis.content import CMSContentSource, ContentProvider, FileContentSource, StrapiClient
from regulatethis.content.transform import PLACEHOLDER_IMAGE, media_url, parse_datetime, to_article, to_category
from regulatethis.content.types import ContentSnapshot
from regulatethis.exceptions import ContentAPIError

from .conftest import StaticSource, make_response

SAMPLE_CONTENT = Path(__file__).resolve().parents[1] / "data" / "sample_content.yaml"

RAW_ARTICLE = {
    "id": 7,
    "documentId": "abc123",
    "title": "CRM Platforms Compared",
    "slug": "crm-platforms-compared",
    "excerpt": "Every CRM vendor claims high adoption rates.",
    "publishDate": "2024-12-18T09:00:00.000Z",
    "readTime": 10,
    "isFeatured": True,
    "featuredImage": {"url": "/uploads/crm.jpg"},
    "author": {"id": 2, "name": "David Chen", "slug": "david-chen", "photo": {"url": "https://cdn.example.com/dc.png"}},
    "category": {
        "id": 2,
        "name": "Wealth Management Software",
        "slug": "wealth-management-software",
        "details": [{"detail": "CRM solutions that advisors actually use"}],
        "order": 2,
    },
    "tags": [{"id": 3, "name": "CRM Systems", "slug": "crm-systems"}],
    "subcategories": [{"id": 11, "name": "CRM Systems", "slug": "crm-systems", "category": {"id": 2}}],
    "seo": {"metaTitle": "CRM compared", "ogImage": {"url": "/uploads/og.jpg"}},
}


# ============================================================
# Transforms
# ============================================================


def test_parse_datetime_variants():
    assert parse_datetime("2024-12-18T09:00:00.000Z") == datetime(2024, 12, 18, 9, tzinfo=timezone.utc)
    assert parse_datetime("2024-12-18") == datetime(2024, 12, 18, tzinfo=timezone.utc)
    naive = datetime(2024, 1, 1)
    assert parse_datetime(naive).tzinfo is timezone.utc


def test_media_url_prefixes_relative_paths():
    assert media_url({"url": "/uploads/a.jpg"}, "http://cms:1337/") == "http://cms:1337/uploads/a.jpg"
    assert media_url({"url": "https://cdn/a.jpg"}, "http://cms:1337") == "https://cdn/a.jpg"
    assert media_url(None, "http://cms:1337") == PLACEHOLDER_IMAGE
    assert media_url({}, "http://cms:1337") == PLACEHOLDER_IMAGE


def test_to_article_maps_relations():
    article = to_article(RAW_ARTICLE, "http://cms:1337")

    assert article.id == "7"
    assert article.author.name == "David Chen"
    assert article.author.photo == "https://cdn.example.com/dc.png"
    assert article.category.details == ("CRM solutions that advisors actually use",)
    assert [t.slug for t in article.tags] == ["crm-systems"]
    assert article.subcategories[0].category_id == "2"
    assert article.featured_image == "http://cms:1337/uploads/crm.jpg"
    assert article.is_featured is True
    assert article.seo.og_image == "http://cms:1337/uploads/og.jpg"
    assert article.publish_date.tzinfo is not None


@pytest.mark.parametrize("missing", ["author", "category"])
def test_to_article_skips_records_without_required_relation(missing):
    raw = {**RAW_ARTICLE, missing: None}
    assert to_article(raw, "http://cms:1337") is None


def test_to_category_defaults():
    cat = to_category({"id": 1, "name": "Practice Management", "slug": "practice-management"})
    assert cat.subtitle == ""
    assert cat.details == ()
    assert cat.order == 0


# ============================================================
# Client
# ============================================================


def test_client_builds_api_url_and_auth_header(mock_session):
    mock_session.request.return_value = make_response(payload={"data": []})
    client = StrapiClient("http://cms:1337/", api_token="secret", session=mock_session)

    client.get("/tags")

    args, kwargs = mock_session.request.call_args
    assert args == ("GET", "http://cms:1337/api/tags")
    assert kwargs["headers"]["Authorization"] == "Bearer secret"
    assert kwargs["params"] is None


def test_client_omits_auth_without_token(mock_session):
    mock_session.request.return_value = make_response(payload={"data": []})
    StrapiClient("http://cms:1337", session=mock_session).get("/tags")
    assert "Authorization" not in mock_session.request.call_args.kwargs["headers"]


def test_client_retries_then_raises(mock_session):
    mock_session.request.side_effect = requests.ConnectionError("refused")
    client = StrapiClient("http://cms:1337", retries=2, retry_wait=0, session=mock_session)

    with pytest.raises(ContentAPIError):
        client.get("/articles")
    assert mock_session.request.call_count == 3


def test_client_recovers_after_transient_error(mock_session):
    mock_session.request.side_effect = [
        make_response(status_code=502, text="bad gateway"),
        make_response(payload={"data": [{"id": 1, "name": "CRM", "slug": "crm"}]}),
    ]
    client = StrapiClient("http://cms:1337", retries=2, retry_wait=0, session=mock_session)

    tags = client.fetch_tags()

    assert [t.slug for t in tags] == ["crm"]
    assert mock_session.request.call_count == 2


def test_client_error_carries_status(mock_session):
    mock_session.request.return_value = make_response(status_code=403, text="Forbidden")
    client = StrapiClient("http://cms:1337", retries=0, retry_wait=0, session=mock_session)

    with pytest.raises(ContentAPIError) as exc:
        client.get("/authors")
    assert exc.value.status_code == 403
    assert exc.value.path == "/authors"


def test_writes_are_not_retried(mock_session):
    mock_session.request.return_value = make_response(status_code=500, text="boom")
    client = StrapiClient("http://cms:1337", retries=3, retry_wait=0, session=mock_session)

    with pytest.raises(ContentAPIError):
        client.post("/newsletter-subscribers", {"data": {}})
    assert mock_session.request.call_count == 1


def test_fetch_articles_filters(mock_session):
    mock_session.request.return_value = make_response(payload={"data": [RAW_ARTICLE, {**RAW_ARTICLE, "author": None}]})
    client = StrapiClient("http://cms:1337", session=mock_session)

    articles = client.fetch_articles(limit=5, category_slug="wealth-management-software", tag_slug="crm-systems")

    params = mock_session.request.call_args.kwargs["params"]
    assert ("pagination[pageSize]", "5") in params
    assert ("sort[0]", "publishDate:desc") in params
    assert ("filters[category][slug][$eq]", "wealth-management-software") in params
    assert ("filters[tags][slug][$eq]", "crm-systems") in params
    assert ("filters[publishedAt][$notNull]", "true") in params
    assert len(articles) == 1


def test_fetch_by_slug_returns_none_on_error(mock_session):
    mock_session.request.return_value = make_response(status_code=500, text="down")
    client = StrapiClient("http://cms:1337", retries=0, retry_wait=0, session=mock_session)
    assert client.fetch_author_by_slug("david-chen") is None


def test_fetch_by_slug_returns_none_when_empty(mock_session):
    mock_session.request.return_value = make_response(payload={"data": []})
    client = StrapiClient("http://cms:1337", session=mock_session)
    assert client.fetch_tag_by_slug("nope") is None


def test_cms_source_loads_all_collections():
    client = Mock()
    client.fetch_articles.return_value = []
    client.fetch_authors.return_value = []
    client.fetch_categories.return_value = []
    client.fetch_subcategories.return_value = []
    client.fetch_tags.return_value = []

    snap = CMSContentSource(client).load()

    assert snap.articles == ()
    assert snap.loaded_at is not None
    client.fetch_tags.assert_called_once()


# ============================================================
# File source
# ============================================================


def test_file_source_resolves_slugs():
    snap = FileContentSource(SAMPLE_CONTENT).load()

    assert len(snap.articles) == 6
    assert len(snap.authors) == 3
    dates = [a.publish_date for a in snap.articles]
    assert dates == sorted(dates, reverse=True)

    crm = snap.article_by_slug("crm-platforms-compared")
    assert crm.author.name == "David Chen"
    assert crm.category.slug == "wealth-management-software"
    assert {t.slug for t in crm.tags} == {"crm-systems", "integration"}
    assert [c.order for c in snap.categories] == [1, 2, 3]


def test_file_source_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        FileContentSource(tmp_path / "missing.yaml").load()


def test_file_source_skips_unresolved_articles(tmp_path):
    path = tmp_path / "content.yaml"
    path.write_text(
        "categories: [{id: 1, name: A, slug: a}]\n"
        "authors: [{id: 1, name: B, slug: b}]\n"
        "articles:\n"
        "  - {id: 1, title: Kept, slug: kept, category: a, author: b, publish_date: '2024-01-01'}\n"
        "  - {id: 2, title: Dropped, slug: dropped, category: zzz, author: b, publish_date: '2024-01-02'}\n",
        encoding="utf-8",
    )
    snap = FileContentSource(path).load()
    assert [a.slug for a in snap.articles] == ["kept"]


# ============================================================
# Provider
# ============================================================


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


def test_provider_caches_until_refresh_interval(snapshot):
    source = StaticSource(snapshot)
    clock = FakeClock()
    provider = ContentProvider(source, refresh_seconds=60, clock=clock)

    assert provider.snapshot() is snapshot
    clock.now = 30
    provider.snapshot()
    assert source.loads == 1

    clock.now = 61
    provider.snapshot()
    assert source.loads == 2


def test_provider_invalidate_forces_reload(snapshot):
    source = StaticSource(snapshot)
    provider = ContentProvider(source, refresh_seconds=60, clock=FakeClock())
    provider.snapshot()
    provider.invalidate()
    provider.snapshot()
    assert source.loads == 2


def test_provider_serves_stale_snapshot_when_refresh_fails(snapshot):
    source = Mock()
    source.load.side_effect = [snapshot, ContentAPIError("down")]
    clock = FakeClock()
    provider = ContentProvider(source, refresh_seconds=10, clock=clock)

    first = provider.snapshot()
    clock.now = 100
    assert provider.snapshot() is first


def test_provider_raises_without_previous_snapshot():
    source = Mock()
    source.load.side_effect = ContentAPIError("down")
    provider = ContentProvider(source, clock=FakeClock())
    with pytest.raises(ContentAPIError):
        provider.snapshot()


def test_snapshot_lookups(snapshot):
    assert snapshot.author_by_slug("david-chen").name == "David Chen"
    assert snapshot.tag_by_slug("cybersecurity").name == "Cybersecurity"
    assert snapshot.category_by_slug("nope") is None
    assert ContentSnapshot().article_by_slug("x") is None


# ============================================================
# Malformed bodies and CMS outages
# ============================================================


def _html_response():
    resp = make_response(status_code=200, text="<html>gateway</html>")
    resp.json.side_effect = requests.exceptions.JSONDecodeError("Expecting value", "<html>", 0)
    return resp


def test_non_json_body_is_content_error_and_retried(mock_session):
    mock_session.request.return_value = _html_response()
    client = StrapiClient("http://cms:1337", retries=2, retry_wait=0, session=mock_session)

    with pytest.raises(ContentAPIError) as exc:
        client.get("/articles")
    assert exc.value.path == "/articles"
    assert mock_session.request.call_count == 3


def test_non_json_body_then_valid_response(mock_session):
    mock_session.request.side_effect = [_html_response(), make_response(payload={"data": []})]
    client = StrapiClient("http://cms:1337", retries=1, retry_wait=0, session=mock_session)
    assert client.fetch_tags() == []


def test_fetch_by_slug_returns_none_on_non_json_body(mock_session):
    mock_session.request.return_value = _html_response()
    client = StrapiClient("http://cms:1337", retries=0, retry_wait=0, session=mock_session)
    assert client.fetch_tag_by_slug("x") is None


def test_failed_refresh_waits_a_full_interval_before_retrying(snapshot):
    source = Mock()
    source.load.side_effect = [snapshot] + [ContentAPIError("down")] * 10
    clock = FakeClock()
    provider = ContentProvider(source, refresh_seconds=60, clock=clock)

    provider.snapshot()
    clock.now = 61
    for _ in range(5):
        assert provider.snapshot() is snapshot
    assert source.load.call_count == 2

    clock.now = 122
    provider.snapshot()
    assert source.load.call_count == 3
