"""
Pytest configuration and shared fixtures.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from regulatethis.content.types import Article, Author, Category, ContentSnapshot, Subcategory, Tag


class StaticSource:
    """Content source that always returns the same snapshot."""

    def __init__(self, snapshot: ContentSnapshot):
        self.snapshot = snapshot
        self.loads = 0

    def load(self) -> ContentSnapshot:
        self.loads += 1
        return self.snapshot


# ============================================================
# Entity Fixtures
# ============================================================


@pytest.fixture
def wealth_category():
    return Category(
        id="2",
        name="Wealth Management Software",
        slug="wealth-management-software",
        subtitle="Cutting Through the Noise",
        description="Every new app claims to be the solution. We test those claims against reality.",
        order=2,
    )


@pytest.fixture
def compliance_category():
    return Category(
        id="3",
        name="Compliance & Regulation",
        slug="compliance-regulation",
        subtitle="Keeping You Ahead of the Curve",
        description="Regulatory shifts rarely arrive with clear instructions.",
        order=3,
    )


@pytest.fixture
def david():
    return Author(
        id="2",
        name="David Chen",
        slug="david-chen",
        title="Technology Strategy Director",
        bio="David specializes in helping wealth management firms leverage technology for operational efficiency and better client outcomes.",
        email="david@regulatethis.com",
    )


@pytest.fixture
def sarah():
    return Author(
        id="1",
        name="Sarah Mitchell",
        slug="sarah-mitchell",
        title="Chief Compliance Officer",
        bio="Sarah has over 15 years of experience in regulatory compliance and has helped hundreds of RIAs navigate complex SEC requirements.",
    )


@pytest.fixture
def crm_tag():
    return Tag(id="3", name="CRM Systems", slug="crm-systems")


@pytest.fixture
def crm_subcategory():
    return Subcategory(
        id="wms-1",
        name="CRM Systems",
        slug="crm-systems",
        description="Client relationship management platforms and best practices",
        category_id="2",
    )


@pytest.fixture
def crm_article(wealth_category, david, crm_tag, crm_subcategory):
    return Article(
        id="2",
        title="CRM Platforms Compared: What Advisors Actually Use",
        subtitle="Real adoption data from 200+ firms",
        slug="crm-platforms-compared",
        excerpt="Every CRM vendor claims high adoption rates. We surveyed 200+ firms to see what advisors actually use daily.",
        category=wealth_category,
        author=david,
        publish_date=datetime(2024, 12, 18, tzinfo=timezone.utc),
        subcategories=(crm_subcategory,),
        tags=(crm_tag,),
        featured_image="https://placehold.co/1200x600?text=CRM",
    )


@pytest.fixture
def sec_article(compliance_category, sarah):
    return Article(
        id="1",
        title="The 2025 SEC Examination Priorities: What Actually Matters",
        subtitle="Cutting through regulatory noise",
        slug="2025-sec-examination-priorities",
        excerpt="The SEC released its examination priorities for 2025.",
        category=compliance_category,
        author=sarah,
        publish_date=datetime(2024, 12, 20, tzinfo=timezone.utc),
    )


@pytest.fixture
def snapshot(crm_article, sec_article, david, sarah, crm_tag, wealth_category, compliance_category, crm_subcategory):
    return ContentSnapshot(
        articles=(sec_article, crm_article),
        authors=(sarah, david),
        categories=(wealth_category, compliance_category),
        subcategories=(crm_subcategory,),
        tags=(crm_tag, Tag(id="6", name="Cybersecurity", slug="cybersecurity")),
    )


@pytest.fixture
def many_articles(crm_article):
    """60 articles, one per day, newest last."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    return [
        Article(
            id=str(i),
            title=f"Article {i}",
            slug=f"article-{i}",
            excerpt=f"Excerpt {i}",
            category=crm_article.category,
            author=crm_article.author,
            publish_date=base + timedelta(days=i),
        )
        for i in range(60)
    ]


# ============================================================
# HTTP Fixtures
# ============================================================


def make_response(status_code: int = 200, payload=None, text: str = ""):
    resp = Mock()
    resp.status_code = status_code
    resp.ok = 200 <= status_code < 300
    resp.json.return_value = payload if payload is not None else {}
    resp.text = text
    return resp


@pytest.fixture
def mock_session():
    return Mock()
