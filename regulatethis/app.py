# ============================================================
# RegulateThis FastAPI App
# ------------------------------------------------------------
# This app wires everything together:
#   - Content snapshot provider (Strapi CMS or a YAML file)
#   - Multi-entity search with grouped / capped views
#   - RSS feeds, sitemap.xml, robots.txt
#   - Newsletter subscribe / unsubscribe
# ============================================================

from dataclasses import asdict
from functools import lru_cache
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response
from loguru import logger
from pydantic import BaseModel

# --- Local imports ---
from regulatethis.settings import settings
from regulatethis.content import CMSContentSource, ContentProvider, FileContentSource, StrapiClient
from regulatethis.exceptions import ContentAPIError, NewsletterError
from regulatethis.feeds import fetch_scope, generate_robots, generate_rss, generate_sitemap, resolve_scope
from regulatethis.newsletter import SubscriptionGateway, UnsubscribeOutcome, tenant_domain_from_host
from regulatethis.search import SearchRanker, SearchResult, cap_groups, group_results

XML_MEDIA_TYPE = "application/xml; charset=utf-8"

SCOPE_LABELS = {
    "categories": "Category",
    "subcategories": "Subcategory",
    "authors": "Author",
    "tags": "Tag",
}

# ------------------------------------------------------------
# 🔧 Service wiring
# ------------------------------------------------------------
@lru_cache(maxsize=1)
def get_client() -> StrapiClient:
    return StrapiClient(
        base_url=settings.CMS_URL,
        api_token=settings.STRAPI_API_TOKEN,
        timeout=settings.CMS_TIMEOUT,
        retries=settings.CMS_RETRIES,
        retry_wait=settings.CMS_RETRY_WAIT,
    )


@lru_cache(maxsize=1)
def get_provider() -> ContentProvider:
    if settings.CONTENT_SOURCE == "file":
        source = FileContentSource(settings.CONTENT_FILE)
    else:
        source = CMSContentSource(get_client())
    return ContentProvider(source, refresh_seconds=settings.CONTENT_REFRESH_SECONDS)


def get_feed_client() -> Optional[StrapiClient]:
    """Scoped feeds query the CMS directly; None means filter the local snapshot."""
    return None if settings.CONTENT_SOURCE == "file" else get_client()


@lru_cache(maxsize=1)
def get_ranker() -> SearchRanker:
    return SearchRanker()


@lru_cache(maxsize=1)
def get_gateway() -> SubscriptionGateway:
    return SubscriptionGateway(
        get_client(),
        collection=settings.NEWSLETTER_COLLECTION,
        default_tenant=settings.DEFAULT_TENANT_DOMAIN,
    )

# ------------------------------------------------------------
# 🚀 FastAPI init
# ------------------------------------------------------------
app = FastAPI(title="RegulateThis API", version="0.1")

# ------------------------------------------------------------
# 📦 Pydantic models
# ------------------------------------------------------------
class SearchHit(BaseModel):
    kind: str
    score: float
    item: Dict[str, Any]

class SearchResponse(BaseModel):
    query: str
    total: int
    results: List[SearchHit]
    groups: Dict[str, List[SearchHit]]

class SubscribeRequest(BaseModel):
    email: Optional[str] = None
    source: str = "Homepage"

class UnsubscribeRequest(BaseModel):
    email: Optional[str] = None
    reason: Optional[str] = None


def _hit(r: SearchResult) -> SearchHit:
    return SearchHit(kind=r.kind.value, score=r.score, item=jsonable_encoder(asdict(r.item)))


def _tenant(request: Request) -> str:
    host = request.headers.get("host") or request.headers.get("x-forwarded-host")
    return tenant_domain_from_host(host, settings.DEFAULT_TENANT_DOMAIN)


def _xml(body: str) -> Response:
    return Response(content=body, media_type=XML_MEDIA_TYPE, headers={"Cache-Control": settings.FEED_CACHE_CONTROL})

# ------------------------------------------------------------
# 🔎 Search
# ------------------------------------------------------------
@app.get("/api/search", response_model=SearchResponse)
def search_endpoint(
    q: str = Query("", description="Search query"),
    compact: bool = Query(False, description="Cap each group for the dropdown view"),
    provider: ContentProvider = Depends(get_provider),
    ranker: SearchRanker = Depends(get_ranker),
):
    try:
        snapshot = provider.snapshot()
    except ContentAPIError as e:
        logger.error("Search unavailable, content could not be loaded: {}", e)
        raise HTTPException(status_code=503, detail="Content temporarily unavailable")

    results = ranker.search(q, snapshot)
    groups = group_results(results)
    if compact:
        groups = cap_groups(groups)
    return SearchResponse(
        query=q,
        total=len(results),
        results=[_hit(r) for r in results],
        groups={kind.value: [_hit(r) for r in items] for kind, items in groups.items()},
    )

# ------------------------------------------------------------
# 📰 Feeds, sitemap, robots
# ------------------------------------------------------------
@app.get("/feed.xml")
def feed_all(provider: ContentProvider = Depends(get_provider)):
    try:
        return _xml(generate_rss(provider.snapshot().articles))
    except Exception as e:
        logger.error("Error generating RSS feed: {}", e)
        return Response("Error generating RSS feed", status_code=500, media_type="text/plain")


@app.get("/feed/{kind}/{slug}")
def feed_scoped(
    kind: str,
    slug: str,
    provider: ContentProvider = Depends(get_provider),
    cms: Optional[StrapiClient] = Depends(get_feed_client),
):
    if kind not in SCOPE_LABELS:
        return Response("Not found", status_code=404, media_type="text/plain")
    try:
        if cms is not None:
            scope = fetch_scope(kind, slug, cms)
        else:
            scope = resolve_scope(kind, slug, provider.snapshot())
        if scope is None:
            return Response(f"{SCOPE_LABELS[kind]} not found", status_code=404, media_type="text/plain")
        return _xml(generate_rss(scope.articles, title=scope.title, description=scope.description, feed_url=scope.feed_url))
    except Exception as e:
        logger.error("Error generating {} RSS feed: {}", kind, e)
        return Response("Error generating RSS feed", status_code=500, media_type="text/plain")


@app.get("/sitemap.xml")
def sitemap(provider: ContentProvider = Depends(get_provider)):
    try:
        snap = provider.snapshot()
        return _xml(generate_sitemap(snap.articles, snap.authors, snap.categories, snap.subcategories, snap.tags))
    except Exception as e:
        logger.error("Error generating sitemap: {}", e)
        return Response("Error generating sitemap", status_code=500, media_type="text/plain")


@app.get("/robots.txt")
def robots():
    return Response(
        content=generate_robots(),
        media_type="text/plain; charset=utf-8",
        headers={"Cache-Control": settings.ROBOTS_CACHE_CONTROL},
    )

# ------------------------------------------------------------
# ✉️ Newsletter
# ------------------------------------------------------------
@app.post("/api/newsletter", status_code=201)
def subscribe(req: SubscribeRequest, request: Request, gateway: SubscriptionGateway = Depends(get_gateway)):
    try:
        data = gateway.subscribe(req.email, source=req.source, tenant_domain=_tenant(request))
    except NewsletterError as e:
        return JSONResponse({"error": str(e)}, status_code=e.status_code)
    except ContentAPIError as e:
        logger.error("Newsletter subscription error: {}", e)
        return JSONResponse({"error": "Failed to subscribe. Please try again later."}, status_code=500)
    return {"success": True, "message": "Thank you for subscribing!", "data": data}


@app.post("/api/newsletter/unsubscribe")
def unsubscribe(req: UnsubscribeRequest, request: Request, gateway: SubscriptionGateway = Depends(get_gateway)):
    try:
        outcome = gateway.unsubscribe(req.email, reason=req.reason, tenant_domain=_tenant(request))
    except NewsletterError as e:
        return JSONResponse({"error": str(e)}, status_code=e.status_code)
    except ContentAPIError as e:
        logger.error("Newsletter unsubscribe error: {}", e)
        return JSONResponse({"error": "Failed to unsubscribe. Please try again later."}, status_code=500)
    if outcome is UnsubscribeOutcome.ALREADY_UNSUBSCRIBED:
        return {"message": "This email is already unsubscribed"}
    return {"success": True, "message": "You have been successfully unsubscribed"}

# ------------------------------------------------------------
# 🧭 Health checks
# ------------------------------------------------------------
@app.get("/healthz")
def healthz():
    return {
        "ok": True,
        "env": settings.ENV,
        "debug": settings.DEBUG,
        "app": settings.APP_NAME,
    }

@app.get("/health")
def health():
    return {"status": "ok", "env": settings.ENV}

@app.get("/")
def hello():
    return {"message": f"{settings.APP_NAME} service running."}
