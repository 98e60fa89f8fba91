# Newsletter subscribe / unsubscribe against the CMS subscriber collection.
# Email syntax is checked before anything goes over the wire.

from __future__ import annotations

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from loguru import logger

from ..content.client import StrapiClient
from ..exceptions import (
    AlreadySubscribedError,
    ContentAPIError,
    InvalidEmailError,
    SubscriberNotFoundError,
)

_EMAIL = re.compile(r"\S+@\S+\.\S+")


def is_valid_email(email: Optional[str]) -> bool:
    return bool(email) and _EMAIL.search(email) is not None


def tenant_domain_from_host(host: Optional[str], default: str) -> str:
    """Strip the port; localhost (and a missing host) map to the default tenant."""
    domain = (host or "").split(":")[0]
    return default if domain in ("", "localhost") else domain


class UnsubscribeOutcome(str, Enum):
    UNSUBSCRIBED = "unsubscribed"
    ALREADY_UNSUBSCRIBED = "already_unsubscribed"


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


class SubscriptionGateway:
    def __init__(self, client: StrapiClient, collection: str = "newsletter-subscribers", default_tenant: str = "regulatethis.com"):
        self.client = client
        self.collection = collection
        self.default_tenant = default_tenant

    def _headers(self, tenant_domain: Optional[str]) -> Dict[str, str]:
        return {"X-Tenant-Domain": tenant_domain or self.default_tenant}

    def _find(self, email: str, tenant_domain: Optional[str]) -> List[Dict[str, Any]]:
        resp = self.client.get(
            f"/{self.collection}",
            [("filters[email][$eq]", email)],
            headers=self._headers(tenant_domain),
        )
        return resp.get("data") or []

    def subscribe(self, email: Optional[str], source: str = "Homepage", tenant_domain: Optional[str] = None) -> Dict[str, Any]:
        """Create an active subscriber and return the CMS response body."""
        if not is_valid_email(email):
            raise InvalidEmailError(email)

        try:
            existing = self._find(email, tenant_domain)
        except ContentAPIError as e:
            # lookup failures fall through to the create call
            logger.warning("Subscriber lookup failed for tenant {}: {}", tenant_domain, e)
            existing = []
        if existing:
            raise AlreadySubscribedError(email)

        payload = {
            "data": {
                "email": email,
                "subscribedAt": _now_iso(),
                "status": "active",
                "source": source,
            }
        }
        try:
            created = self.client.post(f"/{self.collection}", payload, headers=self._headers(tenant_domain))
        except ContentAPIError as e:
            logger.error("Strapi error while subscribing: {}", e)
            raise
        logger.info("New newsletter subscriber from source {}", source)
        return created

    def unsubscribe(self, email: Optional[str], reason: Optional[str] = None, tenant_domain: Optional[str] = None) -> UnsubscribeOutcome:
        if not is_valid_email(email):
            raise InvalidEmailError(email)

        existing = self._find(email, tenant_domain)
        if not existing:
            raise SubscriberNotFoundError(email)

        subscriber = existing[0]
        if subscriber.get("status") == "unsubscribed":
            return UnsubscribeOutcome.ALREADY_UNSUBSCRIBED

        document_id = subscriber.get("documentId")
        if not document_id:
            raise ContentAPIError("Subscriber record has no documentId", path=f"/{self.collection}")

        data: Dict[str, Any] = {"status": "unsubscribed", "unsubscribedAt": _now_iso()}
        if reason:
            data["unsubscribeReason"] = reason
        try:
            self.client.put(
                f"/{self.collection}/{document_id}",
                {"data": data},
                headers=self._headers(tenant_domain),
            )
        except ContentAPIError as e:
            logger.error("Strapi error while unsubscribing: {}", e)
            raise
        return UnsubscribeOutcome.UNSUBSCRIBED
