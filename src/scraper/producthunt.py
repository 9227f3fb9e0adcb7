"""Product Hunt: homepage listing scrape and the public GraphQL API."""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import aiohttp

from . import config
from .browser import ScrapeError, SessionFactory, open_session, visit_details, wait_until
from .extractor import PageDocument, extract_fields, select_first
from .targets import PRODUCT_HUNT_DETAIL_TARGETS, PRODUCT_HUNT_ITEM_CONTAINERS, PRODUCT_HUNT_ITEM_TARGETS

logger = logging.getLogger(__name__)

PRODUCT_HUNT_DETAIL_DEFAULTS: Dict[str, Any] = {
    **{target.name: target.fallback for target in PRODUCT_HUNT_DETAIL_TARGETS},
    "provenance": {},
    "scraped_at": "N/A",
}

POST_ORDERS = ("RANKING", "NEWEST", "VOTES", "FEATURED_AT")

POSTS_QUERY = """
query Posts($first: Int!, $order: PostsOrder) {
  posts(first: $first, order: $order) {
    edges {
      node {
        id
        name
        tagline
        description
        votesCount
        commentsCount
        website
        url
        createdAt
        topics(first: 5) { edges { node { name } } }
        makers { name username }
      }
    }
  }
}
"""


# --- Browser scrape ---

def parse_product_listing(doc: PageDocument, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    products: List[Dict[str, Any]] = []
    seen_urls = set()
    for item in select_first(doc, PRODUCT_HUNT_ITEM_CONTAINERS):
        values, _ = extract_fields(PRODUCT_HUNT_ITEM_TARGETS, doc.scope(item))
        if values["name"] == "N/A":
            continue
        if values["url"] != "N/A":
            if values["url"] in seen_urls:
                continue
            seen_urls.add(values["url"])
        products.append(values)
        if limit is not None and len(products) >= limit:
            break
    return products


def extract_product_details(doc: PageDocument) -> Dict[str, Any]:
    details, provenance = extract_fields(PRODUCT_HUNT_DETAIL_TARGETS, doc)
    details["provenance"] = provenance
    details["scraped_at"] = datetime.now(timezone.utc).isoformat()
    return details


async def scrape_product_hunt(
    limit: int = 10,
    with_details: bool = False,
    delay: float = config.POLITE_DELAY_SECONDS,
    session_factory: Optional[SessionFactory] = None,
) -> List[Dict[str, Any]]:
    async with open_session(session_factory) as session:
        logger.info(f"Navigating to {config.PRODUCT_HUNT_URL}")
        await session.goto(config.PRODUCT_HUNT_URL, timeout_ms=config.LISTING_LOAD_TIMEOUT_MS)

        async def has_products():
            return await session.count(", ".join(PRODUCT_HUNT_ITEM_CONTAINERS)) > 0

        await wait_until(has_products, timeout=config.LISTING_LOAD_TIMEOUT_MS / 1000, description="product items")
        products = parse_product_listing(await session.document(), limit)
        if not products:
            raise ScrapeError("No products found on page")
        logger.info(f"Found {len(products)} products.")
        if not with_details:
            return products
        return await visit_details(session, products, extract_product_details, PRODUCT_HUNT_DETAIL_DEFAULTS, delay=delay)


# --- GraphQL API ---

class ProductHuntAPIError(Exception):
    def __init__(self, message: str, status: Optional[int] = None, details: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.details = details


class ProductHuntClient:
    """Minimal client for the Product Hunt v2 GraphQL API (bearer token)."""

    def __init__(self, token: Optional[str] = None, api_url: str = config.PRODUCT_HUNT_API_URL, timeout: float = 30):
        self.token = token or config.PRODUCT_HUNT_TOKEN
        if not self.token:
            raise ValueError("PRODUCT_HUNT_TOKEN is not set. Add it to your .env file.")
        self.api_url = api_url
        self.timeout = timeout

    async def query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        headers = {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        payload = {"query": query, "variables": variables or {}}
        try:
            async with aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout)) as session:
                async with session.post(self.api_url, json=payload, headers=headers) as response:
                    status = response.status
                    text = await response.text()
        except aiohttp.ClientError as e:
            raise ProductHuntAPIError("Product Hunt API request failed", details=str(e)) from e

        if status != 200:
            raise ProductHuntAPIError(f"Product Hunt API returned {status}", status=status, details=text[:500])
        try:
            result = json.loads(text)
        except ValueError as e:
            raise ProductHuntAPIError("Product Hunt API returned invalid JSON", status=status, details=text[:500]) from e
        if result.get("errors"):
            raise ProductHuntAPIError("Product Hunt API returned GraphQL errors", status=status, details=result["errors"])
        return result.get("data") or {}

    async def fetch_posts(self, count: int = 10, order: str = "VOTES") -> List[Dict[str, Any]]:
        if order not in POST_ORDERS:
            raise ValueError(f"order must be one of {', '.join(POST_ORDERS)}")
        data = await self.query(POSTS_QUERY, {"first": count, "order": order})
        edges = (data.get("posts") or {}).get("edges") or []
        logger.info(f"Fetched {len(edges)} posts from Product Hunt API")
        return [normalize_post(edge.get("node") or {}) for edge in edges]


def normalize_post(node: Dict[str, Any]) -> Dict[str, Any]:
    topics = [
        (edge.get("node") or {}).get("name")
        for edge in (node.get("topics") or {}).get("edges") or []
    ]
    makers = [
        {"name": maker.get("name") or "N/A", "username": maker.get("username") or "N/A"}
        for maker in node.get("makers") or []
    ]
    return {
        "id": node.get("id") or "N/A",
        "name": node.get("name") or "N/A",
        "tagline": node.get("tagline") or "N/A",
        "description": node.get("description") or "N/A",
        "votes": node.get("votesCount") or 0,
        "comments": node.get("commentsCount") or 0,
        "website": node.get("website") or "N/A",
        "url": node.get("url") or "N/A",
        "created_at": node.get("createdAt") or "N/A",
        "topics": [topic for topic in topics if topic],
        "makers": makers,
    }
