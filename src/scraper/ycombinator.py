"""Y Combinator company directory: listing page plus one detail page per company."""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from . import config
from .browser import ScrapeError, SessionFactory, open_session, visit_details, wait_until
from .extractor import (
    PROFILE_PLATFORMS,
    PageDocument,
    extract_emails,
    extract_fields,
    extract_phones,
    extract_social_handles,
    extract_social_profiles,
    select_first,
)
from .targets import (
    YC_COMPANY_LINK,
    YC_DETAIL_TARGETS,
    YC_FOUNDER_CONTAINERS,
    YC_FOUNDER_TARGETS,
    YC_JOB_CONTAINERS,
    YC_JOB_TARGETS,
    YC_LISTING_TARGETS,
)

logger = logging.getLogger(__name__)

SORT_SELECT = "select"
SORT_SETTLE_TIMEOUT_SECONDS = 10
RESERVED_SLUGS = {"founders", "industry", "location", "batch", "tags"}

YC_DETAIL_DEFAULTS: Dict[str, Any] = {
    **{target.name: target.fallback for target in YC_DETAIL_TARGETS},
    "founders": [],
    "contacts": {"emails": [], "phones": [], "social": {}},
    "social_profiles": {platform: [] for platform in PROFILE_PLATFORMS},
    "jobs": [],
    "provenance": {},
    "scraped_at": "N/A",
}


def company_slug(href: str) -> Optional[str]:
    """``/companies/<slug>`` -> slug; anything deeper or shallower -> None."""
    parts = urlparse(href).path.rstrip("/").split("/")
    if len(parts) != 3 or parts[1] != "companies":
        return None
    slug = parts[2]
    if not slug or slug in RESERVED_SLUGS:
        return None
    return slug


def parse_yc_listing(doc: PageDocument, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    """Provisional records from the directory, in listing order."""
    companies: List[Dict[str, Any]] = []
    seen = set()
    for anchor in doc.select(YC_COMPANY_LINK):
        slug = company_slug(anchor.get("href", ""))
        if slug is None or slug in seen:
            continue
        seen.add(slug)
        # Cards are usually the anchor itself; older markup nests spans in a sibling div.
        card = anchor if anchor.find(["span", "div"]) else (anchor.find_parent("div") or anchor)
        values, _ = extract_fields(YC_LISTING_TARGETS, doc.scope(card))
        values["url"] = doc.absolute(anchor["href"])
        values["slug"] = slug
        companies.append(values)
        if limit is not None and len(companies) >= limit:
            break
    return companies


def _scoped_records(doc: PageDocument, containers, targets, key: str) -> List[Dict[str, Any]]:
    records: List[Dict[str, Any]] = []
    for element in select_first(doc, containers):
        values, _ = extract_fields(targets, doc.scope(element))
        if values[key] == "N/A" or values in records:
            continue
        records.append(values)
    return records


def extract_founders(doc: PageDocument) -> List[Dict[str, Any]]:
    return _scoped_records(doc, YC_FOUNDER_CONTAINERS, YC_FOUNDER_TARGETS, "name")


def extract_jobs(doc: PageDocument) -> List[Dict[str, Any]]:
    return _scoped_records(doc, YC_JOB_CONTAINERS, YC_JOB_TARGETS, "title")


def extract_yc_details(doc: PageDocument) -> Dict[str, Any]:
    """Every detail-only field of a company page (see ``YC_DETAIL_DEFAULTS``)."""
    details, provenance = extract_fields(YC_DETAIL_TARGETS, doc)
    details["founders"] = extract_founders(doc)
    details["contacts"] = {
        "emails": extract_emails(doc),
        "phones": extract_phones(doc),
        "social": extract_social_handles(doc.links),
    }
    details["social_profiles"] = extract_social_profiles(doc.links)
    details["jobs"] = extract_jobs(doc)
    details["provenance"] = provenance
    details["scraped_at"] = datetime.now(timezone.utc).isoformat()
    return details


async def load_yc_listing(session, limit: int) -> List[Dict[str, Any]]:
    """Open the directory, sort by launch date and read the first ``limit`` cards.

    Navigation failures and an empty listing abort the invocation.
    """
    logger.info("Navigating to YCombinator companies page...")
    await session.goto(config.YC_COMPANIES_URL, timeout_ms=config.LISTING_LOAD_TIMEOUT_MS)

    async def has_companies():
        return await session.count(YC_COMPANY_LINK) > 0

    await wait_until(has_companies, timeout=config.LISTING_LOAD_TIMEOUT_MS / 1000, description="company links")

    logger.info("Setting sort order to Launch Date...")
    try:
        before = await session.first_attribute(YC_COMPANY_LINK, "href")
        await session.select_option(SORT_SELECT, config.YC_SORT_VALUE)

        async def resorted():
            return await session.first_attribute(YC_COMPANY_LINK, "href") != before

        await wait_until(resorted, timeout=SORT_SETTLE_TIMEOUT_SECONDS, description="re-sorted listing")
    except ScrapeError as e:
        logger.warning(f"Could not apply launch-date sort, keeping default order: {e}")

    doc = await session.document()
    companies = parse_yc_listing(doc, limit)
    if not companies:
        raise ScrapeError("No companies found on page")
    logger.info(f"Found {len(companies)} companies. Getting detailed information...")
    return companies


async def scrape_yc_companies(
    limit: int = 10,
    delay: float = config.POLITE_DELAY_SECONDS,
    session_factory: Optional[SessionFactory] = None,
) -> List[Dict[str, Any]]:
    async with open_session(session_factory) as session:
        listing = await load_yc_listing(session, limit)
        return await visit_details(session, listing, extract_yc_details, YC_DETAIL_DEFAULTS, delay=delay)
