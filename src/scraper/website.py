"""Business website profile: structure, categories, pricing, contacts and analysis."""
import logging
import re
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

from .analyzer import analyze, analyze_strategy, assess_position
from .browser import SessionFactory, open_session
from .contacts import clean_contact_info, extract_contact_info
from .extractor import PageDocument, extract_fields, find_unique
from .tagger import (
    BUSINESS_CATEGORIES,
    BUSINESS_INDICATORS,
    DEFAULT_TARGET_MARKET,
    PAIN_POINT_INDICATORS,
    TARGET_MARKETS,
    TECHNICAL_INDICATORS,
    first_tag,
    flags,
    tag_groups,
)
from .targets import WEBSITE_BASICS_TARGETS

logger = logging.getLogger(__name__)

PRICE_PATTERN = re.compile(r"\$\s?\d+(?:[.,]\d{2})?")
PRICING_SECTIONS = '[class*="pricing"], [class*="plan"], [id*="pricing"]'
BILLING_PERIODS = ("monthly", "annual", "yearly", "quarter")

METRIC_PATTERNS = {
    "employee_count": re.compile(r"(\d+(?:\+|\s*-\s*\d+)?)\s*(?:employees|team members|people|staff)", re.IGNORECASE),
    "customer_count": re.compile(r"(\d+(?:,\d{3})*(?:\+|\s*-\s*\d+)?)\s*(?:customers|clients|users|businesses)", re.IGNORECASE),
    "revenue": re.compile(r"(?:revenue|arr|mrr).{0,30}?\$?\s*(\d+(?:\.\d+)?)\s*(?:k|m|b|million|billion)?", re.IGNORECASE),
    "year_founded": re.compile(r"(?:founded|established|since)\s*(?:in)?\s*(\d{4})", re.IGNORECASE),
    "company_age": re.compile(r"(\d+)\+?\s*(?:years|yrs)(?:\s*of\s*experience|\s*in\s*business)", re.IGNORECASE),
}
PERCENTAGE_PATTERN = re.compile(r"\d+(?:\.\d+)?\s*%")

# script src fragment -> product name
SCRIPT_SIGNATURES = {
    "frontend": {"react": "React", "vue": "Vue", "angular": "Angular"},
    "analytics": {"google-analytics": "Google Analytics", "gtag": "Google Analytics", "segment": "Segment", "mixpanel": "Mixpanel"},
    "marketing": {"hubspot": "HubSpot", "marketo": "Marketo"},
    "payments": {"stripe": "Stripe", "paypal": "PayPal"},
}

COMPARISON_PHRASES = ("alternative to", "compared to", "vs", "versus", "similar to", "better than", "switch from")


def _texts(doc: PageDocument, selector: str) -> List[str]:
    return [t for t in (el.get_text(" ", strip=True) for el in doc.select(selector)) if t]


def extract_structure(doc: PageDocument) -> Dict[str, Any]:
    lists = []
    for element in doc.select("ul, ol"):
        items = _texts(doc.scope(element), "li")
        if items:
            lists.append(items)

    tables = []
    for table in doc.select("table"):
        table_doc = doc.scope(table)
        rows = []
        for tr in table_doc.select("tr"):
            cells = [td.get_text(" ", strip=True) for td in tr.find_all("td")]
            if cells:
                rows.append(cells)
        if rows:
            tables.append({"headers": _texts(table_doc, "th"), "rows": rows})

    return {
        "headers": {tag: _texts(doc, tag) for tag in ("h1", "h2", "h3", "h4")},
        "lists": lists,
        "paragraphs": [p for p in _texts(doc, "p") if len(p) > 30],
        "tables": tables,
    }


def extract_pricing(doc: PageDocument) -> Dict[str, Any]:
    text = doc.text
    lower = text.lower()

    plans = []
    for element in doc.select(PRICING_SECTIONS):
        plan_doc = doc.scope(element)
        prices = find_unique(PRICE_PATTERN, plan_doc.text)
        features = _texts(plan_doc, "li")
        if prices or features:
            heading = plan_doc.select_one("h2, h3, h4")
            name = heading.get_text(" ", strip=True) if heading else ""
            plans.append({"name": name or "Unnamed Plan", "prices": prices, "features": features})

    price_points = find_unique(PRICE_PATTERN, text)
    if "custom pricing" in lower:
        pricing_type = "Custom"
    elif "enterprise" in lower:
        pricing_type = "Enterprise"
    elif price_points:
        pricing_type = "Fixed"
    else:
        pricing_type = "Not specified"

    return {
        "plans": plans,
        "has_free_trial": re.search(r"free trial|try for free", lower) is not None,
        "has_free_plan": re.search(r"free plan|free tier|free forever", lower) is not None,
        "price_points": price_points,
        "billing_periods": [period for period in BILLING_PERIODS if period in lower],
        "enterprise_offering": re.search(r"enterprise|custom pricing|contact sales", lower) is not None,
        "pricing_type": pricing_type,
    }


def extract_metrics(text: str) -> Dict[str, Any]:
    metrics: Dict[str, Any] = {}
    for name, pattern in METRIC_PATTERNS.items():
        match = pattern.search(text)
        metrics[name] = match.group(1) if match else "N/A"
    metrics["percentages"] = find_unique(PERCENTAGE_PATTERN, text)
    return metrics


def detect_technology(doc: PageDocument) -> Dict[str, List[str]]:
    sources = [script.get("src", "").lower() for script in doc.select("script[src]")]
    stack: Dict[str, List[str]] = {}
    for group, signatures in SCRIPT_SIGNATURES.items():
        found = []
        for fragment, product in signatures.items():
            if product not in found and any(fragment in src for src in sources):
                found.append(product)
        stack[group] = found
    return stack


def extract_competitors(text: str) -> List[str]:
    lower = text.lower()
    competitors: List[str] = []
    for phrase in COMPARISON_PHRASES:
        for match in re.finditer(rf"\b{re.escape(phrase)}\s+(\w+(?:\s\w+){{0,2}})", lower):
            name = match.group(1).strip()
            if 2 < len(name) < 30 and name not in competitors:
                competitors.append(name)
    return competitors


def extract_marketing(doc: PageDocument, structure: Dict[str, Any]) -> Dict[str, List[str]]:
    """Benefit-style h2 headings and customer logo alt texts."""
    value_props = [h for h in structure["headers"]["h2"] if "why" in h.lower() or "benefit" in h.lower()][:5]
    logos = []
    for img in doc.select('[class*="customer"] img, [class*="client"] img'):
        alt = (img.get("alt") or "").strip()
        if alt and alt not in logos:
            logos.append(alt)
    return {"value_props": value_props, "logos": logos}


def extract_testimonials(doc: PageDocument) -> List[Dict[str, str]]:
    testimonials = []
    for element in doc.select('[class*="testimonial"], [class*="review"]'):
        text = element.get_text(" ", strip=True)
        if not text or len(text) >= 500:
            continue
        author = element.select_one('[class*="author"], [class*="name"]')
        entry = {"text": text, "author": author.get_text(" ", strip=True) if author else "N/A"}
        if entry not in testimonials:
            testimonials.append(entry)
    return testimonials


def analyze_website_document(doc: PageDocument) -> Dict[str, Any]:
    """Full profile of one loaded page. Every key is always present."""
    text = doc.text
    basics, provenance = extract_fields(WEBSITE_BASICS_TARGETS, doc)
    basics["domain"] = urlparse(doc.url).hostname or "N/A"

    structure = extract_structure(doc)

    record: Dict[str, Any] = {
        "url": doc.url or "N/A",
        "basics": basics,
        "structure": structure,
        "categories": tag_groups(text, BUSINESS_CATEGORIES),
        "technical_features": flags(text, TECHNICAL_INDICATORS),
        "business_indicators": {
            **flags(text, BUSINESS_INDICATORS),
            "target_market": first_tag(text, TARGET_MARKETS, DEFAULT_TARGET_MARKET),
        },
        "pricing": extract_pricing(doc),
        "metrics": extract_metrics(text),
        "stack": detect_technology(doc),
        "competitors": extract_competitors(text),
        "testimonials": extract_testimonials(doc),
        "marketing": extract_marketing(doc, structure),
        "integrations": [
            name
            for name in (el.get("alt") or el.get_text(" ", strip=True) for el in doc.select('img[alt*="integration"], [class*="integration"]'))
            if name
        ],
        "pain_indicators": tag_groups(text, PAIN_POINT_INDICATORS),
        "contacts": clean_contact_info(extract_contact_info(doc)),
        "provenance": provenance,
    }
    record["analysis"] = {**analyze(record), "position": assess_position(record), **analyze_strategy(record)}
    return record


async def scrape_website(url: str, session_factory: Optional[SessionFactory] = None) -> Dict[str, Any]:
    async with open_session(session_factory) as session:
        logger.info(f"Scraping website {url}")
        await session.goto(url)
        doc = await session.document()
        return analyze_website_document(doc)
