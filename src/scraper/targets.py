"""Locator tables: field name -> ordered candidate locators -> fallback.

Sites change their markup without notice; candidates are listed from the most
specific selector to the most generic one.
"""
from typing import Iterable

from .extractor import EMAIL_PATTERN, ExtractionTarget, parse_count


def external_link_selector(excluded: Iterable[str]) -> str:
    """Absolute links whose href mentions none of ``excluded``."""
    return 'a[href^="http"]' + "".join(f':not([href*="{fragment}"])' for fragment in excluded)


YC_EXCLUDED_LINKS = (
    "ycombinator.com",
    "startupschool.org",
    "linkedin.com",
    "twitter.com",
    "//x.com",
    "www.x.com",
    "github.com",
    "crunchbase.com",
    "facebook.com",
    "instagram.com",
    "youtube.com",
)

# --- Y Combinator ---

YC_COMPANY_LINK = 'a[href^="/companies/"]'

# Scoped to one company card of the directory listing.
YC_LISTING_TARGETS = (
    ExtractionTarget("name", ('span[class*="coName"]', 'span[class*="company-name"]', "h3", "h4")),
    ExtractionTarget("description", ('span[class*="Description"]', 'span[class*="description"]', 'div[class*="description"]')),
    ExtractionTarget("location", ('span[class*="Location"]', 'span[class*="location"]')),
    ExtractionTarget("batch", ('a[href*="batch="] span.pill', "span.pill", 'span[class*="pill"]')),
    ExtractionTarget(
        "industries",
        ('a[href*="industry="] span.pill', 'a[href*="industry="]', "span.pill ~ span.pill"),
        fallback=[],
        many=True,
    ),
)

YC_DETAIL_TARGETS = (
    ExtractionTarget("company_name", ("h1",)),
    ExtractionTarget("tagline", ('[class*="tagline"]', '[class*="headline"]', "h1 + div", "h2")),
    ExtractionTarget("long_description", ("p.whitespace-pre-line", '[class*="description"]', '[class*="about"]')),
    ExtractionTarget(
        "founded",
        (r"Founded:?\s*(\d{4})", r"(?:established|since)\s*(?:in\s*)?(\d{4})"),
        kind="regex",
    ),
    ExtractionTarget(
        "team_size",
        (r"Team Size:?\s*([\d,]+)", r"(\d+(?:\+|\s*-\s*\d+)?)\s*(?:employees|team members)"),
        kind="regex",
    ),
    ExtractionTarget("hq_location", (r"Location:?\s*([A-Z][\w.'-]*(?:\s[A-Z][\w.'-]*)*,\s*[A-Z][A-Za-z]+)",), kind="regex"),
    ExtractionTarget("stage", ('[class*="stage"]',)),
    ExtractionTarget("funding_amount", ('[class*="funding"]', '[class*="raised"]')),
    ExtractionTarget(
        "website",
        ('a[aria-label="Company website"]', 'a[data-testid="company-website"]', external_link_selector(YC_EXCLUDED_LINKS)),
        attribute="href",
    ),
    ExtractionTarget("markets", ('[class*="market"]', '[class*="industry"]', 'a[href*="industry="]'), fallback=[], many=True),
    ExtractionTarget("tech_stack", ('[class*="tech-stack"] [class*="tag"]',), fallback=[], many=True),
)

YC_FOUNDER_CONTAINERS = ('[class*="founder-card"]', '[class*="founder"]', '[class*="team-member"]')
YC_FOUNDER_TARGETS = (
    ExtractionTarget("name", ('[class*="name"]', "h3", "h4")),
    ExtractionTarget("role", ('[class*="role"]', '[class*="title"]', "p")),
    ExtractionTarget("linkedin", ('a[href*="linkedin.com"]',), attribute="href"),
    ExtractionTarget("twitter", ('a[href*="twitter.com"]', 'a[href*="//x.com"]'), attribute="href"),
    ExtractionTarget("github", ('a[href*="github.com"]',), attribute="href"),
    ExtractionTarget("bio", ('[class*="bio"]',)),
    ExtractionTarget("email", (EMAIL_PATTERN.pattern,), kind="regex"),
)

YC_JOB_CONTAINERS = ('[class*="job-row"]', '[class*="job"]', '[class*="position"]')
YC_JOB_TARGETS = (
    ExtractionTarget("title", ('[class*="title"]', "h3", "a")),
    ExtractionTarget("location", ('[class*="location"]',)),
    ExtractionTarget("salary", ('[class*="salary"]', '[class*="compensation"]')),
    ExtractionTarget("link", ("a",), attribute="href"),
)

# --- Product Hunt ---

PRODUCT_HUNT_ITEM_CONTAINERS = (
    '[data-test^="post-item"]',
    'section[class*="styles_item"]',
    'li[class*="styles_item"]',
    'div[class*="post-item"]',
)
PRODUCT_HUNT_ITEM_TARGETS = (
    ExtractionTarget("name", ('[data-test^="post-name"]', 'a[class*="title"]', "h3", "strong")),
    ExtractionTarget("tagline", ('[class*="tagline"]', 'span[class*="description"]', "p")),
    ExtractionTarget("url", ('a[href^="/posts/"]', 'a[href*="/products/"]'), attribute="href"),
    ExtractionTarget(
        "votes",
        ('[data-test="vote-button"]', 'button[class*="vote"]', '[class*="voteCount"]'),
        fallback=0,
        transform=parse_count,
    ),
    ExtractionTarget("comments", ('a[href*="#comments"]', '[class*="commentCount"]'), fallback=0, transform=parse_count),
    ExtractionTarget("topics", ('a[href^="/topics/"]',), fallback=[], many=True),
)
PRODUCT_HUNT_DETAIL_TARGETS = (
    ExtractionTarget("full_description", ('[data-test="post-description"]', '[class*="description"]')),
    ExtractionTarget(
        "website",
        (
            'a[data-test="visit-website-button"]',
            'a[href*="?ref=producthunt"]',
            external_link_selector(("producthunt.com", "twitter.com", "//x.com", "linkedin.com", "facebook.com")),
        ),
        attribute="href",
    ),
    ExtractionTarget("makers", ('[data-test="maker"] a[href^="/@"]', 'a[href^="/@"]'), fallback=[], many=True),
    ExtractionTarget("rating", (r"(\d(?:\.\d)?)\s*/\s*5", r"(\d(?:\.\d)?)\s+out of 5"), kind="regex"),
    ExtractionTarget("reviews_count", (r"([\d,]+)\s+reviews?\b",), fallback=0, kind="regex", transform=parse_count),
    ExtractionTarget("launch_date", ("time[datetime]",), attribute="datetime"),
)

# --- Pharmacy formulary ---

FORMULARY_RESULTS_READY = "table tbody tr, [class*='drug-row'], [class*='result-item'], [class*='search-result']"
FORMULARY_ROW_CONTAINERS = (
    '[class*="drug-row"]',
    '[class*="result-item"]',
    '[class*="search-result"]',
    "table tbody tr",
)
FORMULARY_ROW_TARGETS = (
    ExtractionTarget("drug_name", ('[class*="drug-name"]', "td:nth-of-type(1)", "h3", "a")),
    ExtractionTarget("tier", ('[class*="tier"]', "td:nth-of-type(2)")),
    ExtractionTarget("generic_name", ('[class*="generic"]',)),
    ExtractionTarget("notes", ('[class*="requirement"]', '[class*="restriction"]', "td:nth-of-type(3)")),
    ExtractionTarget("detail_url", ("a",), attribute="href"),
)

# --- Generic business website ---

WEBSITE_BASICS_TARGETS = (
    ExtractionTarget("title", ("title", "h1")),
    ExtractionTarget("description", ('meta[name="description"]', 'meta[property="og:description"]'), attribute="content"),
    ExtractionTarget("language", ("html",), attribute="lang"),
)
