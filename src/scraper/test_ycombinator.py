import json

import pytest

from scraper import config
from scraper.browser import ScrapeError
from scraper.extractor import PageDocument
from scraper.ycombinator import (
    YC_DETAIL_DEFAULTS,
    company_slug,
    extract_yc_details,
    parse_yc_listing,
    scrape_yc_companies,
)


def card(slug, name, description, batch, *industries):
    pills = "".join(f'<span class="pill">{industry}</span>' for industry in industries)
    return (
        f'<a href="/companies/{slug}">'
        f'<span class="_coName_ab12">{name}</span>'
        f'<span class="_coDescription_ab12">{description}</span>'
        f'<span class="_coLocation_ab12">San Francisco, CA, USA</span>'
        f'<span class="pill">{batch}</span>{pills}'
        f'</a>'
    )


LISTING = (
    "<html><body><select><option>Default</option></select><div>"
    + '<a href="/companies/industry">Industries</a>'
    + card("acme", "Acme", "Widgets for everyone", "W24", "B2B", "Fintech")
    + card("beta", "Beta", "Better betas", "S23")
    + card("acme", "Acme", "Widgets for everyone", "W24")
    + card("gamma", "Gamma", "Rays", "S23")
    + "</div></body></html>"
)
SORTED_LISTING = (
    "<html><body><div>"
    + card("gamma", "Gamma", "Rays", "S23")
    + card("acme", "Acme", "Widgets for everyone", "W24", "B2B", "Fintech")
    + card("beta", "Beta", "Better betas", "S23")
    + "</div></body></html>"
)

ACME_DETAIL = """
<html><body>
  <h1>Acme</h1>
  <div class="tagline">Widgets for everyone</div>
  <p class="whitespace-pre-line">Acme builds programmable widgets for finance teams.</p>
  <div>Founded: 2021</div>
  <div>Team Size: 12</div>
  <div>Location: San Francisco, CA</div>
  <a href="https://www.ycombinator.com/companies?industry=B2B">B2B</a>
  <a aria-label="Company website" href="https://acme.example">acme.example</a>
  <div class="founder-card">
    <h3 class="founder-name">Jane Doe</h3>
    <p class="founder-role">CEO</p>
    <a href="https://www.linkedin.com/in/janedoe">LinkedIn</a>
    <a href="https://twitter.com/janedoe">Twitter</a>
  </div>
  <p>Say hello: hello@acme.example</p>
  <a href="https://github.com/acmehq">GitHub</a>
</body></html>
"""

LISTING_URL = config.YC_COMPANIES_URL
ACME_URL = "https://www.ycombinator.com/companies/acme"


def test_company_slug():
    assert company_slug("/companies/acme") == "acme"
    assert company_slug("https://www.ycombinator.com/companies/acme/") == "acme"
    assert company_slug("/companies/acme/jobs") is None
    assert company_slug("/companies/industry") is None
    assert company_slug("/launches/acme") is None


def test_parse_listing_deduplicates_and_limits():
    doc = PageDocument.from_html(LISTING, LISTING_URL)
    companies = parse_yc_listing(doc)

    assert [c["slug"] for c in companies] == ["acme", "beta", "gamma"]
    acme = companies[0]
    assert acme["name"] == "Acme"
    assert acme["description"] == "Widgets for everyone"
    assert acme["location"] == "San Francisco, CA, USA"
    assert acme["batch"] == "W24"
    assert acme["industries"] == ["B2B", "Fintech"]
    assert acme["url"] == ACME_URL
    assert companies[1]["industries"] == []

    assert len(parse_yc_listing(doc, limit=2)) == 2


def test_extract_details():
    details = extract_yc_details(PageDocument.from_html(ACME_DETAIL, ACME_URL))

    assert details["company_name"] == "Acme"
    assert details["tagline"] == "Widgets for everyone"
    assert details["long_description"].startswith("Acme builds")
    assert details["founded"] == "2021"
    assert details["team_size"] == "12"
    assert details["hq_location"] == "San Francisco, CA"
    assert details["website"] == "https://acme.example"
    assert details["markets"] == ["B2B"]
    assert details["founders"] == [{
        "name": "Jane Doe",
        "role": "CEO",
        "linkedin": "https://www.linkedin.com/in/janedoe",
        "twitter": "https://twitter.com/janedoe",
        "github": "N/A",
        "bio": "N/A",
        "email": "N/A",
    }]
    assert details["contacts"]["emails"] == ["hello@acme.example"]
    assert details["contacts"]["social"]["github"] == ["acmehq"]
    assert details["social_profiles"]["linkedin"] == ["janedoe"]
    assert details["jobs"] == []
    assert details["provenance"]["website"] == 'a[aria-label="Company website"]'
    assert details["provenance"]["stage"] == "unmatched"
    assert set(YC_DETAIL_DEFAULTS) == set(details)


def test_details_of_empty_page_are_all_fallbacks():
    details = extract_yc_details(PageDocument.from_html("<html></html>", ACME_URL))
    expected = dict(YC_DETAIL_DEFAULTS)
    for key in ("provenance", "scraped_at"):
        expected.pop(key)
        details.pop(key)
    assert details == expected
    json.dumps(details)


@pytest.mark.asyncio
async def test_scrape_applies_sort_and_visits_details(fake_session_factory):
    factory = fake_session_factory({LISTING_URL: LISTING, ACME_URL: ACME_DETAIL}, {LISTING_URL: SORTED_LISTING})

    companies = await scrape_yc_companies(limit=2, delay=0, session_factory=factory)

    assert [c["slug"] for c in companies] == ["gamma", "acme"]
    gamma, acme = companies
    assert gamma["detail_status"] == "failed"
    assert gamma["founders"] == []
    assert gamma["website"] == "N/A"
    assert gamma["name"] == "Gamma"
    assert acme["detail_status"] == "ok"
    assert acme["company_name"] == "Acme"
    assert acme["batch"] == "W24"
    session = fake_session_factory.sessions[0]
    assert session.closed
    json.dumps(companies)


@pytest.mark.asyncio
async def test_scrape_keeps_default_order_when_sort_is_unavailable(fake_session_factory):
    factory = fake_session_factory({LISTING_URL: LISTING, ACME_URL: ACME_DETAIL})
    companies = await scrape_yc_companies(limit=1, delay=0, session_factory=factory)
    assert [c["slug"] for c in companies] == ["acme"]


@pytest.mark.asyncio
async def test_detached_card_during_sort_keeps_default_order(fake_session_factory):
    factory = fake_session_factory(
        {LISTING_URL: LISTING, ACME_URL: ACME_DETAIL},
        {LISTING_URL: SORTED_LISTING},
        attribute_error=ScrapeError("Could not read 'href': element is not attached to the DOM"),
    )
    companies = await scrape_yc_companies(limit=1, delay=0, session_factory=factory)
    assert [c["slug"] for c in companies] == ["acme"]
    assert companies[0]["detail_status"] == "ok"


@pytest.mark.asyncio
async def test_empty_listing_is_an_error(fake_session_factory, monkeypatch):
    monkeypatch.setattr(config, "LISTING_LOAD_TIMEOUT_MS", 50)
    factory = fake_session_factory({LISTING_URL: "<html><body>Loading...</body></html>"})

    with pytest.raises(ScrapeError):
        await scrape_yc_companies(limit=5, delay=0, session_factory=factory)
    assert fake_session_factory.sessions[0].closed


@pytest.mark.asyncio
async def test_unreachable_listing_is_an_error(fake_session_factory):
    factory = fake_session_factory({})
    with pytest.raises(ScrapeError, match="404"):
        await scrape_yc_companies(limit=5, delay=0, session_factory=factory)
    assert fake_session_factory.sessions[0].closed
