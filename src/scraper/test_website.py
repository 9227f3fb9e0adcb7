import json

import pytest

from scraper.extractor import PageDocument
from scraper.website import analyze_website_document, extract_competitors, extract_metrics, scrape_website

URL = "https://www.acme.example/"

PAGE = """
<html lang="en">
<head>
  <title>Acme CRM</title>
  <meta name="description" content="CRM software for small teams">
  <script src="https://js.stripe.com/v3/"></script>
  <script src="https://cdn.acme.example/react.production.min.js"></script>
</head>
<body>
  <h1>Acme CRM</h1>
  <p>Acme is cloud software with an open API and automation for small business sales teams everywhere.</p>
  <div class="pricing"><h3>Pro</h3><span>$29</span><ul><li>Unlimited contacts</li></ul></div>
  <div class="testimonial">Acme doubled our pipeline. <span class="author">Sam</span></div>
  <footer class="contact">Call +1 415 555 0100 or email sales@acme.example. 500 customers trust us.</footer>
</body>
</html>
"""


@pytest.fixture
def profile():
    return analyze_website_document(PageDocument.from_html(PAGE, URL))


def test_basics(profile):
    assert profile["url"] == URL
    assert profile["basics"] == {
        "title": "Acme CRM",
        "description": "CRM software for small teams",
        "language": "en",
        "domain": "www.acme.example",
    }
    assert profile["provenance"]["title"] == "title"


def test_structure(profile):
    assert profile["structure"]["headers"]["h1"] == ["Acme CRM"]
    assert profile["structure"]["lists"] == [["Unlimited contacts"]]


def test_categories_and_indicators(profile):
    assert "saas" in profile["categories"]["industries"]
    assert profile["technical_features"]["has_api"] is True
    assert profile["technical_features"]["has_analytics"] is False
    assert profile["business_indicators"]["target_market"] == "Small Business"


def test_pricing(profile):
    pricing = profile["pricing"]
    assert pricing["pricing_type"] == "Fixed"
    assert pricing["price_points"] == ["$29"]
    assert pricing["plans"] == [{"name": "Pro", "prices": ["$29"], "features": ["Unlimited contacts"]}]
    assert pricing["enterprise_offering"] is False


def test_stack_testimonials_and_contacts(profile):
    assert profile["stack"]["frontend"] == ["React"]
    assert profile["stack"]["payments"] == ["Stripe"]
    assert profile["testimonials"] == [{"text": "Acme doubled our pipeline. Sam", "author": "Sam"}]
    assert "sales@acme.example" in profile["contacts"]["emails"]
    assert "+14155550100" in profile["contacts"]["phones"]


def test_analysis(profile):
    analysis = profile["analysis"]
    assert "Lacks advanced analytics and reporting" in analysis["pain_points"]
    assert "Limited social proof" not in analysis["pain_points"]
    assert "Focus on integration capabilities and API documentation" in analysis["recommendations"]
    assert analysis["position"] == {"segment": "mid-market", "growth_stage": "Early Stage"}


def test_profile_is_json_serialisable(profile):
    json.dumps(profile)


def test_blank_page_has_every_key():
    profile = analyze_website_document(PageDocument.from_html("<html></html>", URL))
    assert profile["basics"]["title"] == "N/A"
    assert profile["pricing"]["pricing_type"] == "Not specified"
    assert profile["metrics"]["customer_count"] == "N/A"
    assert profile["analysis"]["position"]["segment"] == "undefined"


def test_metrics():
    metrics = extract_metrics("Founded in 2015, 50 employees serve 10,000+ customers with 99.9% uptime")
    assert metrics["year_founded"] == "2015"
    assert metrics["employee_count"] == "50"
    assert metrics["customer_count"] == "10,000+"
    assert metrics["percentages"] == ["99.9%"]


def test_competitors():
    assert extract_competitors("The best alternative to Salesforce for startups") == ["salesforce for startups"]


@pytest.mark.asyncio
async def test_scrape_website(fake_session_factory):
    factory = fake_session_factory({URL: PAGE})
    profile = await scrape_website(URL, session_factory=factory)
    assert profile["basics"]["title"] == "Acme CRM"
    assert fake_session_factory.sessions[0].closed


def test_marketing_value_props_and_logos():
    page = """
    <html><body>
      <h2>Why teams pick the only CRM they need</h2>
      <h2>Pricing</h2>
      <h2>Benefits for sales leaders</h2>
      <div class="customers"><img alt="Globex"><img alt=""><img alt="Initech"></div>
      <div class="client-logos"><img alt="Globex"></div>
    </body></html>
    """
    profile = analyze_website_document(PageDocument.from_html(page, URL))
    assert profile["marketing"] == {
        "value_props": ["Why teams pick the only CRM they need", "Benefits for sales leaders"],
        "logos": ["Globex", "Initech"],
    }
    competitive = profile["analysis"]["competitive"]
    assert competitive["market_position"]["differentiators"] == ["Why teams pick the only CRM they need"]


def test_customer_count_with_thousands_separator():
    page = "<html><body><p>Trusted by 50,000 customers worldwide.</p></body></html>"
    profile = analyze_website_document(PageDocument.from_html(page, URL))
    assert profile["metrics"]["customer_count"] == "50,000"
    assert profile["analysis"]["position"]["growth_stage"] == "Scale"
    assert profile["analysis"]["growth"]["stage"]["stage"] == "Scale"


def test_analysis_sections(profile):
    analysis = profile["analysis"]
    assert set(analysis) >= {"competitive", "business_model", "technical", "growth", "strategic_recommendations"}
    assert analysis["business_model"]["type"]["monetization"] == ["Pro Plan Revenue"]
    assert analysis["technical"]["stack_maturity"]["strengths"] == ["Modern frontend framework"]
