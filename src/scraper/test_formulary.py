import pytest

from scraper import config
from scraper.extractor import PageDocument
from scraper.formulary import build_search_url, parse_formulary_results, search_formulary

TEMPLATE = "https://formulary.example/search?q={query}"

RESULTS = """
<html><body>
<table>
  <thead><tr><th>Drug</th><th>Tier</th><th>Notes</th></tr></thead>
  <tbody>
    <tr><td><a href="/drugs/atorvastatin">Atorvastatin</a></td><td>1</td><td>Quantity limit applies</td></tr>
    <tr><td>Humira</td><td>5</td><td>Specialty; prior authorization required</td></tr>
    <tr><td>Brandex</td><td>-</td><td>Not covered</td></tr>
  </tbody>
</table>
</body></html>
"""


def test_build_search_url_encodes_drug():
    assert build_search_url(TEMPLATE, " insulin glargine ") == "https://formulary.example/search?q=insulin+glargine"


def test_build_search_url_requires_placeholder():
    with pytest.raises(ValueError):
        build_search_url("https://formulary.example/search", "insulin")


def test_parse_rows_and_restrictions():
    rows = parse_formulary_results(PageDocument.from_html(RESULTS, "https://formulary.example/search?q=x"))

    assert [r["drug_name"] for r in rows] == ["Atorvastatin", "Humira", "Brandex"]
    atorvastatin, humira, brandex = rows
    assert atorvastatin["tier"] == "1"
    assert atorvastatin["detail_url"] == "https://formulary.example/drugs/atorvastatin"
    assert atorvastatin["quantity_limit"] is True
    assert atorvastatin["requires_prior_authorization"] is False
    assert humira["restrictions"] == {
        "prior_authorization": ["prior authorization", "prior auth"],
        "specialty": ["specialty"],
    }
    assert humira["requires_prior_authorization"] is True
    assert humira["detail_url"] == "N/A"
    assert humira["generic_name"] == "N/A"
    assert brandex["covered"] is False
    assert atorvastatin["covered"] is True


@pytest.mark.asyncio
async def test_search(fake_session_factory):
    url = build_search_url(TEMPLATE, "humira")
    factory = fake_session_factory({url: RESULTS})

    rows = await search_formulary("humira", search_url_template=TEMPLATE, session_factory=factory)

    assert len(rows) == 3
    assert fake_session_factory.sessions[0].visited == [url]
    assert fake_session_factory.sessions[0].closed


@pytest.mark.asyncio
async def test_search_without_results(fake_session_factory):
    url = build_search_url(TEMPLATE, "unobtainium")
    factory = fake_session_factory({url: "<html><body><p>No drugs matched.</p></body></html>"})
    assert await search_formulary("unobtainium", search_url_template=TEMPLATE, session_factory=factory) == []


@pytest.mark.asyncio
async def test_search_needs_a_url(monkeypatch):
    monkeypatch.setattr(config, "FORMULARY_SEARCH_URL", None)
    with pytest.raises(ValueError):
        await search_formulary("humira")
