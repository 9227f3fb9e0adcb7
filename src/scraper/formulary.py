"""Pharmacy formulary search: drug rows with tier and coverage restrictions."""
import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote_plus

from . import config
from .browser import SessionFactory, WaitTimeoutError, open_session
from .extractor import PageDocument, extract_fields, select_first
from .tagger import FORMULARY_RESTRICTIONS, has_tag, tag_categories
from .targets import FORMULARY_RESULTS_READY, FORMULARY_ROW_CONTAINERS, FORMULARY_ROW_TARGETS

logger = logging.getLogger(__name__)


def build_search_url(template: str, drug: str) -> str:
    if "{query}" not in template:
        raise ValueError("Formulary search URL must contain a {query} placeholder")
    return template.replace("{query}", quote_plus(drug.strip()))


def parse_formulary_results(doc: PageDocument) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for element in select_first(doc, FORMULARY_ROW_CONTAINERS):
        row_doc = doc.scope(element)
        values, _ = extract_fields(FORMULARY_ROW_TARGETS, row_doc)
        # Header rows and spacer rows carry no drug name.
        if values["drug_name"] == "N/A" or element.find("th") is not None:
            continue
        restrictions = tag_categories(row_doc.text, FORMULARY_RESTRICTIONS)
        values["restrictions"] = restrictions
        values["requires_prior_authorization"] = has_tag(restrictions, "prior_authorization")
        values["step_therapy"] = has_tag(restrictions, "step_therapy")
        values["quantity_limit"] = has_tag(restrictions, "quantity_limit")
        values["covered"] = not has_tag(restrictions, "not_covered")
        rows.append(values)
    return rows


async def search_formulary(
    drug: str,
    search_url_template: Optional[str] = None,
    session_factory: Optional[SessionFactory] = None,
) -> List[Dict[str, Any]]:
    """Search the formulary for ``drug``; an empty result page yields ``[]``."""
    template = search_url_template or config.FORMULARY_SEARCH_URL
    if not template:
        raise ValueError("FORMULARY_SEARCH_URL is not set and no search URL was given")
    url = build_search_url(template, drug)

    async with open_session(session_factory) as session:
        logger.info(f"Searching formulary for '{drug}': {url}")
        await session.goto(url)
        try:
            await session.wait_for_selector(FORMULARY_RESULTS_READY)
        except WaitTimeoutError:
            logger.info(f"No formulary results appeared for '{drug}'")
            return []
        results = parse_formulary_results(await session.document())
        logger.info(f"Found {len(results)} formulary rows for '{drug}'")
        return results
