"""Keyword dictionaries and the category tagger that scans page text with them."""
from types import MappingProxyType
from typing import Dict, List, Mapping, Sequence


def _freeze(table: Dict[str, Sequence[str]]) -> Mapping[str, tuple]:
    return MappingProxyType({category: tuple(keywords) for category, keywords in table.items()})


def _freeze_groups(groups: Dict[str, Dict[str, Sequence[str]]]) -> Mapping[str, Mapping[str, tuple]]:
    return MappingProxyType({group: _freeze(table) for group, table in groups.items()})


BUSINESS_CATEGORIES = _freeze_groups({
    "industries": {
        "saas": ["software", "saas", "cloud", "platform", "automation", "api"],
        "martech": ["email marketing", "marketing automation", "campaign", "leads", "crm"],
        "fintech": ["payment", "banking", "financial", "crypto", "blockchain", "trading"],
        "ecommerce": ["shop", "store", "retail", "commerce", "marketplace"],
        "healthcare": ["health", "medical", "wellness", "patient", "clinical"],
        "education": ["learning", "education", "training", "course", "teach"],
        "manufacturing": ["manufacturing", "factory", "production", "industrial"],
        "logistics": ["shipping", "delivery", "logistics", "supply chain", "warehouse"],
    },
    "business_model": {
        "b2b": ["business to business", "b2b", "enterprise", "corporate"],
        "b2c": ["consumer", "b2c", "retail", "personal"],
        "marketplace": ["marketplace", "platform", "connect buyers sellers"],
        "subscription": ["subscription", "monthly", "yearly", "recurring"],
        "transactional": ["pay per use", "commission", "transaction fee"],
    },
    "features": {
        "automation": ["automated", "automation", "workflow", "streamline", "no-code"],
        "integration": ["integration", "api", "connect", "seamless", "sync"],
        "analytics": ["analytics", "tracking", "metrics", "dashboard", "reports"],
        "customization": ["personalization", "customize", "tailored", "flexible"],
        "security": ["security", "encryption", "compliance", "protection"],
        "collaboration": ["team", "sharing", "collaborate", "real-time"],
        "ai": ["ai", "machine learning", "predictive", "intelligent", "neural"],
    },
})

PAIN_POINT_INDICATORS = _freeze_groups({
    "technical": {
        "performance": ["slow", "crashes", "bugs", "downtime", "latency"],
        "integration": ["difficult to integrate", "complex setup", "technical issues"],
        "usability": ["complicated", "confusing", "hard to use", "steep learning curve"],
    },
    "business": {
        "cost": ["expensive", "costly", "price", "budget", "roi"],
        "support": ["poor support", "unresponsive", "limited help"],
        "scaling": ["scaling issues", "growing pains", "limitations"],
    },
    "market": {
        "competition": ["competitive", "market leader", "alternative to"],
        "regulation": ["compliant", "gdpr", "hipaa", "regulatory"],
        "adoption": ["adoption challenges", "change management", "user adoption"],
    },
})

TECHNICAL_INDICATORS = _freeze({
    "has_api": ["api", "integration"],
    "has_dashboard": ["dashboard", "analytics"],
    "has_automation": ["automation", "automated"],
    "has_customization": ["customize", "personalize"],
    "has_analytics": ["analytics", "reporting"],
})

BUSINESS_INDICATORS = _freeze({
    "has_enterprise_features": ["enterprise", "custom plan"],
    "has_free_trial_or_plan": ["free trial", "free plan"],
})

# Checked in order; the first market with a hit wins.
TARGET_MARKETS = _freeze({
    "Enterprise": ["enterprise"],
    "Agency": ["agency"],
    "Small Business": ["small business"],
})
DEFAULT_TARGET_MARKET = "Mid-Market"

FORMULARY_RESTRICTIONS = _freeze({
    "prior_authorization": ["prior authorization", "prior auth"],
    "step_therapy": ["step therapy"],
    "quantity_limit": ["quantity limit"],
    "specialty": ["specialty"],
    "not_covered": ["not covered", "non-formulary", "excluded"],
})


def tag_categories(text: str, dictionary: Mapping[str, Sequence[str]]) -> Dict[str, List[str]]:
    """Keywords of each category found in ``text`` (case-insensitive substring).

    Categories without a single hit are omitted. Keyword order follows the
    dictionary, so the result is deterministic for a given input.
    """
    haystack = (text or "").lower()
    tags: Dict[str, List[str]] = {}
    for category, keywords in dictionary.items():
        matches = [keyword for keyword in keywords if keyword.lower() in haystack]
        if matches:
            tags[category] = matches
    return tags


def tag_groups(text: str, groups: Mapping[str, Mapping[str, Sequence[str]]]) -> Dict[str, Dict[str, List[str]]]:
    """:func:`tag_categories` for each group; group keys are always present."""
    return {group: tag_categories(text, dictionary) for group, dictionary in groups.items()}


def flags(text: str, dictionary: Mapping[str, Sequence[str]]) -> Dict[str, bool]:
    """One boolean per category: did any of its keywords occur."""
    tags = tag_categories(text, dictionary)
    return {category: category in tags for category in dictionary}


def first_tag(text: str, dictionary: Mapping[str, Sequence[str]], default: str) -> str:
    tags = tag_categories(text, dictionary)
    for category in dictionary:
        if category in tags:
            return category
    return default


def has_tag(tags: Mapping[str, Sequence[str]], category: str) -> bool:
    return bool(tags.get(category))
