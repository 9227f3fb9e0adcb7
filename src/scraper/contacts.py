"""Contact details (phones, emails, addresses, social links) from contact-ish page sections."""
import json
import logging
import re
from typing import Any, Dict, List

from .extractor import PageDocument, find_unique

logger = logging.getLogger(__name__)

PHONE_PATTERNS = {
    "international": re.compile(r"\+\d{1,4}[-.\s]?\d{1,4}[-.\s]?\d{1,9}"),
    "us": re.compile(r"(?:\+?1[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}"),
    "extension": re.compile(r"\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}\s*(?:ext|x)\.?\s*\d{1,5}", re.IGNORECASE),
    "uk": re.compile(r"(?:\+?44|0)[-.\s]?\d{2,5}[-.\s]?\d{6,8}"),
    "generic": re.compile(r"\b\d{8,14}\b"),
}

EMAIL_PATTERNS = {
    "standard": re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    # "name @ domain.com"
    "generic": re.compile(r"[a-zA-Z0-9._%+-]+\s+@\s+[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"),
    "obfuscated": re.compile(
        r"\b[a-zA-Z0-9._%+-]+\s*(?:\[at\]|\(at\))\s*[a-zA-Z0-9.-]+\s*(?:\[dot\]|\(dot\))\s*[a-zA-Z]{2,}\b",
        re.IGNORECASE,
    ),
}

SOCIAL_LINK_PATTERNS = {
    "linkedin": re.compile(r"linkedin\.com/(?:company/|in/|profile/)?[a-zA-Z0-9-]+", re.IGNORECASE),
    "twitter": re.compile(r"twitter\.com/[a-zA-Z0-9_]+", re.IGNORECASE),
    "facebook": re.compile(r"facebook\.com/(?:pages/)?[a-zA-Z0-9.-]+", re.IGNORECASE),
    "instagram": re.compile(r"instagram\.com/[a-zA-Z0-9_]+", re.IGNORECASE),
}

ADDRESS_PATTERNS = {
    "po_box": re.compile(r"P\.?O\.?\s*Box\s+\d+", re.IGNORECASE),
    "zip": re.compile(r"[A-Z][a-zA-Z]+(?:\s[A-Z][a-zA-Z]+)*,\s*[A-Z]{2}\s+\d{5}(?:-\d{4})?"),
    "street": re.compile(
        r"\d+\s+[a-zA-Z0-9\s,]+?(?:street|st|avenue|ave|road|rd|boulevard|blvd|lane|ln|drive|dr|court|ct|circle|cir|way|parkway|pkwy)\b",
        re.IGNORECASE,
    ),
}

CONTACT_SECTION_SELECTORS = [
    ".contact",
    "#contact",
    '[class*="contact"]',
    '[id*="contact"]',
    "footer",
    "header",
    '[class*="footer"]',
    '[class*="header"]',
]

STRUCTURED_CONTACT_KEYS = ("contactPoint", "address", "telephone", "email")


def clean_phone(phone: str) -> str:
    cleaned = re.sub(r"[^\d+]", "", phone)
    cleaned = re.sub(r"^00", "+", cleaned)
    return re.sub(r"^(\d{1,3})(\d{3})(\d{3})(\d{4})$", r"+\1 \2 \3 \4", cleaned)


def is_valid_phone(phone: str) -> bool:
    digits = re.sub(r"\D", "", phone)
    return 10 <= len(digits) <= 15


def clean_email(email: str) -> str:
    email = email.lower()
    email = re.sub(r"\s*(?:\[at\]|\(at\))\s*", "@", email)
    email = re.sub(r"\s*(?:\[dot\]|\(dot\))\s*", ".", email)
    return re.sub(r"\s+", "", email)


def is_valid_email(email: str) -> bool:
    return re.match(r"^[^\s@]+@[^\s@]+\.[^\s@]+$", email) is not None


def format_address(address: str) -> str:
    return re.sub(r"\s+", " ", address).strip()


def _dedupe(values: List[str]) -> List[str]:
    return list(dict.fromkeys(values))


def _section_texts(doc: PageDocument) -> List[str]:
    texts = []
    for selector in CONTACT_SECTION_SELECTORS:
        for element in doc.select(selector):
            texts.append(element.get_text(" ", strip=True))
    return texts


def _structured_contacts(doc: PageDocument) -> List[Dict[str, Any]]:
    blocks = []
    for script in doc.select('script[type="application/ld+json"]'):
        try:
            data = json.loads(script.string or "")
        except ValueError as e:
            logger.debug(f"Skipping invalid JSON-LD block on {doc.url}: {e}")
            continue
        if isinstance(data, dict) and any(data.get(key) for key in STRUCTURED_CONTACT_KEYS):
            blocks.append(data)
    return blocks


def extract_contact_info(doc: PageDocument) -> Dict[str, Any]:
    """Raw contact candidates; see :func:`clean_contact_info` for validation."""
    texts = _section_texts(doc)

    phones: List[str] = []
    for pattern in PHONE_PATTERNS.values():
        phones.extend(find_unique(pattern, texts))
    emails: List[str] = []
    for pattern in EMAIL_PATTERNS.values():
        emails.extend(find_unique(pattern, texts))
    addresses: List[str] = []
    for pattern in ADDRESS_PATTERNS.values():
        addresses.extend(find_unique(pattern, texts))

    for link in doc.select('a[href^="tel:"]'):
        phones.append(link["href"][len("tel:"):].strip())
    for link in doc.select('a[href^="mailto:"]'):
        emails.append(link["href"][len("mailto:"):].split("?")[0].strip())

    social = {platform: find_unique(pattern, doc.links) for platform, pattern in SOCIAL_LINK_PATTERNS.items()}

    return {
        "phones": _dedupe(phones),
        "emails": _dedupe(emails),
        "social": social,
        "addresses": _dedupe(addresses),
        "structured": _structured_contacts(doc),
    }


def clean_contact_info(raw: Dict[str, Any]) -> Dict[str, Any]:
    phones = [clean_phone(p) for p in raw.get("phones", [])]
    emails = [clean_email(e) for e in raw.get("emails", [])]
    addresses = [format_address(a) for a in raw.get("addresses", [])]
    return {
        "phones": _dedupe([p for p in phones if is_valid_phone(p)]),
        "emails": _dedupe([e for e in emails if is_valid_email(e)]),
        "social": raw.get("social", {}),
        "addresses": _dedupe([a for a in addresses if len(a) > 10]),
        "structured": raw.get("structured", []),
    }
