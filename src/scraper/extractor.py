"""Configuration-driven field extraction over a parsed page snapshot.

Every logical field is described by an :class:`ExtractionTarget`: an ordered
list of candidate locators and a fallback value. :func:`extract_field` tries
the candidates in declared order and stops at the first one that yields a
value, so earlier locators act as the more specific, higher-confidence ones.
A field that matches nothing resolves to its fallback and is never an error.
"""
import copy
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern, Tuple, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Comment, Doctype, Tag

logger = logging.getLogger(__name__)

UNMATCHED = "unmatched"
NOISE_TAGS = ["script", "style", "noscript", "template", "svg"]
URL_ATTRIBUTES = ("href", "src")

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")
PHONE_PATTERN = re.compile(r"(?:\+\d{1,2}\s?)?\(?\d{3}\)?[\s.-]?\d{3}[\s.-]?\d{4}")

# Handle is the first path segment after the platform prefix.
SOCIAL_HANDLE_PATTERNS: Dict[str, Pattern] = {
    "twitter": re.compile(r"(?:twitter\.com|//(?:www\.)?x\.com)/([^/\s\"?#]+)"),
    "linkedin": re.compile(r"linkedin\.com/(?:company|in)/([^/\s\"?#]+)"),
    "github": re.compile(r"github\.com/([^/\s\"?#]+)"),
    "facebook": re.compile(r"facebook\.com/([^/\s\"?#]+)"),
    "instagram": re.compile(r"instagram\.com/([^/\s\"?#]+)"),
    "crunchbase": re.compile(r"crunchbase\.com/(?:organization|person)/([^/\s\"?#]+)"),
    "angellist": re.compile(r"angel\.co/company/([^/\s\"?#]+)"),
}
PROFILE_PLATFORMS = ("linkedin", "twitter", "github", "crunchbase")


class PageDocument:
    """Read-only view over an HTML snapshot (or one element of it)."""

    def __init__(self, root: Tag, url: str = ""):
        self.root = root
        self.url = url
        self._text: Optional[str] = None
        self._links: Optional[List[str]] = None

    @classmethod
    def from_html(cls, html: str, url: str = "") -> "PageDocument":
        return cls(BeautifulSoup(html or "", "html.parser"), url)

    def scope(self, element: Tag) -> "PageDocument":
        """Same document, restricted to ``element`` and its descendants."""
        return PageDocument(element, self.url)

    def select(self, selector: str) -> List[Tag]:
        return self.root.select(selector)

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.root.select_one(selector)

    def absolute(self, href: str) -> str:
        return urljoin(self.url, href) if self.url else href

    @property
    def text(self) -> str:
        """Visible text with whitespace collapsed; scripts and styles are skipped."""
        if self._text is None:
            self._text = visible_text(self.root)
        return self._text

    @property
    def links(self) -> List[str]:
        """Absolute hrefs of every anchor, in document order."""
        if self._links is None:
            self._links = [
                self.absolute(a["href"].strip())
                for a in self.root.find_all("a", href=True)
                if a["href"].strip()
            ]
        return self._links


def visible_text(root: Tag) -> str:
    parts = []
    for node in root.find_all(string=True):
        if isinstance(node, (Comment, Doctype)):
            continue
        if node.parent is not None and (node.parent.name in NOISE_TAGS or node.find_parent(NOISE_TAGS)):
            continue
        parts.append(str(node))
    return re.sub(r"\s+", " ", " ".join(parts)).strip()


@dataclass(frozen=True)
class ExtractionTarget:
    """A named field bound to ordered candidate locators and a fallback.

    ``kind`` is ``"css"`` (locators are CSS selectors) or ``"regex"``
    (locators are patterns run over the visible text; group 1 is used when
    the pattern has one). ``attribute`` reads an attribute instead of element
    text. ``many`` keeps every distinct value of the winning locator.
    ``transform`` post-processes a raw value; returning ``None`` or raising
    makes that candidate a non-match.
    """

    name: str
    locators: Tuple[str, ...]
    fallback: Any = "N/A"
    attribute: Optional[str] = None
    many: bool = False
    kind: str = "css"
    transform: Optional[Callable[[str], Any]] = None


@dataclass
class ExtractionResult:
    name: str
    value: Any
    matched_index: Optional[int] = None
    locator: Optional[str] = None

    @property
    def matched(self) -> bool:
        return self.matched_index is not None

    @property
    def provenance(self) -> str:
        return self.locator if self.locator is not None else UNMATCHED


def _element_value(element: Tag, attribute: Optional[str], doc: PageDocument) -> str:
    if attribute is None:
        return element.get_text(" ", strip=True)
    value = element.get(attribute)
    if isinstance(value, list):
        value = " ".join(value)
    if not value:
        return ""
    value = value.strip()
    if attribute in URL_ATTRIBUTES:
        return doc.absolute(value)
    return value


def _unique(values: Iterable[Any]) -> List[Any]:
    seen = []
    for value in values:
        if value not in seen:
            seen.append(value)
    return seen


def _candidate_values(target: ExtractionTarget, locator: str, doc: PageDocument) -> List[Any]:
    if target.kind == "regex":
        pattern = re.compile(locator, re.IGNORECASE)
        raw = [(m.group(1) if pattern.groups else m.group(0)) or "" for m in pattern.finditer(doc.text)]
    elif target.kind == "css":
        raw = [_element_value(el, target.attribute, doc) for el in doc.select(locator)]
    else:
        raise ValueError(f"Unknown extraction kind: {target.kind}")

    values = []
    for value in raw:
        value = value.strip() if isinstance(value, str) else value
        if not value:
            continue
        if target.transform is not None:
            try:
                value = target.transform(value)
            except (TypeError, ValueError) as e:
                logger.debug(f"Transform for '{target.name}' rejected {value!r}: {e}")
                continue
            if value is None:
                continue
        values.append(value)
        if not target.many:
            break
    return _unique(values)


def extract_field(target: ExtractionTarget, doc: PageDocument) -> ExtractionResult:
    """Return the value of the first candidate locator that matches."""
    for index, locator in enumerate(target.locators):
        try:
            values = _candidate_values(target, locator, doc)
        except Exception as e:
            # A broken locator only disqualifies itself.
            logger.debug(f"Locator {locator!r} for '{target.name}' raised: {e}")
            continue
        if values:
            logger.debug(f"Field '{target.name}' matched candidate {index}: {locator!r}")
            return ExtractionResult(target.name, values if target.many else values[0], index, locator)
    return ExtractionResult(target.name, copy.deepcopy(target.fallback))


def extract_fields(targets: Iterable[ExtractionTarget], doc: PageDocument) -> Tuple[Dict[str, Any], Dict[str, str]]:
    """Run every target; returns ``(values, provenance)`` keyed by field name."""
    values: Dict[str, Any] = {}
    provenance: Dict[str, str] = {}
    for target in targets:
        result = extract_field(target, doc)
        values[result.name] = result.value
        provenance[result.name] = result.provenance
    return values, provenance


def select_first(doc: PageDocument, candidates: Iterable[str]) -> List[Tag]:
    """Elements of the first container selector that matches anything."""
    for selector in candidates:
        try:
            elements = doc.select(selector)
        except Exception as e:
            logger.debug(f"Container selector {selector!r} raised: {e}")
            continue
        if elements:
            return elements
    return []


# --- Regex extraction ---

def find_unique(pattern: Union[str, Pattern], texts: Union[str, Iterable[str]]) -> List[str]:
    """All non-overlapping matches across ``texts``, de-duplicated in first-seen order."""
    if isinstance(pattern, str):
        pattern = re.compile(pattern)
    if isinstance(texts, str):
        texts = [texts]
    found: List[str] = []
    for text in texts:
        if not text:
            continue
        for match in pattern.finditer(text):
            value = match.group(0).strip()
            if value and value not in found:
                found.append(value)
    return found


def extract_emails(doc: PageDocument) -> List[str]:
    return find_unique(EMAIL_PATTERN, doc.text)


def extract_phones(doc: PageDocument) -> List[str]:
    return find_unique(PHONE_PATTERN, doc.text)


def extract_social_handles(links: Iterable[str], patterns: Dict[str, Pattern] = SOCIAL_HANDLE_PATTERNS) -> Dict[str, List[str]]:
    """Handles per platform; platforms without a match are left out."""
    links = list(links)
    handles: Dict[str, List[str]] = {}
    for platform, pattern in patterns.items():
        found = []
        for link in links:
            match = pattern.search(link)
            if match and match.group(1) not in found:
                found.append(match.group(1))
        if found:
            handles[platform] = found
    return handles


def extract_social_profiles(links: Iterable[str], platforms: Iterable[str] = PROFILE_PLATFORMS) -> Dict[str, List[str]]:
    """Last path segment of every link per platform; every platform is present."""
    links = list(links)
    profiles: Dict[str, List[str]] = {}
    for platform in platforms:
        domain = f"{platform}.com"
        segments = []
        for link in links:
            if domain not in link:
                continue
            segment = link.rstrip("/").split("/")[-1].split("?")[0]
            if segment and segment not in segments:
                segments.append(segment)
        profiles[platform] = segments
    return profiles


def parse_count(value: str) -> Optional[int]:
    """``"1,234"`` -> 1234, ``"2.5K"`` -> 2500; ``None`` when there is no number."""
    match = re.search(r"(\d+(?:[.,]\d+)*)\s*([kKmM])?", value)
    if not match:
        return None
    number, suffix = match.group(1), (match.group(2) or "").lower()
    if suffix:
        amount = float(number.replace(",", ""))
        return int(round(amount * (1000 if suffix == "k" else 1000000)))
    return int(re.sub(r"[.,]", "", number))
