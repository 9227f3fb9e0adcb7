from typing import Dict, Optional

import pytest
from bs4 import BeautifulSoup

from scraper.browser import NavigationError, ScrapeError, WaitTimeoutError
from scraper.extractor import PageDocument


class FakeSession:
    """Stands in for BrowserSession: serves canned HTML keyed by URL."""

    def __init__(
        self,
        pages: Dict[str, str],
        sorted_pages: Optional[Dict[str, str]] = None,
        attribute_error: Optional[Exception] = None,
    ):
        self.pages = dict(pages)
        self.sorted_pages = sorted_pages or {}
        self.attribute_error = attribute_error
        self.url = None
        self.html = ""
        self.visited = []
        self.entered = False
        self.closed = False

    async def __aenter__(self):
        self.entered = True
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def goto(self, url, timeout_ms=None, wait_event="domcontentloaded"):
        self.visited.append(url)
        if url not in self.pages:
            raise NavigationError(f"Failed to load {url}: Status 404")
        if isinstance(self.pages[url], Exception):
            raise self.pages[url]
        self.url = url
        self.html = self.pages[url]

    async def content(self):
        return self.html

    async def document(self):
        return PageDocument.from_html(self.html, self.url)

    async def select_option(self, selector, value, timeout_ms=None):
        if self.url not in self.sorted_pages:
            raise ScrapeError(f"Could not select {value!r} in {selector!r}")
        self.html = self.sorted_pages[self.url]

    async def first_attribute(self, selector, name):
        if self.attribute_error is not None:
            raise self.attribute_error
        element = BeautifulSoup(self.html, "html.parser").select_one(selector)
        return element.get(name) if element is not None else None

    async def wait_for_selector(self, selector, timeout_ms=None):
        if not await self.count(selector):
            raise WaitTimeoutError(f"Selector {selector!r} did not appear")

    async def count(self, selector):
        return len(BeautifulSoup(self.html, "html.parser").select(selector))


@pytest.fixture
def fake_session():
    """Returns ``FakeSession``, for tests that drive a session directly."""
    return FakeSession


@pytest.fixture
def fake_session_factory():
    """Returns ``make(pages, sorted_pages=None, **options)``; ``make.sessions`` lists what was built."""
    sessions = []

    def make(pages, sorted_pages=None, **options):
        def factory():
            session = FakeSession(pages, sorted_pages, **options)
            sessions.append(session)
            return session
        return factory

    make.sessions = sessions
    return make
