import asyncio
import inspect
import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Union

from playwright.async_api import async_playwright, Error as PlaywrightError, TimeoutError as PlaywrightTimeoutError

from . import config
from .aggregator import aggregate, make_placeholder
from .extractor import PageDocument

logger = logging.getLogger(__name__)


class ScrapeError(Exception):
    """A scrape invocation could not produce a result."""


class BrowserLaunchError(ScrapeError):
    pass


class NavigationError(ScrapeError):
    pass


class WaitTimeoutError(ScrapeError):
    pass


async def block_requests(route, request):
    """Block specified resource types."""
    if request.resource_type in ["image", "stylesheet", "font", "media"]:
        try:
            await route.abort()
        except PlaywrightError:
            # Can happen if request finishes before abort
            pass
    else:
        try:
            await route.continue_()
        except PlaywrightError:
            pass


async def wait_until(
    predicate: Callable[[], Union[bool, Awaitable[bool]]],
    timeout: float = config.SELECTOR_TIMEOUT_MS / 1000,
    interval: float = config.WAIT_POLL_INTERVAL_SECONDS,
    description: str = "condition",
) -> None:
    """Poll ``predicate`` every ``interval`` seconds until it is truthy.

    Raises :class:`WaitTimeoutError` once ``timeout`` seconds have passed
    without success. The predicate may be sync or async.
    """
    deadline = time.monotonic() + timeout
    while True:
        result = predicate()
        if inspect.isawaitable(result):
            result = await result
        if result:
            return
        if time.monotonic() >= deadline:
            raise WaitTimeoutError(f"Timed out after {timeout:.1f}s waiting for {description}")
        await asyncio.sleep(interval)


class BrowserSession:
    """One headless Chromium with a single page, released on every exit path.

    Use as ``async with BrowserSession() as session:``.
    """

    def __init__(self, headless: bool = config.HEADLESS, block_resources: bool = config.BLOCK_RESOURCES):
        self.headless = headless
        self.block_resources = block_resources
        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None

    async def __aenter__(self) -> "BrowserSession":
        await self.setup()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.cleanup()

    async def setup(self):
        if self.page:
            return
        try:
            self.playwright = await async_playwright().start()
            self.browser = await self.playwright.chromium.launch(
                headless=self.headless,
                args=config.LAUNCH_ARGS,
                executable_path=config.CHROMIUM_EXECUTABLE_PATH,
            )
            self.context = await self.browser.new_context(user_agent=config.USER_AGENT, viewport=config.VIEWPORT)
            self.page = await self.context.new_page()
            if self.block_resources:
                await self.page.route("**/*", block_requests)
            logger.info("Browser session started.")
        except Exception as e:
            logger.error(f"Error launching browser: {str(e)}")
            await self.cleanup()
            raise BrowserLaunchError(f"Browser launch failed: {e}") from e

    async def cleanup(self):
        # Close errors are logged only; they must never mask the caller's exception.
        for name in ("page", "context", "browser"):
            handle = getattr(self, name)
            if handle is None:
                continue
            try:
                await handle.close()
            except Exception as e:
                logger.error(f"Error closing {name}: {str(e)}")
            setattr(self, name, None)
        if self.playwright:
            try:
                await self.playwright.stop()
            except Exception as e:
                logger.error(f"Error stopping playwright: {str(e)}")
            self.playwright = None
            logger.info("Browser session closed.")

    async def goto(self, url: str, timeout_ms: int = config.PAGE_LOAD_TIMEOUT_MS, wait_event: str = "domcontentloaded"):
        logger.debug(f"Navigating to {url}")
        try:
            response = await self.page.goto(url, wait_until=wait_event, timeout=timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Navigation error for {url}: {e}") from e
        if response is not None and not response.ok:
            raise NavigationError(f"Failed to load {url}: Status {response.status}")
        return response

    async def content(self) -> str:
        try:
            return await self.page.content()
        except PlaywrightError as e:
            raise ScrapeError(f"Could not read page content of {self.page.url}: {e}") from e

    async def document(self) -> PageDocument:
        """Snapshot of the current DOM for extraction."""
        return PageDocument.from_html(await self.content(), self.page.url)

    async def select_option(self, selector: str, value: str, timeout_ms: int = config.SELECTOR_TIMEOUT_MS) -> None:
        try:
            await self.page.select_option(selector, value, timeout=timeout_ms)
        except PlaywrightError as e:
            raise ScrapeError(f"Could not select {value!r} in {selector!r}: {e}") from e

    async def first_attribute(self, selector: str, name: str) -> Optional[str]:
        """Attribute of the first match, or None when nothing matches yet."""
        locator = self.page.locator(selector)
        try:
            if await locator.count() == 0:
                return None
            return await locator.first.get_attribute(name, timeout=config.SELECTOR_TIMEOUT_MS)
        except PlaywrightError as e:
            raise ScrapeError(f"Could not read {name!r} of {selector!r}: {e}") from e

    async def wait_for_selector(self, selector: str, timeout_ms: int = config.SELECTOR_TIMEOUT_MS) -> None:
        try:
            await self.page.wait_for_selector(selector, timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise WaitTimeoutError(f"Selector {selector!r} did not appear within {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise ScrapeError(f"Error waiting for {selector!r}: {e}") from e

    async def count(self, selector: str) -> int:
        try:
            return await self.page.locator(selector).count()
        except PlaywrightError as e:
            raise ScrapeError(f"Could not count {selector!r}: {e}") from e


SessionFactory = Callable[[], BrowserSession]


async def visit_details(
    session: BrowserSession,
    records: List[Dict[str, Any]],
    extract_detail: Callable[[PageDocument], Dict[str, Any]],
    detail_defaults: Dict[str, Any],
    delay: float = config.POLITE_DELAY_SECONDS,
    url_key: str = "url",
    timeout_ms: int = config.PAGE_LOAD_TIMEOUT_MS,
) -> List[Dict[str, Any]]:
    """Visit each record's detail page in order and merge what it yields.

    A failure on one page becomes a placeholder record; the run continues.
    """
    detailed = []
    for index, record in enumerate(records):
        url = record.get(url_key)
        if not url or url == "N/A":
            detailed.append(make_placeholder(record, detail_defaults, "No detail URL"))
            continue
        logger.info(f"Scraping detail {index + 1}/{len(records)}: {url}")
        try:
            await session.goto(url, timeout_ms=timeout_ms)
            doc = await session.document()
            details = extract_detail(doc)
            detailed.append({**record, **details, "detail_status": "ok"})
        except Exception as e:
            logger.exception(f"Error scraping details for {url}: {str(e)}")
            detailed.append(make_placeholder(record, detail_defaults, str(e)))
        if delay and index < len(records) - 1:
            await asyncio.sleep(delay)
    return aggregate(detailed)


def open_session(session_factory: Optional[SessionFactory] = None) -> BrowserSession:
    return (session_factory or BrowserSession)()
