from __future__ import annotations
# buyictbot/scrapers/session.py

import re
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from playwright.async_api import async_playwright
from playwright.async_api import Error as PlaywrightError

from buyictbot.scrapers.errors import NavigationError
from buyictbot.utils.config import Config
from buyictbot.utils.logger import logger


class Session:
    """
    One browser context + page, scoped to a single URL visit.
    Obtain it through PageSessionManager.open(); never construct directly.
    """

    def __init__(self, page, cfg: Config, status: Optional[int] = None):
        self.page = page
        self.cfg = cfg
        self.status = status

    @property
    def url(self) -> str:
        return self.page.url

    async def content(self) -> str:
        """Current DOM serialized as HTML (reflects client-side rendering)."""
        try:
            return await self.page.content()
        except PlaywrightError as e:
            raise NavigationError(f"Could not read page content: {e}", self.url) from e

    async def wait_until_idle(self) -> None:
        """Block until no network requests have been in flight for ~500ms."""
        try:
            await self.page.wait_for_load_state("networkidle", timeout=self.cfg.idle_timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(
                f"Network did not go idle within {self.cfg.idle_timeout_ms}ms: {e}", self.url
            ) from e

    async def find_control(self, selector: str, label: str):
        """
        Return a handle for the first element matching `selector` whose whole
        visible text equals `label`, or None.
        """
        exact = re.compile(rf"^\s*{re.escape(label)}\s*$")
        loc = self.page.locator(selector).filter(has_text=exact)
        try:
            if await loc.count() == 0:
                return None
        except PlaywrightError as e:
            raise NavigationError(f"Could not query {selector!r}: {e}", self.url) from e
        return loc.first

    async def click(self, handle) -> None:
        """Click in place, then wait for the re-render to finish and settle."""
        try:
            await handle.click(timeout=self.cfg.navigation_timeout_ms)
        except PlaywrightError as e:
            raise NavigationError(f"Click failed: {e}", self.url) from e
        await self.wait_until_idle()
        if self.cfg.settle_delay_ms:
            await self.page.wait_for_timeout(self.cfg.settle_delay_ms)


class PageSessionManager:
    """
    Owns the single browser process for a run and hands out one context per
    page visit. Use as `async with PageSessionManager(cfg) as sessions:`.
    An externally supplied browser is used as-is and left open.
    """

    def __init__(self, cfg: Config, browser=None):
        self.cfg = cfg
        self._browser = browser
        self._owns_browser = browser is None
        self._pw = None

    async def __aenter__(self) -> "PageSessionManager":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    async def start(self) -> None:
        if self._browser is not None:
            return
        self._pw = await async_playwright().start()
        self._browser = await self._pw.chromium.launch(
            headless=self.cfg.headless,
            args=["--disable-blink-features=AutomationControlled"],
        )
        logger.debug(f"Browser launched (headless={self.cfg.headless})")

    async def stop(self) -> None:
        if not self._owns_browser:
            return
        try:
            if self._browser is not None:
                await self._browser.close()
        finally:
            self._browser = None
            if self._pw is not None:
                await self._pw.stop()
                self._pw = None

    async def _new_context(self):
        return await self._browser.new_context(
            user_agent=self.cfg.user_agent,
            locale=self.cfg.browser_locale,
            bypass_csp=True,
            extra_http_headers={"Accept-Language": "en-AU,en;q=0.9"},
        )

    async def _block_resources(self, ctx) -> None:
        # Speed up by dropping images/fonts/media
        async def _route(route, request):
            if request.resource_type in ("image", "media", "font"):
                return await route.abort()
            return await route.continue_()
        await ctx.route("**/*", _route)

    @asynccontextmanager
    async def open(self, url: str) -> AsyncIterator[Session]:
        """
        Navigate a fresh context to `url` and wait for network idle.
        Raises NavigationError if the page cannot be loaded. The context is
        closed on every exit path.
        """
        if self._browser is None:
            raise RuntimeError("PageSessionManager not started")

        ctx = None
        try:
            try:
                ctx = await self._new_context()
                if self.cfg.block_resources:
                    await self._block_resources(ctx)
                page = await ctx.new_page()
            except PlaywrightError as e:
                raise NavigationError(f"Could not open a browser page: {e}", url) from e
            page.set_default_timeout(self.cfg.navigation_timeout_ms)
            page.set_default_navigation_timeout(self.cfg.navigation_timeout_ms)

            try:
                response = await page.goto(
                    url, wait_until="domcontentloaded", timeout=self.cfg.navigation_timeout_ms
                )
            except PlaywrightError as e:
                raise NavigationError(f"Navigation failed: {e}", url) from e

            if response is None:
                raise NavigationError("Navigation produced no response", url)
            logger.debug(f"Response status {response.status} for {url}")
            if response.status >= 400:
                raise NavigationError(f"HTTP {response.status}", url)

            session = Session(page, self.cfg, status=response.status)
            await session.wait_until_idle()
            yield session
        finally:
            if ctx is not None:
                try:
                    await ctx.close()
                except PlaywrightError as e:
                    logger.warning(f"Closing browser context for {url} failed: {e}")
