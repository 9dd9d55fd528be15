from __future__ import annotations

import asyncio
import logging
from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any, Callable, List, Optional, Tuple, Union

from playwright.async_api import (
    Browser,
    BrowserContext,
    Error as PlaywrightError,
    Locator,
    Page,
    Playwright,
    async_playwright,
)

from .errors import InteractionError, NavigationError, SessionInitError
from .selectors import Target

LAUNCH_ARGS = (
    "--start-maximized",
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--disable-gpu",
)

TargetLike = Union[Target, str]


def _describe(target: TargetLike) -> str:
    if isinstance(target, Target):
        return f"{target.name} ({target.selector})"
    return target


class HeadlessBrowser(AbstractAsyncContextManager["HeadlessBrowser"]):
    """Manage a Chromium browser session and the primitive page interactions."""

    def __init__(
        self,
        *,
        headless: bool = True,
        timeout: float = 30.0,
        viewport: Tuple[int, int] = (1920, 1080),
        storage_state: Optional[str | dict] = None,
        screenshot_dir: str | Path = "screenshots",
        logger: Optional[logging.Logger] = None,
        playwright_factory: Callable[[], Any] = async_playwright,
    ) -> None:
        self._headless = headless
        self._timeout = timeout
        self._viewport = viewport
        self._storage_state = storage_state
        self._screenshot_dir = Path(screenshot_dir)
        self._logger = logger or logging.getLogger(__name__)
        self._playwright_factory = playwright_factory
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None
        self._side_contexts: List[BrowserContext] = []
        self._lock = asyncio.Lock()

    async def __aenter__(self) -> "HeadlessBrowser":
        try:
            return await self.open()
        except SessionInitError:
            await self.close()
            raise

    async def __aexit__(self, exc_type, exc, tb) -> None:  # type: ignore[override]
        await self.close()

    @property
    def is_open(self) -> bool:
        return self._page is not None

    @property
    def page(self) -> Page:
        if self._page is None:
            raise RuntimeError("Browser page is not initialized yet.")
        return self._page

    async def open(self) -> "HeadlessBrowser":
        """Start the session. On failure the caller owns cleanup through ``close()``."""
        self._logger.info(
            "Initializing browser (%s, %dx%d)",
            "headless" if self._headless else "visible",
            *self._viewport,
        )
        try:
            self._playwright = await self._playwright_factory().start()
            self._browser = await self._playwright.chromium.launch(
                headless=self._headless,
                args=list(LAUNCH_ARGS),
            )
            width, height = self._viewport
            self._context = await self._browser.new_context(
                viewport={"width": width, "height": height},
                storage_state=self._storage_state,
            )
            self._page = await self._context.new_page()
            self._page.set_default_timeout(self._timeout * 1000)
        except Exception as exc:
            self._logger.error("Failed to initialize browser: %s", exc)
            raise SessionInitError("Browser initialization failed", cause=exc) from exc
        self._logger.info("Browser initialized successfully")
        return self

    async def close(self) -> None:
        """Close pages, contexts and browser. Safe to call more than once."""
        async with self._lock:
            for name, closer in self._teardown_steps():
                try:
                    await closer()
                except Exception as exc:
                    self._logger.warning("Error closing %s: %s", name, exc)
            self._page = None
            self._context = None
            self._side_contexts = []
            self._browser = None
            self._playwright = None

    def _teardown_steps(self):
        steps = []
        for context in self._side_contexts:
            steps.append(("side context", context.close))
        if self._page is not None:
            steps.append(("page", self._page.close))
        if self._context is not None:
            steps.append(("context", self._context.close))
        if self._browser is not None:
            steps.append(("browser", self._browser.close))
        if self._playwright is not None:
            steps.append(("playwright", self._playwright.stop))
        return steps

    async def goto(self, url: str, wait_until: str = "networkidle") -> str:
        """
        Navigate to ``url`` and block until the ``wait_until`` load state is reached.

        Returns the final URL the browser ends up at (after potential redirects).
        """
        self._logger.info("Navigating to %s", url)
        try:
            await self.page.goto(url, wait_until=wait_until, timeout=self._timeout * 1000)
        except PlaywrightError as exc:
            raise NavigationError(
                f"Navigation failed: {url}",
                address=url,
                criterion=wait_until,
                cause=exc,
            ) from exc
        return self.page.url

    def _ms(self, timeout: Optional[float]) -> float:
        return (self._timeout if timeout is None else timeout) * 1000

    def locate(self, target: TargetLike) -> Locator:
        if isinstance(target, str):
            return self.page.locator(target).first
        locator = self.page.locator(target.selector)
        if target.fallback:
            locator = locator.or_(self.page.locator(target.fallback))
        return locator.first

    async def activate(self, target: TargetLike, *, timeout: Optional[float] = None) -> None:
        """Click on ``target`` once it is visible."""
        self._logger.debug("Waiting for element: %s", _describe(target))
        locator = self.locate(target)
        try:
            await locator.wait_for(state="visible", timeout=self._ms(timeout))
            await locator.click()
        except PlaywrightError as exc:
            raise InteractionError(
                f"Element click failed: {_describe(target)}",
                locator=str(target),
                cause=exc,
            ) from exc

    async def enter_text(
        self,
        target: TargetLike,
        text: str,
        *,
        delay: float = 0.2,
        timeout: Optional[float] = None,
    ) -> None:
        """
        Replace the content of ``target`` with ``text``.

        The field is focused and its content selected so the first keystroke
        overwrites it; characters are then typed one by one ``delay`` seconds
        apart, which is what the site's client-side validation listens for.
        """
        self._logger.debug("Typing text into: %s", _describe(target))
        locator = self.locate(target)
        try:
            await locator.wait_for(state="visible", timeout=self._ms(timeout))
            await locator.click()
            await self.page.keyboard.press("Control+A")
            await locator.press_sequentially(text, delay=delay * 1000)
        except PlaywrightError as exc:
            raise InteractionError(
                f"Text input failed: {_describe(target)}",
                locator=str(target),
                cause=exc,
            ) from exc

    async def press(self, key: str) -> None:
        try:
            await self.page.keyboard.press(key)
        except PlaywrightError as exc:
            raise InteractionError(f"Key press failed: {key}", locator=key, cause=exc) from exc

    async def pause(self, seconds: float) -> None:
        self._logger.debug("Waiting for %.1fs", seconds)
        await asyncio.sleep(seconds)

    async def content(self) -> str:
        return await self.page.content()

    async def new_context(self, *, storage_state: Optional[str | dict] = None) -> Page:
        """Open an independent context and page on the running browser."""
        if self._browser is None:
            raise SessionInitError("Browser is not initialized yet.")
        try:
            context = await self._browser.new_context(storage_state=storage_state)
            self._side_contexts.append(context)
            page = await context.new_page()
        except PlaywrightError as exc:
            raise SessionInitError("Could not open an additional browser context", cause=exc) from exc
        page.set_default_timeout(self._timeout * 1000)
        return page

    async def screenshot(self, name: str) -> Optional[Path]:
        """Save a full-page PNG for debugging. Failures are logged, never raised."""
        if self._page is None:
            self._logger.warning("Screenshot %s skipped: browser page is not initialized", name)
            return None
        path = self._screenshot_dir / f"{name}.png"
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            await self._page.screenshot(path=str(path), full_page=True)
        except Exception as exc:
            self._logger.error("Failed to take screenshot %s: %s", name, exc)
            return None
        self._logger.info("Screenshot saved: %s", path)
        return path
