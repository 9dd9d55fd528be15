import asyncio
import time

import pytest
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from automation import HeadlessBrowser, InteractionError, NavigationError, SessionInitError
from automation.selectors import Target


class FakeKeyboard:
    def __init__(self, page: "FakePage") -> None:
        self._page = page
        self.pressed = []

    async def press(self, key: str) -> None:
        self.pressed.append(key)
        if key == "Control+A" and self._page.focused is not None:
            self._page.focused.selected = True


class FakeLocator:
    def __init__(self, page: "FakePage", selector: str, *, value: str = "", visible: bool = True) -> None:
        self._page = page
        self.selector = selector
        self.value = value
        self.visible = visible
        self.selected = False
        self.clicks = 0
        self.typed_delays = []
        self.wait_timeouts = []

    @property
    def first(self) -> "FakeLocator":
        return self

    def or_(self, other: "FakeLocator") -> "FakeLocator":
        return self if self.visible else other

    async def wait_for(self, *, state: str = "visible", timeout: float | None = None) -> None:
        self.wait_timeouts.append(timeout)
        if not self.visible:
            raise PlaywrightTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.selector}")

    async def click(self) -> None:
        self.clicks += 1
        self._page.focused = self
        self.selected = False

    async def press_sequentially(self, text: str, *, delay: float = 0) -> None:
        self.typed_delays.append(delay)
        for char in text:
            if self.selected:
                self.value = ""
                self.selected = False
            self.value += char


class FakePage:
    def __init__(self) -> None:
        self.url = "about:blank"
        self.focused = None
        self.keyboard = FakeKeyboard(self)
        self.locators = {}
        self.default_timeout = None
        self.closed = False
        self.goto_error = None
        self.html = "<html></html>"
        self.screenshot_error = None
        self.screenshots = []

    def add(self, selector: str, **kwargs) -> FakeLocator:
        locator = FakeLocator(self, selector, **kwargs)
        self.locators[selector] = locator
        return locator

    def locator(self, selector: str) -> FakeLocator:
        if selector not in self.locators:
            self.add(selector, visible=False)
        return self.locators[selector]

    def set_default_timeout(self, timeout: float) -> None:
        self.default_timeout = timeout

    async def goto(self, url: str, *, wait_until: str, timeout: float) -> None:
        if self.goto_error is not None:
            raise self.goto_error
        self.url = url

    async def content(self) -> str:
        return self.html

    async def screenshot(self, *, path: str, full_page: bool = False) -> bytes:
        if self.screenshot_error is not None:
            raise self.screenshot_error
        self.screenshots.append((path, full_page))
        with open(path, "wb") as handle:
            handle.write(b"\x89PNG")
        return b"\x89PNG"

    async def close(self) -> None:
        self.closed = True


class FakeContext:
    def __init__(self, **kwargs) -> None:
        self.kwargs = kwargs
        self.pages = []
        self.close_calls = 0

    async def new_page(self) -> FakePage:
        page = FakePage()
        self.pages.append(page)
        return page

    async def close(self) -> None:
        self.close_calls += 1


class FakeBrowser:
    def __init__(self, *, close_error: Exception | None = None) -> None:
        self.contexts = []
        self.close_calls = 0
        self.close_error = close_error

    async def new_context(self, **kwargs) -> FakeContext:
        context = FakeContext(**kwargs)
        self.contexts.append(context)
        return context

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


class FakeChromium:
    def __init__(self, browser: FakeBrowser, launch_error: Exception | None = None) -> None:
        self.browser = browser
        self.launch_error = launch_error
        self.launch_kwargs = None

    async def launch(self, **kwargs) -> FakeBrowser:
        self.launch_kwargs = kwargs
        if self.launch_error is not None:
            raise self.launch_error
        return self.browser


class FakePlaywright:
    def __init__(self, chromium: FakeChromium) -> None:
        self.chromium = chromium
        self.stop_calls = 0

    async def stop(self) -> None:
        self.stop_calls += 1


class FakePlaywrightManager:
    def __init__(self, playwright: FakePlaywright) -> None:
        self._playwright = playwright

    async def start(self) -> FakePlaywright:
        return self._playwright


def make_browser(*, launch_error=None, close_error=None, **kwargs):
    fake_browser = FakeBrowser(close_error=close_error)
    playwright = FakePlaywright(FakeChromium(fake_browser, launch_error))
    browser = HeadlessBrowser(playwright_factory=lambda: FakePlaywrightManager(playwright), **kwargs)
    return browser, playwright, fake_browser


def run(coro):
    return asyncio.run(coro)


def test_open_applies_viewport_headless_and_timeout():
    browser, playwright, fake_browser = make_browser(headless=False, timeout=5.0, viewport=(1280, 720))

    run(browser.open())

    assert playwright.chromium.launch_kwargs["headless"] is False
    assert "--no-sandbox" in playwright.chromium.launch_kwargs["args"]
    assert fake_browser.contexts[0].kwargs["viewport"] == {"width": 1280, "height": 720}
    assert browser.page.default_timeout == 5000
    assert browser.is_open


def test_open_failure_raises_session_init_error_and_leaves_cleanup_to_close():
    browser, playwright, _ = make_browser(launch_error=RuntimeError("no chromium"))

    with pytest.raises(SessionInitError) as excinfo:
        run(browser.open())

    assert isinstance(excinfo.value.cause, RuntimeError)
    assert playwright.stop_calls == 0
    assert not browser.is_open

    run(browser.close())
    assert playwright.stop_calls == 1


def test_context_manager_closes_after_failed_open():
    browser, playwright, _ = make_browser(launch_error=RuntimeError("no chromium"))

    async def scenario():
        async with browser:
            pass

    with pytest.raises(SessionInitError):
        run(scenario())

    assert playwright.stop_calls == 1


def test_enter_text_overwrites_existing_content():
    browser, _, _ = make_browser()
    run(browser.open())
    field = browser.page.add("#userId", value="X")

    run(browser.enter_text("#userId", "Y", delay=0.1))

    assert field.value == "Y"
    assert browser.page.keyboard.pressed == ["Control+A"]
    assert field.typed_delays == [100]


def test_enter_text_uses_positional_fallback_when_semantic_target_missing():
    browser, _, _ = make_browser()
    run(browser.open())
    fallback = browser.page.add("#legacy-age", value="30")
    target = Target("passenger_0_age", "input[formcontrolname='passengerAge']", fallback="#legacy-age")

    run(browser.enter_text(target, "45", delay=0))

    assert fallback.value == "45"


def test_activate_clicks_visible_element():
    browser, _, _ = make_browser()
    run(browser.open())
    button = browser.page.add("#confirm-purchase")

    run(browser.activate(Target("confirm_purchase", "#confirm-purchase")))

    assert button.clicks == 1


def test_activate_timeout_raises_interaction_error_with_locator():
    browser, _, _ = make_browser()
    run(browser.open())

    with pytest.raises(InteractionError) as excinfo:
        run(browser.activate(Target("login_submit", "app-login button[type='submit']"), timeout=0.01))

    assert excinfo.value.locator == "login_submit"
    assert isinstance(excinfo.value.cause, PlaywrightTimeoutError)


def test_goto_failure_raises_navigation_error():
    browser, _, _ = make_browser()
    run(browser.open())
    browser.page.goto_error = PlaywrightError("net::ERR_NAME_NOT_RESOLVED")

    with pytest.raises(NavigationError) as excinfo:
        run(browser.goto("https://www.irctc.co.in/nget/train-search", "networkidle"))

    assert excinfo.value.address == "https://www.irctc.co.in/nget/train-search"
    assert excinfo.value.criterion == "networkidle"


def test_pause_blocks_for_the_requested_duration():
    browser, _, _ = make_browser()

    started = time.monotonic()
    run(browser.pause(0.05))

    assert time.monotonic() - started >= 0.05


def test_new_context_shares_browser_and_is_closed_on_teardown():
    browser, _, fake_browser = make_browser(timeout=7.0)
    run(browser.open())

    page = run(browser.new_context(storage_state="wa_state.json"))

    assert len(fake_browser.contexts) == 2
    assert fake_browser.contexts[1].kwargs == {"storage_state": "wa_state.json"}
    assert page.default_timeout == 7000

    run(browser.close())
    assert fake_browser.contexts[1].close_calls == 1


def test_close_is_idempotent_and_swallows_teardown_errors():
    browser, playwright, fake_browser = make_browser(close_error=RuntimeError("already gone"))
    run(browser.open())
    page = browser.page

    run(browser.close())
    run(browser.close())

    assert page.closed
    assert fake_browser.close_calls == 1
    assert playwright.stop_calls == 1
    assert not browser.is_open


def test_context_manager_closes_on_exit():
    browser, playwright, _ = make_browser()

    async def scenario():
        async with browser as session:
            assert session.is_open

    run(scenario())

    assert playwright.stop_calls == 1


def test_explicit_zero_timeout_is_not_replaced_by_default():
    browser, _, _ = make_browser(timeout=30.0)
    run(browser.open())
    button = browser.page.add("#search")

    run(browser.activate("#search", timeout=0))
    run(browser.activate("#search"))

    assert button.wait_timeouts == [0, 30000]


def test_screenshot_writes_full_page_png(tmp_path):
    browser, _, _ = make_browser(screenshot_dir=tmp_path / "shots")
    run(browser.open())

    path = run(browser.screenshot("failed_login"))

    assert path == tmp_path / "shots" / "failed_login.png"
    assert path.exists()
    assert browser.page.screenshots == [(str(path), True)]


def test_screenshot_failure_is_logged_not_raised(tmp_path):
    browser, _, _ = make_browser(screenshot_dir=tmp_path)
    run(browser.open())
    browser.page.screenshot_error = PlaywrightError("Target page, context or browser has been closed")

    assert run(browser.screenshot("failed_navigate")) is None


def test_screenshot_without_session_is_skipped(tmp_path):
    browser, _, _ = make_browser(screenshot_dir=tmp_path)

    assert run(browser.screenshot("failed_open_session")) is None
    assert list(tmp_path.iterdir()) == []
