import asyncio

import pytest
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from automation import NotificationError
from ticketing.utils import build_notification_message
from ticketing.whatsapp import WhatsAppNotifier


class FakeCompose:
    def __init__(self, page: "FakeWhatsAppPage", selector: str) -> None:
        self._page = page
        self._selector = selector

    async def press_sequentially(self, text: str, *, delay: float = 0) -> None:
        self._page.typed.setdefault(self._selector, []).append(text)

    async def press(self, key: str) -> None:
        self._page.typed.setdefault(self._selector, []).append(f"<{key}>")


class FakeWhatsAppPage:
    def __init__(self, *, missing_selector: str | None = None) -> None:
        self.missing_selector = missing_selector
        self.visited = []
        self.clicked = []
        self.typed = {}
        self.waited = []

    async def goto(self, url: str, *, wait_until: str, timeout: float) -> None:
        self.visited.append((url, wait_until, timeout))

    async def wait_for_selector(self, selector: str, *, state: str = "visible", timeout: float | None = None) -> None:
        if selector == self.missing_selector:
            raise PlaywrightTimeoutError(f"Timeout waiting for {selector}")
        self.waited.append(selector)

    async def click(self, selector: str) -> None:
        self.clicked.append(selector)

    def locator(self, selector: str) -> FakeCompose:
        return FakeCompose(self, selector)

    async def wait_for_timeout(self, timeout: float) -> None:
        pass


def run(coro):
    return asyncio.run(coro)


def test_dispatch_opens_exact_contact_and_sends_template():
    page = FakeWhatsAppPage()
    notifier = WhatsAppNotifier(timeout=5.0)

    run(notifier.dispatch(page, "Phoolan Devi", "NEW DELHI - NDLS", "HOWRAH JN - HWH"))

    assert page.visited == [("https://web.whatsapp.com/", "networkidle", 5000)]
    assert 'span[title="Phoolan Devi"]' in page.clicked
    assert page.clicked[-1] == 'span[data-testid="send"]'

    compose = page.typed['div[data-testid="conversation-compose-box-input"]']
    typed_message = "".join("\n" if chunk == "<Shift+Enter>" else chunk for chunk in compose)
    assert typed_message == build_notification_message("Phoolan Devi", "NEW DELHI - NDLS", "HOWRAH JN - HWH")
    assert page.typed['div[data-testid="chat-list-search"]'] == ["Phoolan Devi"]


def test_unknown_contact_raises_notification_error():
    page = FakeWhatsAppPage(missing_selector='span[title="Anguri Devi"]')

    with pytest.raises(NotificationError) as excinfo:
        run(WhatsAppNotifier().dispatch(page, "Anguri Devi", "NEW DELHI - NDLS", "HOWRAH JN - HWH"))

    assert isinstance(excinfo.value.cause, PlaywrightTimeoutError)
    assert 'span[data-testid="send"]' not in page.clicked


def test_message_mentions_passenger_and_route():
    message = build_notification_message("Ghansidas Pandey", "NEW DELHI - NDLS", "HOWRAH JN - HWH")

    assert message.startswith("🎉 Congratulations Ghansidas Pandey!")
    assert "from NEW DELHI - NDLS to HOWRAH JN - HWH" in message
    assert message.endswith("IRCTC Ticket Booking System")
