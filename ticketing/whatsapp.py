from __future__ import annotations

import logging
from typing import Optional

from playwright.async_api import Error as PlaywrightError, Page

from automation import NotificationError
from automation.selectors import (
    WA_CHAT_LIST,
    WA_COMPOSE_BOX,
    WA_SEARCH_BOX,
    WA_SEND_BUTTON,
    WHATSAPP_WEB_URL,
    whatsapp_contact,
)

from .utils import build_notification_message

SEARCH_TYPING_DELAY_MS = 100
MESSAGE_TYPING_DELAY_MS = 50
CONTACT_LOOKUP_TIMEOUT_MS = 10_000
SEND_SETTLE_MS = 2_000


class WhatsAppNotifier:
    """Send the booking confirmation to a passenger through WhatsApp Web."""

    def __init__(self, *, timeout: float = 30.0, logger: Optional[logging.Logger] = None) -> None:
        self._timeout = timeout
        self._logger = logger or logging.getLogger(__name__)

    async def dispatch(self, page: Page, passenger_name: str, origin: str, destination: str) -> None:
        self._logger.info("Sending WhatsApp notification to: %s", passenger_name)
        try:
            await page.goto(WHATSAPP_WEB_URL, wait_until="networkidle", timeout=self._timeout * 1000)
            await page.wait_for_selector(WA_CHAT_LIST, timeout=self._timeout * 1000)
            await self._open_chat(page, passenger_name)
            await self._send_message(page, build_notification_message(passenger_name, origin, destination))
        except PlaywrightError as exc:
            raise NotificationError(
                f"WhatsApp notification failed for {passenger_name}",
                cause=exc,
            ) from exc
        self._logger.info("✅ WhatsApp notification sent to: %s", passenger_name)

    async def _open_chat(self, page: Page, contact_name: str) -> None:
        await page.wait_for_selector(WA_SEARCH_BOX, state="visible")
        await page.click(WA_SEARCH_BOX)
        await page.locator(WA_SEARCH_BOX).press_sequentially(contact_name, delay=SEARCH_TYPING_DELAY_MS)

        # exact display-name match only
        contact = whatsapp_contact(contact_name)
        await page.wait_for_selector(contact, state="visible", timeout=CONTACT_LOOKUP_TIMEOUT_MS)
        await page.click(contact)
        self._logger.debug("Contact found and selected: %s", contact_name)

    async def _send_message(self, page: Page, message: str) -> None:
        await page.wait_for_selector(WA_COMPOSE_BOX, state="visible")
        compose = page.locator(WA_COMPOSE_BOX)
        for index, line in enumerate(message.split("\n")):
            if index:
                # Enter would send the message early
                await compose.press("Shift+Enter")
            if line:
                await compose.press_sequentially(line, delay=MESSAGE_TYPING_DELAY_MS)

        await page.wait_for_selector(WA_SEND_BUTTON, state="visible")
        await page.click(WA_SEND_BUTTON)
        await page.wait_for_timeout(SEND_SETTLE_MS)
