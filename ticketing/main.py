from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from automation import BookingAutomationError, BookingOrchestrator, HeadlessBrowser

from .config import ConfigError, Settings, load_env, load_settings
from .tickets import TicketPdfEmitter
from .whatsapp import WhatsAppNotifier

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

logger = logging.getLogger("ticketing")


def configure_logging(level: str = "INFO", log_dir: Optional[Path] = None) -> None:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_dir / "combined.log", encoding="utf-8"))
        error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
        error_handler.setLevel(logging.ERROR)
        handlers.append(error_handler)
    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)


def build_orchestrator(settings: Settings) -> BookingOrchestrator:
    browser = HeadlessBrowser(
        headless=settings.browser.headless,
        timeout=settings.browser.timeout,
        viewport=settings.browser.viewport,
        screenshot_dir=settings.browser.screenshot_dir,
        logger=logging.getLogger("ticketing.browser"),
    )
    emitter = TicketPdfEmitter(
        settings.tickets_dir,
        logo_path=settings.logo_path,
        logger=logging.getLogger("ticketing.tickets"),
    )
    notifier = WhatsAppNotifier(
        timeout=settings.whatsapp.timeout,
        logger=logging.getLogger("ticketing.whatsapp"),
    )
    return BookingOrchestrator(
        settings.journey,
        credentials=settings.credentials,
        contact=settings.contact,
        payment=settings.payment,
        driver=browser,
        emitter=emitter,
        notifier=notifier,
        options=settings.options,
        logger=logging.getLogger("ticketing.booking"),
    )


def log_summary(settings: Settings) -> None:
    journey = settings.journey
    logger.info("🚂 Starting IRCTC Ticket Booking Automation")
    logger.info("From Station: %s", journey.origin)
    logger.info("To Station: %s", journey.destination)
    logger.info("Journey Date: %s", journey.date)
    logger.info("Number of Passengers: %d", len(journey.passengers))
    logger.info("Browser Mode: %s", "Headless" if settings.browser.headless else "Visible")
    logger.info("WhatsApp Notifications: %s", "Enabled" if settings.whatsapp.enabled else "Disabled")


async def main(settings: Optional[Settings] = None) -> int:
    if settings is None:
        load_env()
        try:
            settings = load_settings()
        except ConfigError as exc:
            logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)
            logger.error("❌ Configuration error: %s", exc)
            return 1

    configure_logging(settings.log_level, settings.log_dir)
    log_summary(settings)

    orchestrator = build_orchestrator(settings)
    try:
        result = await orchestrator.run()
    except BookingAutomationError as exc:
        logger.error(
            "❌ %s during step %s (phase %s): %s",
            type(exc).__name__,
            exc.step,
            exc.phase,
            exc,
        )
        return 1

    logger.info("🎉 Ticket booking automation completed successfully!")
    logger.info("📋 %s", result.message)
    for path in result.artifacts:
        logger.info("Ticket: %s", path)
    for failure in result.failures:
        logger.warning("%s failed for %s: %s", failure.phase, failure.passenger_name, failure.error)
    return 0


def run() -> None:
    raise SystemExit(asyncio.run(main()))


if __name__ == "__main__":
    run()
