from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Mapping, Optional, Tuple

from dotenv import load_dotenv

from automation import (
    BookingOptions,
    ContactInfo,
    Credentials,
    JourneyRequest,
    Passenger,
    PaymentInfo,
)

from .utils import parse_bool

REQUIRED_VARS = (
    "IRCTC_USER_ID",
    "IRCTC_PASSWORD",
    "FROM_STATION",
    "TO_STATION",
    "JOURNEY_DATE",
    "CONTACT_NUMBER",
    "ADDRESS",
    "PIN_CODE",
    "CARD_NUMBER",
    "CARD_EXPIRY",
    "CARD_CVV",
    "CARD_HOLDER_NAME",
)

DEFAULT_PASSENGERS = "Phoolan Devi,45,F;Ghansidas Pandey,50,M;Maindak Prasad,24,M;Anguri Devi,20,F"


class ConfigError(ValueError):
    """Configuration is missing or malformed."""


@dataclass(frozen=True, slots=True)
class BrowserSettings:
    headless: bool = False
    timeout: float = 100.0
    viewport: Tuple[int, int] = (1920, 1080)
    screenshot_dir: Path = Path("screenshots")


@dataclass(frozen=True, slots=True)
class WhatsAppSettings:
    enabled: bool = False
    timeout: float = 30.0
    interval: float = 3.0
    storage_state: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Settings:
    credentials: Credentials
    journey: JourneyRequest
    contact: ContactInfo
    payment: PaymentInfo
    browser: BrowserSettings
    whatsapp: WhatsAppSettings
    options: BookingOptions
    tickets_dir: Path
    logo_path: Path
    log_level: str = "INFO"
    log_dir: Optional[Path] = None


def load_env() -> None:
    load_dotenv()


def load_settings(environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build the run settings from environment variables; fail before any browser work."""
    env = os.environ if environ is None else environ

    missing = [name for name in REQUIRED_VARS if not env.get(name)]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    try:
        passengers = parse_passengers(env.get("PASSENGERS") or DEFAULT_PASSENGERS)
        browser = BrowserSettings(
            headless=parse_bool(env.get("HEADLESS")),
            timeout=_float(env, "BROWSER_TIMEOUT", 100.0),
            viewport=(
                int(env.get("VIEWPORT_WIDTH") or 1920),
                int(env.get("VIEWPORT_HEIGHT") or 1080),
            ),
            screenshot_dir=Path(env.get("SCREENSHOTS_DIR") or "screenshots"),
        )
        whatsapp = WhatsAppSettings(
            enabled=parse_bool(env.get("WHATSAPP_ENABLED")),
            timeout=_float(env, "WHATSAPP_TIMEOUT", 30.0),
            interval=_float(env, "WHATSAPP_INTERVAL", 3.0),
            storage_state=env.get("WHATSAPP_STORAGE_STATE") or None,
        )
        options = BookingOptions(
            typing_delay=_float(env, "TYPING_DELAY", 0.2),
            login_gate=_float(env, "LOGIN_CAPTCHA_WAIT", 10.0),
            payment_gate=_float(env, "PAYMENT_CAPTCHA_WAIT", 15.0),
            notifications_enabled=whatsapp.enabled,
            notification_interval=whatsapp.interval,
            notification_storage_state=whatsapp.storage_state,
            fallback_transaction_id=env.get("FALLBACK_TRANSACTION_ID") or "0095562596",
            fallback_reservation_id=env.get("FALLBACK_PNR") or "6422380568",
        )
        journey = JourneyRequest(
            origin=env["FROM_STATION"],
            destination=env["TO_STATION"],
            date=env["JOURNEY_DATE"],
            passengers=passengers,
        )
    except ValueError as exc:
        raise ConfigError(str(exc)) from exc

    log_dir = env.get("LOG_DIR", "logs")
    return Settings(
        credentials=Credentials(user_id=env["IRCTC_USER_ID"], password=env["IRCTC_PASSWORD"]),
        journey=journey,
        contact=ContactInfo(
            phone=env["CONTACT_NUMBER"],
            address=env["ADDRESS"],
            pin_code=env["PIN_CODE"],
            post_office=env.get("POST_OFFICE") or "Bhali",
        ),
        payment=PaymentInfo(
            card_number=env["CARD_NUMBER"],
            expiry=env["CARD_EXPIRY"],
            cvv=env["CARD_CVV"],
            holder_name=env["CARD_HOLDER_NAME"],
        ),
        browser=browser,
        whatsapp=whatsapp,
        options=options,
        tickets_dir=Path(env.get("TICKETS_DIR") or "tickets"),
        logo_path=Path(env.get("TICKET_LOGO") or "assets/logo.png"),
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        log_dir=Path(log_dir) if log_dir else None,
    )


def parse_passengers(raw: str) -> List[Passenger]:
    """Parse ``Name,Age,G;Name,Age,G`` keeping the declared order."""
    passengers: List[Passenger] = []
    for chunk in raw.split(";"):
        if not chunk.strip():
            continue
        parts = [part.strip() for part in chunk.split(",")]
        if len(parts) != 3 or not all(parts):
            raise ValueError(f"Malformed passenger entry {chunk.strip()!r}, expected 'Name,Age,Gender'.")
        passengers.append(Passenger.parse(*parts))
    if not passengers:
        raise ValueError("PASSENGERS does not list any passenger.")
    return passengers


def _float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from None
    if value < 0:
        raise ValueError(f"{name} must not be negative, got {raw!r}.")
    return value
