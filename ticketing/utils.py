from __future__ import annotations

import re

_WHITESPACE = re.compile(r"\s+")
_UNSAFE_FILENAME = re.compile(r"[^\w.-]")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}


def ticket_filename(passenger_name: str) -> str:
    slug = _WHITESPACE.sub("_", passenger_name.strip())
    slug = _UNSAFE_FILENAME.sub("", slug)
    return f"{slug or 'passenger'}_ticket.pdf"


def build_notification_message(passenger_name: str, origin: str, destination: str) -> str:
    return (
        f"🎉 Congratulations {passenger_name}!\n"
        "\n"
        f"Your train ticket from {origin} to {destination} has been successfully booked.\n"
        "\n"
        "📋 Please check your registered email for the e-ticket details.\n"
        "\n"
        "🚂 Have a safe and comfortable journey!\n"
        "\n"
        "Best regards,\n"
        "IRCTC Ticket Booking System"
    )


def parse_bool(raw: str | None, *, default: bool = False) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Expected a boolean value, got {raw!r}.")
