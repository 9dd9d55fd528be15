from __future__ import annotations

import re
from typing import Optional

from bs4 import BeautifulSoup

from .models import BookingIds

_TRANSACTION_LABEL = re.compile(r"transaction\s*id", re.IGNORECASE)
_PNR_LABEL = re.compile(r"\bpnr(\s*(no\.?|number))?\b", re.IGNORECASE)
_DIGITS = re.compile(r"\b(\d{6,12})\b")
_NON_BLANK = re.compile(r"\S")


def extract_booking_ids(html: str) -> BookingIds:
    """Read the transaction id and PNR from the booking confirmation page."""
    if not html:
        return BookingIds()
    soup = BeautifulSoup(html, "html.parser")
    return BookingIds(
        transaction_id=_value_after_label(soup, _TRANSACTION_LABEL),
        reservation_id=_value_after_label(soup, _PNR_LABEL),
    )


def _value_after_label(soup: BeautifulSoup, label: re.Pattern[str]) -> Optional[str]:
    for node in soup.find_all(string=label):
        # "Transaction ID: 0095562596" in one text node
        text = str(node)
        match = _DIGITS.search(text[label.search(text).end():])
        if match:
            return match.group(1)

        # label and value in sibling cells / spans
        for sibling in node.find_all_next(string=_NON_BLANK, limit=3):
            match = _DIGITS.search(str(sibling))
            if match:
                return match.group(1)
    return None
