"""
Locator table for the IRCTC booking pages.

Every selector the booking flow touches lives here so a markup change on the
site means editing this module only. A ``Target`` carries a stable semantic
selector and, where the site exposes nothing stable, the positional CSS path
copied from the DOM as a fallback.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

TRAIN_SEARCH_URL = "https://www.irctc.co.in/nget/train-search"
WHATSAPP_WEB_URL = "https://web.whatsapp.com/"


@dataclass(frozen=True, slots=True)
class Target:
    name: str
    selector: str
    fallback: Optional[str] = None

    def __str__(self) -> str:
        return self.name


# Landing page
ALERT_OK = Target("alert_ok", "button.btn.btn-primary")

# Search form
ORIGIN_INPUT = Target(
    "origin_input",
    "p-autocomplete[formcontrolname='origin'] input",
    fallback='input[aria-controls="pr_id_1_list"]',
)
DESTINATION_INPUT = Target(
    "destination_input",
    "p-autocomplete[formcontrolname='destination'] input",
    fallback='input[aria-controls="pr_id_2_list"]',
)
JOURNEY_DATE_INPUT = Target(
    "journey_date_input",
    "p-calendar[formcontrolname='journeyDate'] input",
    fallback=".ng-tns-c59-10.ui-calendar",
)
QUOTA_DROPDOWN = Target(
    "quota_dropdown",
    "p-dropdown[formcontrolname='journeyQuota'] .ui-dropdown-trigger",
    fallback=".ui-dropdown-trigger-icon.ui-clickable.ng-tns-c66-11.pi.pi-chevron-down",
)
AVAILABLE_BERTH = Target("available_berth", 'label[for="availableBerth"]')
SEARCH_SUBMIT = Target("search_submit", "button[type='submit'].search_btn.train_Search")

# Train list
_TRAIN_CARD = (
    "#divMain > div > app-train-list > div.col-sm-9.col-xs-12 > div > div.ng-star-inserted"
    " > div:nth-child(3) > div.form-group.no-pad.col-xs-12.bull-back.border-all > app-train-avl-enq"
)
TRAIN_CLASS = Target(
    "train_class",
    "app-train-avl-enq >> nth=0 >> table td:nth-child(1) > div",
    fallback=f"{_TRAIN_CARD} > div.ng-star-inserted > div:nth-child(5) > div > table > tr > td:nth-child(1) > div",
)
BOOK_NOW = Target(
    "book_now",
    "app-train-avl-enq >> nth=0 >> button.btnDefault.train_Search",
    fallback=f"{_TRAIN_CARD} > div.col-xs-12 > div > span > span > button.btnDefault.train_Search.ng-star-inserted",
)
CONFIRM_DIALOG_ACCEPT = Target(
    "confirm_dialog_accept",
    "button.ui-confirmdialog-acceptbutton",
    fallback=(
        ".ng-tns-c57-14.ui-confirmdialog-acceptbutton.ui-button.ui-widget.ui-state-default"
        ".ui-corner-all.ui-button-text-icon-left.ng-star-inserted"
    ),
)

# Login dialog
LOGIN_USER_ID = Target("login_user_id", "#userId")
LOGIN_PASSWORD = Target("login_password", "#pwd")
LOGIN_SUBMIT = Target(
    "login_submit",
    "app-login button[type='submit']",
    fallback=".search_btn.train_Search",
)

# Passenger form
ADD_PASSENGER = Target(
    "add_passenger",
    "app-passenger-input a:has-text('+ Add Passenger')",
    fallback=(
        "#ui-panel-12-content > div > div.form-group.col-xs-12.padding.ng-tns-c79-64"
        " > div.pull-left.ng-star-inserted > a > span"
    ),
)

_PASSENGER_ROW = (
    "#ui-panel-12-content > div > div:nth-child({position})"
    " > div.col-sm-11.col-xs-12.remove-padding.pull-left > div > app-passenger"
    " > div > div:nth-child(1) > span"
)
_PASSENGER_FIELDS = {
    "name": (
        "p-autocomplete[formcontrolname='passengerName'] input",
        "div.Layer_7.col-sm-3.col-xs-12 > p-autocomplete > span > input",
    ),
    "age": (
        "input[formcontrolname='passengerAge']",
        "div.Layer_7.col-sm-1.col-xs-6 > input",
    ),
    "gender": (
        "select[formcontrolname='passengerGender']",
        "div.Layer_7.col-sm-2.col-xs-6 > select",
    ),
}


def passenger_field(row: int, field: str) -> Target:
    """Locate ``field`` (name, age or gender) inside the zero-based passenger ``row``."""
    if row < 0:
        raise ValueError(f"Passenger row must be non-negative, got {row}.")
    try:
        semantic, positional = _PASSENGER_FIELDS[field]
    except KeyError:
        raise ValueError(f"Unknown passenger field {field!r}.") from None
    return Target(
        f"passenger_{row}_{field}",
        f"app-passenger >> nth={row} >> {semantic}",
        fallback=f"{_PASSENGER_ROW.format(position=row + 1)} > {positional}",
    )


# Contact and address
MOBILE_NUMBER = Target("mobile_number", 'input[formcontrolname="mobileNumber"]')
ADDRESS_LINE = Target("address_line", "#aaa1")
PIN_CODE = Target("pin_code", 'input[formcontrolname="pinCode"]')
POST_OFFICE = Target("post_office", "#address-postOffice")
AUTO_UPGRADATION = Target("auto_upgradation", 'label[for="autoUpgradation"]')
TRAVEL_INSURANCE = Target(
    "travel_insurance",
    "#travelInsuranceOptedYes-0 .ui-radiobutton-box",
    fallback="#travelInsuranceOptedYes-0 > div > div.ui-radiobutton-box.ui-widget.ui-state-default > span",
)
PAYMENT_MODE_RADIO = Target("payment_mode_radio", ".ui-radiobutton-icon.ui-clickable.pi.pi-circle-on")
CONTINUE_BUTTON = Target("continue_button", ".train_Search.btnDefault")

# Payment
BANK_OPTION = Target("bank_option", "div.col-pad.col-xs-12.bank-text")
PAY_AND_BOOK = Target("pay_and_book", ".btn.btn-primary.hidden-xs.ng-star-inserted")
CARD_NUMBER = Target("card_number", ".userCardNumber")
CARD_VALIDITY = Target("card_validity", "#validity")
CARD_CVV = Target("card_cvv", "#divCvv")
CARD_HOLDER = Target("card_holder", 'input[name="cardName"]')
CONFIRM_PURCHASE = Target("confirm_purchase", "#confirm-purchase")

# WhatsApp Web
WA_CHAT_LIST = 'div[data-testid="chat-list"]'
WA_SEARCH_BOX = 'div[data-testid="chat-list-search"]'
WA_COMPOSE_BOX = 'div[data-testid="conversation-compose-box-input"]'
WA_SEND_BUTTON = 'span[data-testid="send"]'


def whatsapp_contact(display_name: str) -> str:
    escaped = display_name.replace("\\", "\\\\").replace('"', '\\"')
    return f'span[title="{escaped}"]'
