from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Awaitable, Callable, List, Optional, Protocol, Type

from . import selectors
from .confirmation import extract_booking_ids
from .errors import (
    AuthenticationError,
    BookingAutomationError,
    UnknownError,
)
from .models import (
    BookingIds,
    ContactInfo,
    Credentials,
    JourneyRequest,
    PaymentInfo,
    TicketRecord,
)

TOTAL_STEPS = 11


class BookingState(Enum):
    IDLE = "Idle"
    SESSION_OPEN = "SessionOpen"
    NAVIGATED = "Navigated"
    SEARCH_SUBMITTED = "SearchSubmitted"
    TRAIN_SELECTED = "TrainSelected"
    AUTHENTICATED = "Authenticated"
    PASSENGERS_ENTERED = "PassengersEntered"
    CONTACT_ENTERED = "ContactEntered"
    PAYMENT_REACHED = "PaymentReached"
    PAYMENT_SUBMITTED = "PaymentSubmitted"
    ARTIFACTS_EMITTED = "ArtifactsEmitted"
    NOTIFICATIONS_SENT = "NotificationsSent"
    TERMINATED = "Terminated"


class Driver(Protocol):
    async def open(self) -> Any: ...
    async def goto(self, url: str, wait_until: str = ...) -> str: ...
    async def activate(self, target: Any, *, timeout: Optional[float] = ...) -> None: ...
    async def enter_text(self, target: Any, text: str, *, delay: float = ...) -> None: ...
    async def press(self, key: str) -> None: ...
    async def pause(self, seconds: float) -> None: ...
    async def content(self) -> str: ...
    async def new_context(self, *, storage_state: Any = ...) -> Any: ...
    async def screenshot(self, name: str) -> Any: ...
    async def close(self) -> None: ...


class ArtifactEmitter(Protocol):
    def emit(self, record: TicketRecord) -> Path: ...


class Notifier(Protocol):
    async def dispatch(self, page: Any, passenger_name: str, origin: str, destination: str) -> None: ...


@dataclass(slots=True)
class BookingOptions:
    typing_delay: float = 0.2
    login_gate: float = 10.0
    payment_gate: float = 15.0
    notifications_enabled: bool = False
    notification_interval: float = 3.0
    notification_storage_state: Optional[str] = None
    fallback_transaction_id: str = "0095562596"
    fallback_reservation_id: str = "6422380568"


@dataclass(slots=True)
class ItemFailure:
    phase: str
    passenger_name: str
    error: str


@dataclass(slots=True)
class RunState:
    state: BookingState = BookingState.IDLE
    reached: BookingState = BookingState.IDLE
    step_index: int = 0
    session_live: bool = False
    transaction_id: Optional[str] = None
    reservation_id: Optional[str] = None
    tickets: List[TicketRecord] = field(default_factory=list)
    artifacts: List[Path] = field(default_factory=list)
    notified: List[str] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)


@dataclass(slots=True)
class BookingResult:
    state: BookingState
    message: str
    tickets: List[TicketRecord]
    artifacts: List[Path]
    failures: List[ItemFailure]

    @property
    def partial_failure(self) -> bool:
        return bool(self.failures)


class BookingOrchestrator:
    """
    Walk the IRCTC booking form from train search to payment, then hand the
    purchased tickets to the PDF emitter and the notifier.

    Form steps are fail-fast: the first failing step aborts the run. Ticket
    generation and notifications continue past individual passenger failures.
    The driver is closed exactly once whatever happens.
    """

    def __init__(
        self,
        journey: JourneyRequest,
        *,
        credentials: Credentials,
        contact: ContactInfo,
        payment: PaymentInfo,
        driver: Driver,
        emitter: ArtifactEmitter,
        notifier: Optional[Notifier] = None,
        options: Optional[BookingOptions] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._journey = journey
        self._credentials = credentials
        self._contact = contact
        self._payment = payment
        self._driver = driver
        self._emitter = emitter
        self._notifier = notifier
        self._options = options or BookingOptions()
        self._logger = logger or logging.getLogger(__name__)

    async def run(self) -> BookingResult:
        state = RunState()
        self._logger.info("Starting IRCTC ticket booking automation")
        try:
            await self._advance(state, BookingState.SESSION_OPEN, "open_session", "Initializing browser", self._open_session)
            await self._advance(state, BookingState.NAVIGATED, "navigate", "Navigating to IRCTC website", self._navigate)
            await self._advance(state, BookingState.SEARCH_SUBMITTED, "search_trains", "Searching for trains", self._search_trains)
            await self._advance(state, BookingState.TRAIN_SELECTED, "select_train", "Selecting train", self._select_train)
            await self._advance(
                state,
                BookingState.AUTHENTICATED,
                "login",
                "Logging in to IRCTC",
                self._login,
                fallback=AuthenticationError,
            )
            await self._advance(
                state, BookingState.PASSENGERS_ENTERED, "fill_passengers", "Filling passenger details", self._fill_passengers
            )
            await self._advance(state, BookingState.CONTACT_ENTERED, "fill_contact", "Filling contact details", self._fill_contact)
            await self._advance(
                state, BookingState.PAYMENT_REACHED, "proceed_to_payment", "Proceeding to payment", self._proceed_to_payment
            )
            await self._advance(
                state, BookingState.PAYMENT_SUBMITTED, "fill_payment", "Filling payment details", self._fill_payment
            )
            await self._advance(
                state, BookingState.ARTIFACTS_EMITTED, "generate_tickets", "Generating PDF tickets", self._generate_tickets
            )
            await self._advance(
                state,
                BookingState.NOTIFICATIONS_SENT,
                "send_notifications",
                "Sending WhatsApp notifications",
                self._send_notifications,
            )
        except BookingAutomationError as exc:
            self._logger.error("Ticket booking process failed: %s", exc)
            if state.session_live:
                await self._driver.screenshot(f"failed_{exc.step}")
            raise
        finally:
            await self._teardown(state)

        message = (
            f"Booked {len(state.tickets)} ticket(s), generated {len(state.artifacts)} PDF(s), "
            f"sent {len(state.notified)} notification(s)"
        )
        if state.failures:
            self._logger.warning("%s; %d passenger item(s) failed", message, len(state.failures))
        else:
            self._logger.info("Ticket booking process completed successfully: %s", message)
        return BookingResult(
            state=state.reached,
            message=message,
            tickets=list(state.tickets),
            artifacts=list(state.artifacts),
            failures=list(state.failures),
        )

    async def _advance(
        self,
        state: RunState,
        target: BookingState,
        step: str,
        description: str,
        action: Callable[[RunState], Awaitable[None]],
        *,
        fallback: Type[BookingAutomationError] = UnknownError,
    ) -> None:
        state.step_index += 1
        self._logger.info("Step %d/%d: %s", state.step_index, TOTAL_STEPS, description)
        try:
            await action(state)
        except BookingAutomationError as exc:
            raise exc.tag(step=step, phase=target.value)
        except Exception as exc:
            raise fallback(
                f"{description} failed",
                step=step,
                phase=target.value,
                cause=exc,
            ) from exc
        state.state = state.reached = target
        self._logger.info("✅ %s done (%s)", description, target.value)

    async def _teardown(self, state: RunState) -> None:
        try:
            await self._driver.close()
        except Exception as exc:
            self._logger.warning("Error closing browser: %s", exc)
        state.session_live = False
        state.state = BookingState.TERMINATED
        self._logger.info("Browser session closed")

    async def _human_gate(self, name: str, seconds: float) -> None:
        """Give the operator a fixed window to solve a step the bot cannot (captcha)."""
        self._logger.info("Please complete the %s manually within %.0f seconds", name, seconds)
        await self._driver.pause(seconds)

    async def _type(self, target: selectors.Target, text: str) -> None:
        await self._driver.enter_text(target, text, delay=self._options.typing_delay)

    async def _open_session(self, state: RunState) -> None:
        await self._driver.open()
        state.session_live = True

    async def _navigate(self, state: RunState) -> None:
        await self._driver.goto(selectors.TRAIN_SEARCH_URL, "networkidle")
        await self._driver.activate(selectors.ALERT_OK)

    async def _search_trains(self, state: RunState) -> None:
        journey = self._journey
        await self._type(selectors.ORIGIN_INPUT, journey.origin)
        await self._type(selectors.DESTINATION_INPUT, journey.destination)
        await self._driver.activate(selectors.JOURNEY_DATE_INPUT)
        await self._type(selectors.JOURNEY_DATE_INPUT, journey.date)
        await self._driver.activate(selectors.QUOTA_DROPDOWN)
        await self._driver.activate(selectors.AVAILABLE_BERTH)
        await self._driver.activate(selectors.SEARCH_SUBMIT)

    async def _select_train(self, state: RunState) -> None:
        # First listed train only.
        await self._driver.activate(selectors.TRAIN_CLASS)
        await self._driver.activate(selectors.BOOK_NOW)
        await self._driver.activate(selectors.CONFIRM_DIALOG_ACCEPT)

    async def _login(self, state: RunState) -> None:
        await self._type(selectors.LOGIN_USER_ID, self._credentials.user_id)
        await self._type(selectors.LOGIN_PASSWORD, self._credentials.password)
        await self._human_gate("login captcha", self._options.login_gate)
        await self._driver.activate(selectors.LOGIN_SUBMIT)

    async def _fill_passengers(self, state: RunState) -> None:
        passengers = self._journey.passengers
        # The form renders one row by default.
        for _ in range(len(passengers) - 1):
            await self._driver.activate(selectors.ADD_PASSENGER)

        for row, passenger in enumerate(passengers):
            self._logger.info("Passenger %d/%d: %s", row + 1, len(passengers), passenger.name)
            await self._type(selectors.passenger_field(row, "name"), passenger.name)
            await self._type(selectors.passenger_field(row, "age"), passenger.age)
            await self._type(selectors.passenger_field(row, "gender"), passenger.gender.value)
            await self._driver.press("Enter")

    async def _fill_contact(self, state: RunState) -> None:
        contact = self._contact
        await self._type(selectors.MOBILE_NUMBER, contact.phone)
        await self._type(selectors.ADDRESS_LINE, contact.address)
        await self._type(selectors.PIN_CODE, contact.pin_code)
        await self._type(selectors.POST_OFFICE, contact.post_office)
        await self._driver.press("Enter")
        await self._driver.activate(selectors.AUTO_UPGRADATION)
        await self._driver.activate(selectors.TRAVEL_INSURANCE)
        await self._driver.activate(selectors.PAYMENT_MODE_RADIO)
        await self._driver.activate(selectors.CONTINUE_BUTTON)

    async def _proceed_to_payment(self, state: RunState) -> None:
        await self._human_gate("booking captcha", self._options.payment_gate)
        await self._driver.activate(selectors.CONTINUE_BUTTON)
        await self._driver.activate(selectors.BANK_OPTION)
        await self._driver.activate(selectors.PAY_AND_BOOK)

    async def _fill_payment(self, state: RunState) -> None:
        payment = self._payment
        await self._type(selectors.CARD_NUMBER, payment.card_number)
        await self._type(selectors.CARD_VALIDITY, payment.expiry)
        await self._type(selectors.CARD_CVV, payment.cvv)
        await self._type(selectors.CARD_HOLDER, payment.holder_name)
        await self._driver.activate(selectors.CONFIRM_PURCHASE)

        ids = extract_booking_ids(await self._driver.content())
        state.transaction_id, state.reservation_id = self._resolve_ids(ids)

    def _resolve_ids(self, ids: BookingIds) -> tuple[str, str]:
        if ids.complete:
            self._logger.info("Transaction %s, PNR %s", ids.transaction_id, ids.reservation_id)
            return ids.transaction_id, ids.reservation_id  # type: ignore[return-value]
        self._logger.warning(
            "Confirmation page did not expose transaction id / PNR; using placeholder ids"
        )
        return (
            ids.transaction_id or self._options.fallback_transaction_id,
            ids.reservation_id or self._options.fallback_reservation_id,
        )

    async def _generate_tickets(self, state: RunState) -> None:
        phase = BookingState.ARTIFACTS_EMITTED.value
        state.tickets = [
            TicketRecord.for_passenger(
                passenger,
                self._journey,
                transaction_id=state.transaction_id or self._options.fallback_transaction_id,
                reservation_id=state.reservation_id or self._options.fallback_reservation_id,
            )
            for passenger in self._journey.passengers
        ]
        for record in state.tickets:
            try:
                path = self._emitter.emit(record)
            except Exception as exc:
                self._logger.error("Failed to generate ticket for %s: %s", record.passenger_name, exc)
                state.failures.append(ItemFailure(phase, record.passenger_name, str(exc)))
                continue
            state.artifacts.append(path)
        self._logger.info("Generated %d/%d PDF tickets", len(state.artifacts), len(state.tickets))

    async def _send_notifications(self, state: RunState) -> None:
        if not self._options.notifications_enabled or self._notifier is None:
            self._logger.info("WhatsApp notifications are disabled")
            return

        phase = BookingState.NOTIFICATIONS_SENT.value
        passengers = self._journey.passengers
        try:
            page = await self._driver.new_context(storage_state=self._options.notification_storage_state)
        except Exception as exc:
            self._logger.error("Could not open a browser context for WhatsApp Web: %s", exc)
            state.failures.extend(ItemFailure(phase, passenger.name, str(exc)) for passenger in passengers)
            return

        self._logger.info("Sending WhatsApp notifications to %d passengers", len(passengers))
        for index, passenger in enumerate(passengers):
            if index:
                await self._driver.pause(self._options.notification_interval)
            try:
                await self._notifier.dispatch(
                    page,
                    passenger.name,
                    self._journey.origin,
                    self._journey.destination,
                )
            except Exception as exc:
                self._logger.error("Failed to send notification to %s: %s", passenger.name, exc)
                state.failures.append(ItemFailure(phase, passenger.name, str(exc)))
                continue
            state.notified.append(passenger.name)
