from __future__ import annotations

"""
Infrastructure helpers for browser automation used to drive the IRCTC
booking flow.

Modules exported here are safe to import from application code.
"""

from .browser import HeadlessBrowser
from .errors import (
    ArtifactError,
    AuthenticationError,
    BookingAutomationError,
    InteractionError,
    NavigationError,
    NotificationError,
    SessionInitError,
    UnknownError,
)
from .models import (
    ContactInfo,
    Credentials,
    Gender,
    JourneyRequest,
    Passenger,
    PaymentInfo,
    TicketRecord,
)
from .tasks import (
    BookingOptions,
    BookingOrchestrator,
    BookingResult,
    BookingState,
    RunState,
)

__all__ = [
    "HeadlessBrowser",
    "BookingOrchestrator",
    "BookingOptions",
    "BookingResult",
    "BookingState",
    "RunState",
    "ContactInfo",
    "Credentials",
    "Gender",
    "JourneyRequest",
    "Passenger",
    "PaymentInfo",
    "TicketRecord",
    "BookingAutomationError",
    "SessionInitError",
    "NavigationError",
    "InteractionError",
    "AuthenticationError",
    "ArtifactError",
    "NotificationError",
    "UnknownError",
]
