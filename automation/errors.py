from __future__ import annotations

from typing import Optional


class BookingAutomationError(RuntimeError):
    """Raised when the automated booking sequence cannot be completed."""

    def __init__(
        self,
        message: str,
        *,
        step: Optional[str] = None,
        phase: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.step = step
        self.phase = phase
        self.cause = cause

    def tag(self, *, step: str, phase: str) -> "BookingAutomationError":
        """Attach the orchestrator step unless an inner step already did."""
        if self.step is None:
            self.step = step
        if self.phase is None:
            self.phase = phase
        return self

    def __str__(self) -> str:
        parts = [self.message]
        if self.step or self.phase:
            parts.append(f"[step={self.step} phase={self.phase}]")
        if self.cause is not None:
            parts.append(f"caused by {type(self.cause).__name__}: {self.cause}")
        return " ".join(parts)


class SessionInitError(BookingAutomationError):
    """The browser engine could not be started."""


class NavigationError(BookingAutomationError):
    def __init__(
        self,
        message: str,
        *,
        address: str,
        criterion: str,
        **kwargs,
    ) -> None:
        super().__init__(message, **kwargs)
        self.address = address
        self.criterion = criterion


class InteractionError(BookingAutomationError):
    """Element not found, not visible or not actionable within the timeout."""

    def __init__(self, message: str, *, locator: str, **kwargs) -> None:
        super().__init__(message, **kwargs)
        self.locator = locator


class AuthenticationError(BookingAutomationError):
    pass


class ArtifactError(BookingAutomationError):
    pass


class NotificationError(BookingAutomationError):
    pass


class UnknownError(BookingAutomationError):
    pass
