from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Gender(str, Enum):
    MALE = "M"
    FEMALE = "F"


@dataclass(frozen=True, slots=True)
class Passenger:
    name: str
    age: str
    gender: Gender

    @classmethod
    def parse(cls, name: str, age: str, gender: str) -> "Passenger":
        try:
            code = Gender(gender.strip().upper())
        except ValueError as exc:
            raise ValueError(f"Unsupported gender code {gender!r} for {name!r}, expected M or F.") from exc
        return cls(name=name.strip(), age=age.strip(), gender=code)


@dataclass(frozen=True, slots=True)
class JourneyRequest:
    """Stations, travel date and the ordered passenger list of one purchase."""

    origin: str
    destination: str
    date: str
    passengers: Tuple[Passenger, ...]

    def __post_init__(self) -> None:
        ordered = tuple(self.passengers)
        if not ordered:
            raise ValueError("A journey needs at least one passenger.")
        object.__setattr__(self, "passengers", ordered)


@dataclass(frozen=True, slots=True)
class Credentials:
    user_id: str
    password: str

    def __repr__(self) -> str:
        return f"Credentials(user_id={self.user_id!r}, password='***')"


@dataclass(frozen=True, slots=True)
class ContactInfo:
    phone: str
    address: str
    pin_code: str
    post_office: str = "Bhali"


@dataclass(frozen=True, slots=True)
class PaymentInfo:
    card_number: str
    expiry: str
    cvv: str
    holder_name: str

    def __repr__(self) -> str:
        return f"PaymentInfo(card_number='****{self.card_number[-4:]}', holder_name={self.holder_name!r})"


@dataclass(frozen=True, slots=True)
class TicketRecord:
    passenger_name: str
    age: str
    gender: str
    origin: str
    destination: str
    transaction_id: str
    reservation_id: str

    @classmethod
    def for_passenger(
        cls,
        passenger: Passenger,
        journey: JourneyRequest,
        *,
        transaction_id: str,
        reservation_id: str,
    ) -> "TicketRecord":
        return cls(
            passenger_name=passenger.name,
            age=passenger.age,
            gender=passenger.gender.value,
            origin=journey.origin,
            destination=journey.destination,
            transaction_id=transaction_id,
            reservation_id=reservation_id,
        )


@dataclass(frozen=True, slots=True)
class BookingIds:
    transaction_id: Optional[str] = None
    reservation_id: Optional[str] = None

    @property
    def complete(self) -> bool:
        return bool(self.transaction_id and self.reservation_id)
