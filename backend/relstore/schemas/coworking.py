"""Coworking Schemas — members, desks, bookings, payments and amenities.

Invariants:
    - Choice fields are Literal types: pydantic rejects anything else
    - Prices and amounts are non-negative; desk capacity is at least 1
    - Booking.end_time is strictly after start_time
    - Rollup fields (payment_status, payment_history) carry defaults so callers never supply them

Design Decisions:
    - Literal over str Enum: records stay plain strings on the wire (ADR: same as UserInput.type)
    - int | float amounts: whole numbers keep their int form through save/load
    - Booking times stay text (DateTimeText); starts_at / ends_at parse them on demand
"""

import datetime as dt
from typing import Annotated, Literal

from pydantic import (
    AfterValidator, BeforeValidator, Field, NonNegativeFloat, NonNegativeInt,
    field_validator, ValidationInfo,
)

from relstore.schemas.base import Entity

Amount = NonNegativeInt | NonNegativeFloat


def _datetime_text(value: object) -> object:
    if isinstance(value, dt.datetime):
        return value.isoformat()
    return value


def _check_iso_datetime(value: str) -> str:
    try:
        dt.datetime.fromisoformat(value)
    except ValueError:
        raise ValueError(f"'{value}' is not an ISO 8601 date-time") from None
    return value


# Validated as ISO 8601, stored as given: "2024-04-15T09:00" is not padded to seconds
DateTimeText = Annotated[str, BeforeValidator(_datetime_text), AfterValidator(_check_iso_datetime)]


class Member(Entity):
    __collection__ = "members"

    name: str = Field(min_length=1, examples=["John Doe"])
    email: str = Field(examples=["john@example.com"])
    membership_type: Literal["basic", "premium", "corporate"] = Field(
        "basic", examples=["basic"],
    )
    date_joined: dt.date = Field(examples=["2024-01-15"])
    status: Literal["active", "inactive", "pending"] = Field("active", examples=["active"])
    payment_status: Literal["paid", "unpaid", "overdue"] = "paid"
    payment_history: list[dict] = []
    notes: str | None = Field(None, examples=["Prefers window seats"])


class Desk(Entity):
    __collection__ = "desks"

    name: str = Field(min_length=1, examples=["Desk A1"])
    type: Literal["hot-desk", "dedicated", "private-office"] = Field(
        "hot-desk", examples=["hot-desk"],
    )
    capacity: int = Field(1, ge=1, examples=[1])
    price_per_hour: Amount = Field(0, examples=[5])
    price_per_day: Amount = Field(0, examples=[30])
    price_per_month: Amount = Field(0, examples=[500])
    status: Literal["available", "occupied", "maintenance"] = Field(
        "available", examples=["available"],
    )
    amenities: list[str] = Field([], examples=[["power-outlet", "monitor"]])


class Booking(Entity):
    __collection__ = "bookings"

    member_id: str = Field(min_length=1, examples=["1"])
    desk_id: str = Field(min_length=1, examples=["1"])
    start_time: DateTimeText = Field(examples=["2024-04-15T09:00:00"])
    end_time: DateTimeText = Field(examples=["2024-04-15T17:00:00"])
    status: Literal["confirmed", "cancelled", "completed", "pending"] = Field(
        "confirmed", examples=["confirmed"],
    )
    total_price: Amount = 0
    notes: str | None = Field(None, examples=["Needs a second monitor"])

    @field_validator("end_time")
    @classmethod
    def end_after_start(cls, v: str, info: ValidationInfo) -> str:
        if info.data.get("start_time") is None:
            return v
        start = dt.datetime.fromisoformat(info.data["start_time"])
        end = dt.datetime.fromisoformat(v)
        if (start.tzinfo is None) != (end.tzinfo is None):
            raise ValueError("startTime and endTime must both carry a timezone or neither")
        if end <= start:
            raise ValueError("endTime must be after startTime")
        return v

    @property
    def starts_at(self) -> dt.datetime:
        return dt.datetime.fromisoformat(self.start_time)

    @property
    def ends_at(self) -> dt.datetime:
        return dt.datetime.fromisoformat(self.end_time)

    @property
    def hours(self) -> float:
        return (self.ends_at - self.starts_at).total_seconds() / 3600


class Payment(Entity):
    __collection__ = "payments"

    member_id: str = Field(min_length=1, examples=["1"])
    amount: Amount = Field(examples=[500])
    date: dt.date = Field(examples=["2024-01-15"])
    type: Literal["membership", "booking", "additional"] = Field(
        "membership", examples=["membership"],
    )
    status: Literal["completed", "pending", "failed"] = Field(
        "pending", examples=["completed"],
    )
    reference: str | None = Field(None, examples=["INV-2024-001"])
    booking_id: str | None = None


class Amenity(Entity):
    __collection__ = "amenities"

    name: str = Field(min_length=1, examples=["Ergonomic Chair"])
    type: Literal["furniture", "technology", "food", "service"] = Field(
        "furniture", examples=["furniture"],
    )
    price_per_use: Amount = Field(0, examples=[5])
    available: bool = Field(True, examples=[True])
