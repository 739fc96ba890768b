"""Coworking Domain — relation table, pricing, payment rollups and demo data.

Invariants:
    - Deleting a member or desk removes its bookings; deleting a member or booking
      removes the payments pointing at it
    - Booking.totalPrice is fixed when the booking is written; later desk price
      changes do not reprice it
    - Member.paymentStatus is "unpaid" while any of its payments is pending or failed
    - Member.paymentHistory mirrors the member's payments in collection order
    - Creating a booking issues one pending "booking" payment referencing it

Design Decisions:
    - Pricing tiers as a pure function of (desk, hours): testable without a store
    - The booking invoice is a create hook, so the cascade on bookingId cleans it up
      (ADR: replaces matching on the "BOOK-<id>" reference text)
"""

import math

from relstore.core.domain_types import CascadePolicy
from relstore.core.relations import CreateHook, DeriveContext, DerivedField, DomainSchema, Relation
from relstore.core.store_state import StoreState
from relstore.schemas.coworking import Amenity, Booking, Desk, Member, Payment

HOURLY_LIMIT_HOURS = 8
DAILY_LIMIT_HOURS = 24
UNSETTLED_PAYMENT_STATUSES = ("pending", "failed")


# --- Pricing ------------------------------------------------------------------

def booking_price(desk: Desk, hours: float) -> int | float:
    """Hourly up to 8h, one day rate up to 24h, then the day rate per started day."""
    if hours <= HOURLY_LIMIT_HOURS:
        price = desk.price_per_hour * hours
    elif hours <= DAILY_LIMIT_HOURS:
        price = desk.price_per_day
    else:
        price = math.ceil(hours / DAILY_LIMIT_HOURS) * desk.price_per_day
    if isinstance(price, float):
        price = round(price, 2)
        if price.is_integer():
            return int(price)
    return price


def _total_price(booking: Booking, state: StoreState, ctx: DeriveContext) -> int | float:
    desk = state.find("desks", booking.desk_id)
    if desk is None:
        return booking.total_price
    return booking_price(desk, booking.hours)


# --- Rollups ------------------------------------------------------------------

def _member_payments(member: Member, state: StoreState) -> list[Payment]:
    return [p for p in state.collection("payments") if p.member_id == member.id]


def _payment_history(member: Member, state: StoreState, ctx: DeriveContext) -> list[dict]:
    return [p.to_record() for p in _member_payments(member, state)]


def _member_payment_status(member: Member, state: StoreState, ctx: DeriveContext) -> str:
    if any(p.status in UNSETTLED_PAYMENT_STATUSES for p in _member_payments(member, state)):
        return "unpaid"
    return "paid"


# --- Hooks --------------------------------------------------------------------

def _booking_invoice(booking: Booking, state: StoreState, ctx: DeriveContext) -> list[tuple[str, dict]]:
    return [("payments", {
        "memberId": booking.member_id,
        "amount": booking.total_price,
        "date": ctx.today.isoformat(),
        "type": "booking",
        "status": "pending",
        "reference": f"BOOK-{booking.id}",
        "bookingId": booking.id,
    })]


# --- Demo data ----------------------------------------------------------------

SEED: dict[str, list[dict]] = {
    "members": [
        {"id": "1", "name": "John Doe", "email": "john@example.com",
         "membershipType": "premium", "dateJoined": "2023-01-15", "status": "active"},
        {"id": "2", "name": "Jane Smith", "email": "jane@example.com",
         "membershipType": "basic", "dateJoined": "2023-02-20", "status": "active"},
        {"id": "3", "name": "Alex Johnson", "email": "alex@example.com",
         "membershipType": "corporate", "dateJoined": "2023-03-10", "status": "inactive"},
    ],
    "desks": [
        {"id": "1", "name": "Desk A1", "type": "hot-desk", "capacity": 1,
         "pricePerHour": 5, "pricePerDay": 30, "pricePerMonth": 500,
         "status": "available", "amenities": ["power-outlet", "monitor"]},
        {"id": "2", "name": "Office B1", "type": "private-office", "capacity": 4,
         "pricePerHour": 20, "pricePerDay": 120, "pricePerMonth": 2000,
         "status": "occupied",
         "amenities": ["power-outlet", "monitor", "whiteboard", "projector"]},
        {"id": "3", "name": "Desk C2", "type": "dedicated", "capacity": 1,
         "pricePerHour": 8, "pricePerDay": 50, "pricePerMonth": 800,
         "status": "available", "amenities": ["power-outlet", "ergonomic-chair"]},
    ],
    "bookings": [
        {"id": "1", "memberId": "1", "deskId": "1", "startTime": "2023-04-15T09:00:00",
         "endTime": "2023-04-15T17:00:00", "status": "confirmed", "totalPrice": 30},
        {"id": "2", "memberId": "2", "deskId": "3", "startTime": "2023-04-16T10:00:00",
         "endTime": "2023-04-16T16:00:00", "status": "confirmed", "totalPrice": 50},
        {"id": "3", "memberId": "3", "deskId": "2", "startTime": "2023-04-20T09:00:00",
         "endTime": "2023-04-20T18:00:00", "status": "pending", "totalPrice": 120},
    ],
    "payments": [
        {"id": "1", "memberId": "1", "amount": 500, "date": "2023-01-15",
         "type": "membership", "status": "completed", "reference": "INV-2023-001"},
        {"id": "2", "memberId": "2", "amount": 300, "date": "2023-02-20",
         "type": "membership", "status": "completed", "reference": "INV-2023-002"},
        {"id": "3", "memberId": "1", "amount": 50, "date": "2023-02-01",
         "type": "booking", "status": "completed", "reference": "BOOK-2023-001"},
    ],
    "amenities": [
        {"id": "1", "name": "Ergonomic Chair", "type": "furniture", "pricePerUse": 5,
         "available": True},
        {"id": "2", "name": "External Monitor", "type": "technology", "pricePerUse": 10,
         "available": True},
        {"id": "3", "name": "Coffee Service", "type": "food", "pricePerUse": 3,
         "available": True},
        {"id": "4", "name": "Meeting Room Facilitation", "type": "service",
         "pricePerUse": 20, "available": True},
    ],
}


SCHEMA = DomainSchema(
    name="coworking",
    models={
        "members": Member,
        "desks": Desk,
        "bookings": Booking,
        "payments": Payment,
        "amenities": Amenity,
    },
    relations=(
        Relation("bookings", "memberId", "members", CascadePolicy.CASCADE),
        Relation("bookings", "deskId", "desks", CascadePolicy.CASCADE),
        Relation("payments", "memberId", "members", CascadePolicy.CASCADE),
        Relation("payments", "bookingId", "bookings", CascadePolicy.CASCADE),
    ),
    derived=(
        DerivedField("bookings", "totalPrice", _total_price),
        DerivedField("members", "paymentHistory", _payment_history, frozenset({"payments"})),
        DerivedField("members", "paymentStatus", _member_payment_status, frozenset({"payments"})),
    ),
    hooks=(CreateHook("bookings", _booking_invoice),),
    seed=SEED,
)
