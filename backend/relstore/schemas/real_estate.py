"""Real Estate Schemas — tenants, properties, units, payments, maintenance requests, expenses.

Invariants:
    - Tenant.credit_score within 300-850; money fields non-negative
    - Optional references (Tenant.property, Tenant.unit, Unit.tenant_id,
      MaintenanceRequest.tenant_id) may be None or "" meaning "no reference"
    - Tenant.references is a nested list of TenantReference records, not a relation

Design Decisions:
    - TenantReference extends Record, not Entity: it has no collection of its own
"""

import datetime as dt
from typing import Literal

from pydantic import Field, NonNegativeFloat, NonNegativeInt

from relstore.schemas.base import Entity, Record

Amount = NonNegativeInt | NonNegativeFloat


class TenantReference(Record):
    """Personal or landlord reference attached to a tenant application."""
    id: str
    name: str
    relationship: str = ""
    phone: str = ""
    email: str = ""


class Tenant(Entity):
    __collection__ = "tenants"

    name: str = Field(min_length=1, examples=["Jane Applicant"])
    email: str = Field(examples=["jane@example.com"])
    phone: str = Field("", examples=["555-123-4567"])
    credit_score: int = Field(ge=300, le=850, examples=[700])
    income: Amount = Field(examples=[60000])
    status: Literal["pending", "approved", "rejected"] = Field("pending", examples=["pending"])
    lease_start: dt.date | None = Field(None, examples=["2024-01-01"])
    lease_end: dt.date | None = Field(None, examples=["2025-01-01"])
    property: str | None = Field(None, examples=["1"])
    unit: str | None = Field(None, examples=["1-2"])
    rent: Amount | None = Field(None, examples=[1500])
    security_deposit: Amount | None = Field(None, examples=[1500])
    background_check_complete: bool = Field(False, examples=[False])
    references: list[TenantReference] = Field([], examples=[[{
        "id": "ref-1", "name": "[Reference Name]", "relationship": "[Relationship]",
        "phone": "[Phone]", "email": "[Email]",
    }]])
    application_date: dt.date | None = None
    notes: str = Field("", examples=[""])
    payment_status: Literal["paid", "unpaid", "overdue"] = "paid"


class Property(Entity):
    __collection__ = "properties"

    name: str = Field(min_length=1, examples=["Sunshine Apartments"])
    address: str = Field(examples=["123 Main St, Anytown, USA"])
    units: int = Field(0, ge=0, examples=[4])
    type: Literal["apartment", "house", "condo", "commercial"] = Field(
        "apartment", examples=["apartment"],
    )
    purchase_date: dt.date = Field(examples=["2020-06-15"])
    purchase_price: Amount = Field(examples=[450000])
    current_value: Amount = Field(examples=[520000])
    image: str | None = Field(None, examples=["https://placehold.co/600x400"])


class Unit(Entity):
    __collection__ = "units"

    property_id: str = Field(min_length=1, examples=["1"])
    unit_number: str = Field(min_length=1, examples=["101"])
    bedrooms: int = Field(0, ge=0, examples=[2])
    bathrooms: Amount = Field(0, examples=[1])
    sqft: Amount = Field(0, examples=[850])
    rent: Amount = Field(examples=[1500])
    status: Literal["vacant", "occupied", "maintenance"] = Field("vacant", examples=["vacant"])
    tenant_id: str | None = None


class RentPayment(Entity):
    __collection__ = "payments"

    tenant_id: str = Field(min_length=1, examples=["1"])
    property_id: str = Field(min_length=1, examples=["1"])
    unit_id: str = Field(min_length=1, examples=["1-1"])
    amount: Amount = Field(examples=[1500])
    date: dt.date = Field(examples=["2024-05-01"])
    type: Literal["rent", "deposit", "fee", "other"] = Field("rent", examples=["rent"])
    status: Literal["pending", "paid", "late", "partial"] = Field("pending", examples=["pending"])
    notes: str = Field("", examples=["May rent payment"])


class MaintenanceRequest(Entity):
    __collection__ = "maintenanceRequests"

    tenant_id: str | None = Field(None, examples=["1"])
    property_id: str = Field(min_length=1, examples=["1"])
    unit_id: str = Field(min_length=1, examples=["1-1"])
    title: str = Field(min_length=1, examples=["Leaking faucet"])
    description: str = Field("", examples=["The kitchen sink faucet is leaking."])
    priority: Literal["low", "medium", "high", "emergency"] = Field(
        "medium", examples=["medium"],
    )
    status: Literal["open", "in-progress", "completed", "cancelled"] = Field(
        "open", examples=["open"],
    )
    date_submitted: dt.date | None = None
    date_completed: dt.date | None = None
    cost: Amount | None = Field(None, examples=[85])
    assigned_to: str | None = Field(None, examples=["Mike the Plumber"])
    notes: str = Field("", examples=[""])
    images: list[str] = Field([], examples=[[]])


class Expense(Entity):
    __collection__ = "expenses"

    property_id: str = Field(min_length=1, examples=["1"])
    category: Literal[
        "maintenance", "utilities", "taxes", "insurance", "mortgage", "other",
    ] = Field(examples=["maintenance"])
    amount: Amount = Field(examples=[85])
    date: dt.date = Field(examples=["2024-05-12"])
    description: str = Field("", examples=["Faucet repair in unit 101"])
    receipt: str | None = Field(None, examples=["receipt-0001.pdf"])
