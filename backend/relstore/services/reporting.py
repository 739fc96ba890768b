"""Reporting — dashboard figures and downloadable reports built from the aggregator.

Invariants:
    - Read-only: reports never mutate the store
    - Every figure is derived from current store contents at call time (nothing cached)
    - Report documents are JSON-safe dicts with snake_case keys and a report_date
    - Names of missing related entities render as "Unknown ..." rather than failing

Design Decisions:
    - "today" defaults to the store clock so tests pin it through the store
"""

from datetime import date

from relstore.core.aggregate import (
    bucket_series, category_distribution, month_range, running_total, where,
)
from relstore.core.domain_types import Period
from relstore.services.entity_store import EntityStore

MAINTENANCE_STATUSES = ["open", "in-progress", "completed", "cancelled"]
EXPENSE_CATEGORIES = ["maintenance", "utilities", "taxes", "insurance", "mortgage", "other"]
UNIT_STATUSES = ["occupied", "vacant", "maintenance"]


def _today(store: EntityStore, today: date | None) -> date:
    return today or store.now().date()


def _name_of(store: EntityStore, collection: str, entity_id: str | None, fallback: str) -> str:
    if not entity_id:
        return fallback
    record = store.state.find(collection, entity_id)
    return record.name if record is not None else fallback


def _count(records, **criteria) -> int:
    match = where(**criteria)
    return sum(1 for r in records if match(r))


# --- Coworking ----------------------------------------------------------------

def coworking_dashboard(store: EntityStore, today: date | None = None) -> dict:
    """Member, desk and revenue figures for the coworking overview."""
    today = _today(store, today)
    members = store.list("members")
    desks = store.list("desks")
    payments = store.list("payments")
    completed = where(status="completed")

    booked_desks = [
        desk for desk in (store.state.find("desks", b.desk_id) for b in store.list("bookings"))
        if desk is not None
    ]
    current_month = f"{today.year:04d}-{today.month:02d}"
    this_month = bucket_series(
        payments, "date", "amount", Period.MONTH, where=completed, periods=[current_month],
    )
    return {
        "total_members": len(members),
        "active_members": _count(members, status="active"),
        "available_desks": _count(desks, status="available"),
        "total_desks": len(desks),
        "monthly_revenue": this_month[0]["value"],
        "bookings_by_desk_type": category_distribution(booked_desks, "type"),
        "revenue_by_month": bucket_series(
            payments, "date", "amount", Period.MONTH, where=completed,
        ),
    }


# --- Real estate --------------------------------------------------------------

def monthly_rent(store: EntityStore, year: int) -> list[dict]:
    """Paid and pending rent for every month of a year."""
    months = month_range(year)
    payments = store.list("payments")
    paid = bucket_series(
        payments, "date", "amount", Period.MONTH, where(type="rent", status="paid"), months,
    )
    pending = bucket_series(
        payments, "date", "amount", Period.MONTH, where(type="rent", status="pending"), months,
    )
    return [
        {"month": p["period"], "paid": p["value"], "pending": q["value"]}
        for p, q in zip(paid, pending)
    ]


def monthly_expenses(store: EntityStore, year: int) -> list[dict]:
    series = bucket_series(
        store.list("expenses"), "date", "amount", Period.MONTH, periods=month_range(year),
    )
    return [{"month": s["period"], "amount": s["value"]} for s in series]


def _income_figures(store: EntityStore) -> dict:
    payments = store.list("payments")
    rent_collected = running_total(payments, "amount", where(status="paid", type="rent"))
    total_expenses = running_total(store.list("expenses"), "amount")
    return {
        "rent_collected": rent_collected,
        "pending_rent": running_total(
            payments, "amount", where(status="pending", type="rent"),
        ),
        "total_expenses": total_expenses,
        "net_income": rent_collected - total_expenses,
    }


def vacancy_rate(store: EntityStore) -> float:
    """Percentage of units that are vacant (0 with no units)."""
    units = store.list("units")
    if not units:
        return 0
    return _count(units, status="vacant") * 100 / len(units)


def real_estate_dashboard(store: EntityStore, year: int | None = None) -> dict:
    """Income, occupancy and maintenance figures for the real-estate overview."""
    year = year or store.now().year
    return {
        **_income_figures(store),
        "vacancy_rate": vacancy_rate(store),
        "maintenance_by_status": category_distribution(
            store.list("maintenanceRequests"), "status", categories=MAINTENANCE_STATUSES,
        ),
        "expenses_by_category": category_distribution(
            store.list("expenses"), "category", "amount", categories=EXPENSE_CATEGORIES,
        ),
        "unit_status": category_distribution(
            store.list("units"), "status", categories=UNIT_STATUSES,
        ),
        "monthly_rent": monthly_rent(store, year),
        "monthly_expenses": monthly_expenses(store, year),
    }


def income_report(store: EntityStore, today: date | None = None) -> dict:
    today = _today(store, today)
    figures = _income_figures(store)
    return {
        "report_date": today.isoformat(),
        "total_income": figures["rent_collected"],
        "pending_income": figures["pending_rent"],
        "total_expenses": figures["total_expenses"],
        "net_income": figures["net_income"],
        "rent_collection_by_month": monthly_rent(store, today.year),
        "expenses_by_category": category_distribution(
            store.list("expenses"), "category", "amount", categories=EXPENSE_CATEGORIES,
        ),
    }


def occupancy_report(store: EntityStore, today: date | None = None) -> dict:
    today = _today(store, today)
    units = store.list("units")
    return {
        "report_date": today.isoformat(),
        "total_units": len(units),
        "occupied_units": _count(units, status="occupied"),
        "vacant_units": _count(units, status="vacant"),
        "maintenance_units": _count(units, status="maintenance"),
        "vacancy_rate": vacancy_rate(store),
        "unit_details": [
            {
                "property": _name_of(store, "properties", u.property_id, "Unknown Property"),
                "unit_number": u.unit_number,
                "status": u.status,
                "tenant": _name_of(store, "tenants", u.tenant_id, "Vacant"),
                "rent": u.rent,
            }
            for u in units
        ],
    }


def maintenance_report(store: EntityStore, today: date | None = None) -> dict:
    today = _today(store, today)
    requests = store.list("maintenanceRequests")
    details = []
    for req in requests:
        unit = store.state.find("units", req.unit_id)
        details.append({
            "title": req.title,
            "property": _name_of(store, "properties", req.property_id, "Unknown Property"),
            "unit": unit.unit_number if unit is not None else "Unknown Unit",
            "tenant": _name_of(store, "tenants", req.tenant_id, "N/A"),
            "priority": req.priority,
            "status": req.status,
            "date_submitted": req.date_submitted.isoformat() if req.date_submitted else "N/A",
            "date_completed": req.date_completed.isoformat() if req.date_completed else "N/A",
            "cost": req.cost if req.cost is not None else "N/A",
        })
    return {
        "report_date": today.isoformat(),
        "total_requests": len(requests),
        "open_requests": _count(requests, status="open"),
        "in_progress_requests": _count(requests, status="in-progress"),
        "completed_requests": _count(requests, status="completed"),
        "cancelled_requests": _count(requests, status="cancelled"),
        "total_maintenance_costs": running_total(requests, "cost"),
        "request_details": details,
    }
