"""Real Estate Domain — relation table, tenant rollups, maintenance stamps and demo data.

Invariants:
    - Deleting a property removes its units, payments, maintenance requests and expenses
    - Deleting a unit removes its payments and maintenance requests
    - Deleting a tenant removes its payments, clears Unit.tenantId (unit becomes vacant)
      and clears MaintenanceRequest.tenantId
    - Tenant.paymentStatus: "overdue" if any payment is late, else "unpaid" if any is
      pending or partial, else "paid"
    - A maintenance request stored as completed always carries dateCompleted
    - New unit ids are "<propertyId>-<stamp>"

Design Decisions:
    - Tenant.property / Tenant.unit are nullified, not cascaded: losing a property
      must not delete the tenant's application history
"""

from relstore.core.domain_types import CascadePolicy
from relstore.core.relations import DeriveContext, DerivedField, DomainSchema, Relation
from relstore.core.store_state import StoreState
from relstore.schemas.real_estate import (
    Expense, MaintenanceRequest, Property, RentPayment, Tenant, Unit,
)


# --- Write-time fields ----------------------------------------------------------

def _application_date(tenant: Tenant, state: StoreState, ctx: DeriveContext):
    return tenant.application_date or ctx.today


def _date_submitted(request: MaintenanceRequest, state: StoreState, ctx: DeriveContext):
    return request.date_submitted or ctx.today


def _date_completed(request: MaintenanceRequest, state: StoreState, ctx: DeriveContext):
    if request.status == "completed" and request.date_completed is None:
        return ctx.today
    return request.date_completed


# --- Ids -----------------------------------------------------------------------

def _unit_id(fields: dict, stamp: str) -> str:
    return f"{fields.get('propertyId')}-{stamp}"


# --- Rollups --------------------------------------------------------------------

def _tenant_payment_status(tenant: Tenant, state: StoreState, ctx: DeriveContext) -> str:
    statuses = {p.status for p in state.collection("payments") if p.tenant_id == tenant.id}
    if "late" in statuses:
        return "overdue"
    if statuses & {"pending", "partial"}:
        return "unpaid"
    return "paid"


# --- Demo data ------------------------------------------------------------------

SEED: dict[str, list[dict]] = {
    "tenants": [
        {
            "id": "1", "name": "John Doe", "email": "john.doe@example.com",
            "phone": "555-123-4567", "creditScore": 720, "income": 65000,
            "status": "approved", "leaseStart": "2023-01-01", "leaseEnd": "2024-01-01",
            "property": "1", "unit": "1-1", "rent": 1500, "securityDeposit": 1500,
            "backgroundCheckComplete": True,
            "references": [{
                "id": "1-1", "name": "Jane Smith", "relationship": "Previous Landlord",
                "phone": "555-987-6543", "email": "jane@example.com",
            }],
            "applicationDate": "2022-11-15",
            "notes": "Good tenant, always pays on time.",
        },
        {
            "id": "2", "name": "Sarah Johnson", "email": "sarah.j@example.com",
            "phone": "555-234-5678", "creditScore": 680, "income": 52000,
            "status": "pending", "backgroundCheckComplete": False, "references": [],
            "applicationDate": "2023-05-10",
            "notes": "Waiting for background check results.",
        },
    ],
    "properties": [
        {"id": "1", "name": "Sunshine Apartments", "address": "123 Main St, Anytown, USA",
         "units": 4, "type": "apartment", "purchaseDate": "2020-06-15",
         "purchasePrice": 450000, "currentValue": 520000,
         "image": "https://placehold.co/600x400"},
        {"id": "2", "name": "Lakeside House", "address": "456 Lake Rd, Waterfront, USA",
         "units": 1, "type": "house", "purchaseDate": "2019-03-20",
         "purchasePrice": 320000, "currentValue": 375000,
         "image": "https://placehold.co/600x400"},
    ],
    "units": [
        {"id": "1-1", "propertyId": "1", "unitNumber": "101", "bedrooms": 2, "bathrooms": 1,
         "sqft": 850, "rent": 1500, "status": "occupied", "tenantId": "1"},
        {"id": "1-2", "propertyId": "1", "unitNumber": "102", "bedrooms": 2, "bathrooms": 1,
         "sqft": 850, "rent": 1500, "status": "vacant"},
        {"id": "1-3", "propertyId": "1", "unitNumber": "201", "bedrooms": 1, "bathrooms": 1,
         "sqft": 650, "rent": 1200, "status": "maintenance"},
        {"id": "1-4", "propertyId": "1", "unitNumber": "202", "bedrooms": 3, "bathrooms": 2,
         "sqft": 1100, "rent": 1900, "status": "vacant"},
        {"id": "2-1", "propertyId": "2", "unitNumber": "Main", "bedrooms": 4, "bathrooms": 3,
         "sqft": 2200, "rent": 2800, "status": "vacant"},
    ],
    "payments": [
        {"id": "1", "tenantId": "1", "propertyId": "1", "unitId": "1-1", "amount": 1500,
         "date": "2023-05-01", "type": "rent", "status": "paid", "notes": "May rent payment"},
        {"id": "2", "tenantId": "1", "propertyId": "1", "unitId": "1-1", "amount": 1500,
         "date": "2023-06-01", "type": "rent", "status": "paid", "notes": "June rent payment"},
        {"id": "3", "tenantId": "1", "propertyId": "1", "unitId": "1-1", "amount": 1500,
         "date": "2023-07-01", "type": "rent", "status": "pending",
         "notes": "July rent payment"},
    ],
    "maintenanceRequests": [
        {"id": "1", "tenantId": "1", "propertyId": "1", "unitId": "1-1",
         "title": "Leaking faucet",
         "description": "The kitchen sink faucet is leaking and needs repair.",
         "priority": "medium", "status": "completed", "dateSubmitted": "2023-05-10",
         "dateCompleted": "2023-05-12", "cost": 85, "assignedTo": "Mike the Plumber",
         "notes": "Fixed by replacing the washer.", "images": []},
        {"id": "2", "tenantId": "1", "propertyId": "1", "unitId": "1-1",
         "title": "AC not cooling",
         "description": "The air conditioner is running but not cooling effectively.",
         "priority": "high", "status": "in-progress", "dateSubmitted": "2023-06-15",
         "assignedTo": "Cool Air Services", "notes": "Technician scheduled for tomorrow.",
         "images": []},
        {"id": "3", "tenantId": "", "propertyId": "1", "unitId": "1-3",
         "title": "Water damage repair",
         "description": "Repair water damage in bathroom from leak in unit above.",
         "priority": "high", "status": "in-progress", "dateSubmitted": "2023-06-10",
         "assignedTo": "Premier Restoration",
         "notes": "Drying equipment installed, will need drywall repair after.",
         "images": []},
    ],
    "expenses": [
        {"id": "1", "propertyId": "1", "category": "maintenance", "amount": 85,
         "date": "2023-05-12", "description": "Faucet repair in unit 101"},
        {"id": "2", "propertyId": "1", "category": "utilities", "amount": 320,
         "date": "2023-06-05", "description": "Water and electricity for common areas"},
        {"id": "3", "propertyId": "1", "category": "insurance", "amount": 1200,
         "date": "2023-06-01", "description": "Quarterly property insurance payment"},
        {"id": "4", "propertyId": "2", "category": "mortgage", "amount": 1550,
         "date": "2023-06-01", "description": "Monthly mortgage payment"},
        {"id": "5", "propertyId": "2", "category": "taxes", "amount": 2400,
         "date": "2023-06-15", "description": "Semi-annual property tax payment"},
    ],
}


SCHEMA = DomainSchema(
    name="real_estate",
    models={
        "tenants": Tenant,
        "properties": Property,
        "units": Unit,
        "payments": RentPayment,
        "maintenanceRequests": MaintenanceRequest,
        "expenses": Expense,
    },
    relations=(
        Relation("units", "propertyId", "properties", CascadePolicy.CASCADE),
        Relation("units", "tenantId", "tenants", CascadePolicy.NULLIFY, {"status": "vacant"}),
        Relation("payments", "tenantId", "tenants", CascadePolicy.CASCADE),
        Relation("payments", "propertyId", "properties", CascadePolicy.CASCADE),
        Relation("payments", "unitId", "units", CascadePolicy.CASCADE),
        Relation("maintenanceRequests", "tenantId", "tenants", CascadePolicy.NULLIFY),
        Relation("maintenanceRequests", "propertyId", "properties", CascadePolicy.CASCADE),
        Relation("maintenanceRequests", "unitId", "units", CascadePolicy.CASCADE),
        Relation("expenses", "propertyId", "properties", CascadePolicy.CASCADE),
        Relation("tenants", "property", "properties", CascadePolicy.NULLIFY),
        Relation("tenants", "unit", "units", CascadePolicy.NULLIFY),
    ),
    derived=(
        DerivedField("tenants", "applicationDate", _application_date),
        DerivedField("maintenanceRequests", "dateSubmitted", _date_submitted),
        DerivedField("maintenanceRequests", "dateCompleted", _date_completed),
        DerivedField("tenants", "paymentStatus", _tenant_payment_status, frozenset({"payments"})),
    ),
    seed=SEED,
    id_formats={"units": _unit_id},
)
