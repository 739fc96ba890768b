"""Entity Schemas — pydantic models that validate and serialize every entity type.

Invariants:
    - Every entity model inherits from schemas.base.Entity
    - Records are exchanged with camelCase keys, attributes are snake_case
"""
