"""Services Layer — the entity store, bootstrap and reporting surfaces.

Invariants:
    - Mutations are staged, committed by a single swap, then written through
    - Services call core/ functions; core/ never calls back into services/

Design Decisions:
    - Write-through lives here, not in core/ (ADR: impureim sandwich)
"""
