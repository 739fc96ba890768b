"""relstore — in-memory relational data engine for admin-style CRUD dashboards.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
