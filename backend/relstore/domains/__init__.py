"""Domains — one DomainSchema per application shape (coworking, real estate).

Invariants:
    - A domain module only declares data: models, relations, derived fields, seeds
    - Cascade policy lives in the relation table, never in store code
"""
