"""Core Layer — pure engine logic: state, relations, integrity, query, aggregation.

Invariants:
    - No module in core/ imports from services/, infrastructure/, db/ or models/
    - No IO: persistence is reached only through the SnapshotGateway protocol

Design Decisions:
    - Functional core separated from the imperative shell (services/ owns write-through)
"""
