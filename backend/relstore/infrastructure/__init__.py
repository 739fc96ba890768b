"""Infrastructure Layer — snapshot gateways and cross-cutting concerns.

Invariants:
    - Every gateway satisfies core.record_protocols.SnapshotGateway
    - IO and driver errors are mapped to PersistenceError before leaving this layer
"""
