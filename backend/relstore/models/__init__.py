"""ORM Models — SQLAlchemy declarative models used by the SQL snapshot gateway.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - All models imported here so Base.metadata knows every table before create_all
"""

from relstore.models.collection_snapshot import CollectionSnapshot  # noqa: F401
