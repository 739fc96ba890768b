"""SQLAlchemy Declarative Base — shared base class for the snapshot table model.

Invariants:
    - All models inherit from Base
    - Base.metadata is what DatabaseSessionManager.create_all() creates

Design Decisions:
    - Separate file for Base: models and the session manager import it without cycles
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all relstore ORM models."""
    pass
