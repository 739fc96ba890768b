"""Database Declarations — SQLAlchemy Base shared by the snapshot table model.

Design Decisions:
    - Engine and sessions live in infrastructure/database.py; this package only declares
"""
