"""
Declarative base shared by every ORM model.

Import models through this module (app.db.base) when the full metadata is
needed, e.g. for create_all() in tests or at development startup.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""
    pass
