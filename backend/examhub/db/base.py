"""Declarative base for all database models.

Models register themselves on import; ``examhub.models`` imports every model
module, so import that package before calling ``Base.metadata.create_all``.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all database models."""

    pass
