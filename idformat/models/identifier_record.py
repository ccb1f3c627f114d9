"""IdentifierRecord ORM - read-only mapping of the identifier registry table.

Invariants:
    - This service never inserts, updates or deletes identifier_pool rows
    - Only identifier, scope and mode are consumed

Design Decisions:
    - Mapped here so the registry can be queried with the same session; the
      table itself is created and migrated by the registry, not by this service
"""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column

from idformat.db.base import Base


class IdentifierRecord(Base):
    """Identifier registry row - classification attributes only."""
    __tablename__ = "identifier_pool"

    identifier: Mapped[str] = mapped_column(String(64), primary_key=True)
    scope: Mapped[str | None] = mapped_column(String(50), nullable=True)
    mode: Mapped[str | None] = mapped_column(String(50), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="available")
