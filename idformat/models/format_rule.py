"""FormatRule ORM - persists a named rendering recipe.

Invariants:
    - format_code is unique
    - At most one row has is_default = true (partial unique index)
    - segment_lengths is a JSON array; rows are normalized on read by the store

Design Decisions:
    - JSON over INTEGER[]: same column type on PostgreSQL and SQLite
    - Integer autoincrement id: ids and codes never collide in id-or-code lookups
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, Integer, JSON, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from idformat.db.base import Base


class FormatRuleRow(Base):
    """Format rule entity - how to render an identifier for display."""
    __tablename__ = "format_rules"
    __table_args__ = (
        Index(
            "uq_format_rules_single_default", "is_default", unique=True,
            postgresql_where=text("is_default"),
            sqlite_where=text("is_default = 1"),
        ),
        Index(
            "ix_format_rules_scope", "applies_to_scope",
            postgresql_where=text("applies_to_scope IS NOT NULL"),
        ),
        Index(
            "ix_format_rules_mode", "applies_to_mode",
            postgresql_where=text("applies_to_mode IS NOT NULL"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    format_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Rendering
    separator: Mapped[str] = mapped_column(String(5), nullable=False, default="")
    segment_lengths: Mapped[list] = mapped_column(JSON, nullable=False)
    total_length: Mapped[int] = mapped_column(Integer, nullable=False)

    # Display options
    display_case: Mapped[str] = mapped_column(String(10), nullable=False, default="upper")
    prefix: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    suffix: Mapped[str] = mapped_column(String(20), nullable=False, default="")

    # Selection
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    applies_to_scope: Mapped[str | None] = mapped_column(String(50), nullable=True)
    applies_to_mode: Mapped[str | None] = mapped_column(String(50), nullable=True)

    created_by: Mapped[str] = mapped_column(String(100), nullable=False, default="SYSTEM")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
