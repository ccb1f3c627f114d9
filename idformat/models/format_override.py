"""FormatOverride ORM - per-identifier binding to a format rule.

Invariants:
    - identifier is the primary key (one override per identifier)
    - format_rule_id FK uses ON DELETE RESTRICT - a bound rule cannot disappear
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from idformat.db.base import Base


class FormatOverrideRow(Base):
    __tablename__ = "format_overrides"

    identifier: Mapped[str] = mapped_column(String(64), primary_key=True)
    format_rule_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("format_rules.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
