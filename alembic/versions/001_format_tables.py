"""Format tables - format_rules and format_overrides.

Revision ID: 001_format_tables
Revises: None
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "001_format_tables"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "format_rules",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("format_code", sa.String(50), nullable=False, unique=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("separator", sa.String(5), nullable=False, server_default=""),
        sa.Column("segment_lengths", sa.JSON, nullable=False),
        sa.Column("total_length", sa.Integer, nullable=False),
        sa.Column("display_case", sa.String(10), nullable=False, server_default="upper"),
        sa.Column("prefix", sa.String(20), nullable=False, server_default=""),
        sa.Column("suffix", sa.String(20), nullable=False, server_default=""),
        sa.Column("is_default", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("applies_to_scope", sa.String(50), nullable=True),
        sa.Column("applies_to_mode", sa.String(50), nullable=True),
        sa.Column("created_by", sa.String(100), nullable=False, server_default="SYSTEM"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "uq_format_rules_single_default", "format_rules", ["is_default"],
        unique=True,
        postgresql_where=sa.text("is_default"),
        sqlite_where=sa.text("is_default = 1"),
    )
    op.create_index(
        "ix_format_rules_scope", "format_rules", ["applies_to_scope"],
        postgresql_where=sa.text("applies_to_scope IS NOT NULL"),
    )
    op.create_index(
        "ix_format_rules_mode", "format_rules", ["applies_to_mode"],
        postgresql_where=sa.text("applies_to_mode IS NOT NULL"),
    )

    op.create_table(
        "format_overrides",
        sa.Column("identifier", sa.String(64), primary_key=True),
        sa.Column(
            "format_rule_id", sa.Integer,
            sa.ForeignKey("format_rules.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index(
        "ix_format_overrides_format_rule_id", "format_overrides", ["format_rule_id"],
    )


def downgrade() -> None:
    op.drop_index("ix_format_overrides_format_rule_id", table_name="format_overrides")
    op.drop_table("format_overrides")
    op.drop_index("ix_format_rules_mode", table_name="format_rules")
    op.drop_index("ix_format_rules_scope", table_name="format_rules")
    op.drop_index("uq_format_rules_single_default", table_name="format_rules")
    op.drop_table("format_rules")
