"""Seed the standard format catalogue.

Revision ID: 002_seed_formats
Revises: 001_format_tables
Create Date: 2026-10-19

OSIA_STANDARD is the default (XXXXX.XXXX.XXXX.XXXX.XX). Sector formats bind
by scope; SHORT_ID binds the 'random' generation mode.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "002_seed_formats"
down_revision: Union[str, None] = "001_format_tables"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

_format_rules = sa.table(
    "format_rules",
    sa.column("format_code", sa.String),
    sa.column("name", sa.String),
    sa.column("description", sa.Text),
    sa.column("separator", sa.String),
    sa.column("segment_lengths", sa.JSON),
    sa.column("total_length", sa.Integer),
    sa.column("prefix", sa.String),
    sa.column("is_default", sa.Boolean),
    sa.column("applies_to_scope", sa.String),
    sa.column("applies_to_mode", sa.String),
)

STANDARD_FORMATS = [
    {
        "format_code": "OSIA_STANDARD", "name": "OSIA Standard Format",
        "description": "19-character identifier with dot separators: XXXXX.XXXX.XXXX.XXXX.XX",
        "separator": ".", "segment_lengths": [5, 4, 4, 4, 2], "total_length": 19,
        "prefix": "", "is_default": True,
        "applies_to_scope": None, "applies_to_mode": "foundational",
    },
    {
        "format_code": "OSIA_COMPACT", "name": "OSIA Compact Format",
        "description": "19-character identifier without separators",
        "separator": "", "segment_lengths": [19], "total_length": 19,
        "prefix": "", "is_default": False,
        "applies_to_scope": None, "applies_to_mode": None,
    },
    {
        "format_code": "OSIA_DASHED", "name": "OSIA Dashed Format",
        "description": "19-character identifier with dash separators: XXXXX-XXXX-XXXX-XXXX-XX",
        "separator": "-", "segment_lengths": [5, 4, 4, 4, 2], "total_length": 19,
        "prefix": "", "is_default": False,
        "applies_to_scope": None, "applies_to_mode": None,
    },
    {
        "format_code": "OSIA_SPACED", "name": "OSIA Spaced Format",
        "description": "19-character identifier with space separators: XXXXX XXXX XXXX XXXX XX",
        "separator": " ", "segment_lengths": [5, 4, 4, 4, 2], "total_length": 19,
        "prefix": "", "is_default": False,
        "applies_to_scope": None, "applies_to_mode": None,
    },
    {
        "format_code": "HEALTH_ID", "name": "Health Sector ID",
        "description": "Health sector token with HLT prefix: HLT-XXXXXXXX-XXXX",
        "separator": "-", "segment_lengths": [8, 4], "total_length": 12,
        "prefix": "HLT-", "is_default": False,
        "applies_to_scope": "health", "applies_to_mode": None,
    },
    {
        "format_code": "TAX_ID", "name": "Tax Identification Number",
        "description": "Tax sector format: XXX-XX-XXXX",
        "separator": "-", "segment_lengths": [3, 2, 4], "total_length": 9,
        "prefix": "", "is_default": False,
        "applies_to_scope": "tax", "applies_to_mode": None,
    },
    {
        "format_code": "SHORT_ID", "name": "Short Identifier",
        "description": "Short 12-character identifier with dashes: XXXX-XXXX-XXXX",
        "separator": "-", "segment_lengths": [4, 4, 4], "total_length": 12,
        "prefix": "", "is_default": False,
        "applies_to_scope": None, "applies_to_mode": "random",
    },
]


def upgrade() -> None:
    op.bulk_insert(_format_rules, STANDARD_FORMATS)


def downgrade() -> None:
    codes = [f["format_code"] for f in STANDARD_FORMATS]
    op.execute(
        _format_rules.delete().where(_format_rules.c.format_code.in_(codes)),
    )
