"""ORM Models - SQLAlchemy declarative models for format rules and overrides.

Invariants:
    - All models inherit from Base (db/base.py)
    - FormatRule and FormatOverride are owned here; IdentifierRecord is a read-only
      mapping of the registry's table

Design Decisions:
    - One file per entity for locality
    - All models imported here so metadata is complete before create_all / autogenerate
"""

from idformat.models.format_rule import FormatRuleRow  # noqa: F401
from idformat.models.format_override import FormatOverrideRow  # noqa: F401
from idformat.models.identifier_record import IdentifierRecord  # noqa: F401
