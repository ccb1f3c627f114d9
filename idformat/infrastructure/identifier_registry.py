"""SQL Identifier Registry - reads classification from the registry's identifier_pool table.

Invariants:
    - Read-only: a single SELECT per lookup, no writes
    - Unknown identifier → None (not an error)
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from idformat.core.domain_types import IdentifierClassification
from idformat.models.identifier_record import IdentifierRecord

logger = logging.getLogger(__name__)


class SqlIdentifierRegistry:
    """IdentifierRegistry backed by the identifier_pool table."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_classification(
        self, identifier: str,
    ) -> IdentifierClassification | None:
        result = await self.db.execute(
            select(IdentifierRecord.scope, IdentifierRecord.mode)
            .where(IdentifierRecord.identifier == identifier),
        )
        row = result.one_or_none()
        if row is None:
            logger.debug("Identifier not in registry", extra={"identifier": identifier})
            return None
        return IdentifierClassification(
            identifier=identifier, scope=row.scope, mode=row.mode,
        )
