"""Request-scoped wiring - builds store and resolver from the DB session and cache."""

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from idformat.infrastructure.database import get_db
from idformat.services.config_store import FormatConfigStore
from idformat.services.format_cache import FormatCache, get_format_cache
from idformat.services.resolver import FormatResolver


def get_config_store(
    db: AsyncSession = Depends(get_db),
    cache: FormatCache = Depends(get_format_cache),
) -> FormatConfigStore:
    return FormatConfigStore(db, cache)


def get_resolver(
    store: FormatConfigStore = Depends(get_config_store),
    cache: FormatCache = Depends(get_format_cache),
) -> FormatResolver:
    return FormatResolver(store, cache)


def parse_id_or_code(value: str) -> int | str:
    """Numeric path segments are rule ids; anything else is a rule code."""
    return int(value) if value.isascii() and value.isdigit() else value
