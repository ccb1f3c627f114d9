"""Format Overrides - per-identifier rule bindings.

Invariants:
    - PUT is an upsert keyed by identifier
    - DELETE returns 204 when removed, 404 when no override existed
    - identifier longer than the stored column is rejected with 400 before any query
"""

from fastapi import APIRouter, Depends, Path, Response, status

from idformat.api.dependencies import get_config_store
from idformat.core.errors import ErrorContext, NotFoundError
from idformat.schemas.format_rule import (
    IDENTIFIER_MAX_LENGTH, OverrideResponse, OverrideSet,
)
from idformat.services.config_store import FormatConfigStore

router = APIRouter(prefix="/api/v1/format-overrides", tags=["format-overrides"])


@router.get("/{identifier}", response_model=OverrideResponse)
async def get_override(
    identifier: str = Path(max_length=IDENTIFIER_MAX_LENGTH),
    store: FormatConfigStore = Depends(get_config_store),
):
    override = await store.get_override(identifier)
    if override is None:
        raise NotFoundError(
            "FormatOverride", identifier, ErrorContext(identifier=identifier),
        )
    return OverrideResponse.model_validate(override)


@router.put("/{identifier}", response_model=OverrideResponse)
async def set_override(
    body: OverrideSet,
    identifier: str = Path(max_length=IDENTIFIER_MAX_LENGTH),
    store: FormatConfigStore = Depends(get_config_store),
):
    """Bind identifier to a rule, replacing any existing binding."""
    override = await store.upsert_override(identifier, body.format_rule_id)
    return OverrideResponse.model_validate(override)


@router.delete("/{identifier}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_override(
    identifier: str = Path(max_length=IDENTIFIER_MAX_LENGTH),
    store: FormatConfigStore = Depends(get_config_store),
):
    if not await store.delete_override(identifier):
        raise NotFoundError(
            "FormatOverride", identifier, ErrorContext(identifier=identifier),
        )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
