"""Identifier Display - resolve and render identifiers for presentation.

Invariants:
    - Never 404s for an unknown identifier: no rule means the raw value is returned
    - scope/mode query parameters skip the registry lookup (override still wins)
"""

from fastapi import APIRouter, Depends, Query

from idformat.api.dependencies import get_resolver
from idformat.schemas.format_rule import (
    DisplayBatchRequest, DisplayBatchResponse, DisplayResponse,
)
from idformat.services.resolver import FormatResolver

router = APIRouter(prefix="/api/v1/identifiers", tags=["display"])


@router.get("/{identifier}/display", response_model=DisplayResponse)
async def display_identifier(
    identifier: str,
    scope: str | None = Query(None, max_length=50),
    mode: str | None = Query(None, max_length=50),
    resolver: FormatResolver = Depends(get_resolver),
):
    result = await resolver.format(identifier, scope, mode)
    return DisplayResponse.model_validate(result)


@router.post("/display", response_model=DisplayBatchResponse)
async def display_identifiers(
    body: DisplayBatchRequest,
    resolver: FormatResolver = Depends(get_resolver),
):
    """Render a batch of identifiers, each with its own resolved rule."""
    results = await resolver.format_many(body.identifiers)
    return DisplayBatchResponse(
        results=[DisplayResponse.model_validate(r) for r in results],
    )
