"""Format Rules - admin CRUD and preview over display-format rules.

Invariants:
    - Every mutation goes through FormatConfigStore (which invalidates the cache)
    - DELETE returns 204 when removed, 404 when absent, 409 for the default rule
    - Preview renders with the cached rule set (same view the display routes use)
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from idformat.api.dependencies import get_config_store, get_resolver, parse_id_or_code
from idformat.core.errors import NotFoundError
from idformat.schemas.format_rule import (
    DisplayResponse, FormatRuleCreate, FormatRuleList, FormatRuleResponse,
    FormatRuleUpdate, PreviewRequest,
)
from idformat.services.config_store import FormatConfigStore
from idformat.services.resolver import FormatResolver

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/formats", tags=["formats"])


@router.get("", response_model=FormatRuleList)
async def list_formats(store: FormatConfigStore = Depends(get_config_store)):
    """List all format rules, default first."""
    rules = await store.list_rules()
    return FormatRuleList(
        formats=[FormatRuleResponse.model_validate(r) for r in rules],
    )


@router.post(
    "", response_model=FormatRuleResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_format(
    body: FormatRuleCreate,
    store: FormatConfigStore = Depends(get_config_store),
):
    rule = await store.create(body.model_dump())
    return FormatRuleResponse.model_validate(rule)


@router.post("/preview", response_model=DisplayResponse)
async def preview_format(
    body: PreviewRequest,
    resolver: FormatResolver = Depends(get_resolver),
):
    """Show how an identifier would render under a given rule."""
    result = await resolver.preview(body.identifier, body.rule_ref)
    return DisplayResponse.model_validate(result)


@router.get("/{id_or_code}", response_model=FormatRuleResponse)
async def get_format(
    id_or_code: str,
    store: FormatConfigStore = Depends(get_config_store),
):
    rule = await store.require_rule(parse_id_or_code(id_or_code))
    return FormatRuleResponse.model_validate(rule)


@router.patch("/{rule_id}", response_model=FormatRuleResponse)
async def update_format(
    rule_id: int,
    body: FormatRuleUpdate,
    store: FormatConfigStore = Depends(get_config_store),
):
    """Partially update a rule."""
    rule = await store.update(rule_id, body.to_patch())
    return FormatRuleResponse.model_validate(rule)


@router.delete("/{rule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_format(
    rule_id: int,
    store: FormatConfigStore = Depends(get_config_store),
):
    if not await store.delete(rule_id):
        raise NotFoundError("FormatRule", str(rule_id))
    return Response(status_code=status.HTTP_204_NO_CONTENT)
