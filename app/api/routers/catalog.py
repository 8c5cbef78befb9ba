"""
app/api/routers/catalog.py

Listing endpoints for the admin screens.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from app.api.dependencies import get_content_catalog, get_kind
from app.api.routers.content import aggregate_response
from app.domain.content import EntityKind
from app.schemas.content import AggregateResponse, CategoryChallengesResponse, ChallengeCategoryListingResponse
from app.services.content_catalog import ContentCatalog
from db.repositories.errors import StoreError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/catalog", tags=["catalog"])


def _read_failed(what: str, exc: StoreError) -> HTTPException:
    logger.error("Catalog read failed what=%s error=%s", what, exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unable to list {what}.",
    )


@router.get("/challenge-categories", response_model=list[ChallengeCategoryListingResponse])
def list_challenge_categories(
    catalog: ContentCatalog = Depends(get_content_catalog),
) -> list[ChallengeCategoryListingResponse]:
    try:
        listings = catalog.list_challenge_categories()
    except StoreError as exc:
        raise _read_failed("challenge categories", exc) from exc
    return [
        ChallengeCategoryListingResponse(
            **aggregate_response(listing.category).model_dump(),
            challenge_count=listing.challenge_count,
        )
        for listing in listings
    ]


@router.get("/challenge-categories/{category_id}/challenges", response_model=CategoryChallengesResponse)
def list_category_challenges(
    category_id: str,
    catalog: ContentCatalog = Depends(get_content_catalog),
) -> CategoryChallengesResponse:
    try:
        found = catalog.challenges_by_category(category_id)
    except StoreError as exc:
        raise _read_failed(f"challenges of category {category_id}", exc) from exc
    if found is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"challenge_category {category_id} not found.",
        )
    return CategoryChallengesResponse(
        category=aggregate_response(found.category),
        challenges=[aggregate_response(challenge) for challenge in found.challenges],
    )


@router.get("/{kind}", response_model=list[AggregateResponse])
def list_aggregates(
    entity_kind: EntityKind = Depends(get_kind),
    catalog: ContentCatalog = Depends(get_content_catalog),
) -> list[AggregateResponse]:
    try:
        aggregates = catalog.list_aggregates(entity_kind)
    except StoreError as exc:
        raise _read_failed(entity_kind.name, exc) from exc
    return [aggregate_response(aggregate) for aggregate in aggregates]
