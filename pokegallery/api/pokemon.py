"""
Pokémon detail endpoint.

Fetches a single record from the catalog service (with bounded retry) and
returns it in the normalized detail shape.
"""

from typing import Annotated

import httpx
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from pokegallery.api.dependencies import get_http_client
from pokegallery.models.failure import KnownError
from pokegallery.services.detail_fetcher import fetch_record_detail

router = APIRouter(prefix="/pokemon", tags=["pokemon"])


class StatResponse(BaseModel):
    name: str
    base_value: int


class AbilityResponse(BaseModel):
    name: str
    is_hidden: bool = False


class PokemonDetailResponse(BaseModel):
    """Response model for the detail view."""

    id: int | None = None
    name: str
    image: str | None = None
    categories: list[str] = Field(default_factory=list)
    primary_category: str
    height_m: float | None = None
    weight_kg: float | None = None
    stats: list[StatResponse] = Field(default_factory=list)
    max_stat_value: int = 100
    abilities: list[AbilityResponse] = Field(default_factory=list)
    moves: list[str] = Field(default_factory=list)


@router.get("/{id_or_name}", response_model=PokemonDetailResponse)
async def get_pokemon(
    id_or_name: str,
    client: Annotated[httpx.AsyncClient, Depends(get_http_client)],
) -> PokemonDetailResponse:
    """
    Get one Pokémon by id or name.

    Returns 404 if the catalog service does not know it, and 502 if the
    service keeps failing after every attempt.
    """
    try:
        detail = await fetch_record_detail(client, id_or_name)
    except KnownError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message) from e

    record = detail.record
    return PokemonDetailResponse(
        id=record.id,
        name=record.name,
        image=record.image,
        categories=list(record.categories),
        primary_category=detail.primary_category,
        height_m=detail.height_m,
        weight_kg=detail.weight_kg,
        stats=[StatResponse(name=s.name, base_value=s.base_value) for s in detail.stats],
        max_stat_value=detail.max_stat_value,
        abilities=[AbilityResponse(name=a.name, is_hidden=a.is_hidden) for a in detail.abilities],
        moves=list(detail.moves),
    )
