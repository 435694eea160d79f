"""FastAPI entrypoint exposing metadata resolution to the media host."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from encora_provider.core.config import ProviderConfig, get_settings
from encora_provider.core.logging_config import configure_logging
from encora_provider.services.models import PersonInfo, ResolvedMetadata
from encora_provider.services.resolver import resolve_metadata
from encora_provider.services.stagemedia import StageMediaClient, StageMediaError


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Configure logging before serving."""

    configure_logging()
    yield


app = FastAPI(title="Encora Metadata Provider", lifespan=lifespan)


class MetadataRequest(BaseModel):
    path: str = Field(..., description="Absolute path of the media file to describe")


class PersonResponse(BaseModel):
    name: str
    kind: str
    role: str | None = None
    image_url: str | None = None


class MetadataResponse(BaseModel):
    has_metadata: bool
    title: str | None = None
    overview: str | None = None
    premiere_date: datetime | None = None
    production_year: int | None = None
    original_title: str | None = None
    sort_title: str | None = None
    homepage_url: str | None = None
    genres: list[str] = []
    studio: str | None = None
    official_rating: str | None = None
    primary_image_url: str | None = None
    people: list[PersonResponse] = []
    subtitle_files: list[str] = []
    has_subtitles: bool = False
    provider_ids: dict[str, str] = {}


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/metadata", response_model=MetadataResponse)
async def resolve(payload: MetadataRequest) -> MetadataResponse:
    """Resolve metadata for one media path; failures come back as ``has_metadata=false``."""

    result = await resolve_metadata(payload.path)
    return _metadata_to_response(result)


@app.get("/images/{show_id}", response_model=list[str])
async def list_show_posters(show_id: int) -> list[str]:
    config = ProviderConfig.from_settings(get_settings())
    client = StageMediaClient.from_config(config)
    if not client.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="StageMedia API key is not configured",
        )
    try:
        return await client.fetch_posters(show_id)
    except StageMediaError as exc:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Could not load images from StageMedia",
        ) from exc


def _person_to_response(person: PersonInfo) -> PersonResponse:
    return PersonResponse(
        name=person.name,
        kind=person.kind.value,
        role=person.role,
        image_url=person.image_url,
    )


def _metadata_to_response(result: ResolvedMetadata) -> MetadataResponse:
    return MetadataResponse(
        has_metadata=result.has_metadata,
        title=result.title,
        overview=result.overview,
        premiere_date=result.premiere_date,
        production_year=result.production_year,
        original_title=result.original_title,
        sort_title=result.sort_title,
        homepage_url=result.homepage_url,
        genres=list(result.genres),
        studio=result.studio,
        official_rating=result.official_rating,
        primary_image_url=result.primary_image_url,
        people=[_person_to_response(person) for person in result.people],
        subtitle_files=list(result.subtitle_files),
        has_subtitles=result.has_subtitles,
        provider_ids=dict(result.provider_ids),
    )
