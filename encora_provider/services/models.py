"""Wire models for the Encora/StageMedia payloads and the resolved output shape."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, model_validator


class _WireModel(BaseModel):
    """Base for remote payloads.

    Keys are matched case-insensitively, unknown keys are ignored and JSON nulls
    fall back to the field default.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    @model_validator(mode="before")
    @classmethod
    def _lowercase_keys(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                str(key).lower(): value for key, value in data.items() if value is not None
            }
        return data


class EncoraPerformer(_WireModel):
    id: int | None = None
    name: str | None = None
    slug: str | None = None
    url: str | None = None


class EncoraCharacter(_WireModel):
    id: int | None = None
    name: str | None = None
    slug: str | None = None
    url: str | None = None
    order: int | None = None


class EncoraCastStatus(_WireModel):
    label: str | None = None
    abbreviation: str | None = None


class EncoraCastMember(_WireModel):
    performer: EncoraPerformer | None = None
    character: EncoraCharacter | None = None
    status: EncoraCastStatus | None = None


class EncoraDate(_WireModel):
    full_date: str | None = None
    month_known: bool = False
    day_known: bool = False
    date_variant: str | None = None
    time: str | None = None


class EncoraNft(_WireModel):
    nft_date: str | None = None
    nft_forever: bool = False


class EncoraShowMetadata(_WireModel):
    show_id: int | None = None
    is_opening: bool = False
    is_closing: bool = False
    is_preview: bool = False
    is_concert: bool = False
    is_nfs: bool = False
    boot_camp_recommended: bool = False
    has_screenshots: bool = False
    has_subtitles: bool = False
    venue: str | None = None
    city: str | None = None
    media_type: str | None = None
    recording_type: str | None = None
    amount_recorded: str | None = None
    gifting_status: str | None = None
    limited_status: str | None = None
    owners_count: int | None = None
    wanters_count: int | None = None
    show_description: str | None = None


class EncoraRecording(_WireModel):
    id: int | None = None
    show: str | None = None
    tour: str | None = None
    date: EncoraDate | None = None
    master: str | None = None
    nft: EncoraNft | None = None
    cast: list[EncoraCastMember] | None = None
    notes: str | None = None
    master_notes: str | None = None
    release_format: str | None = None
    metadata: EncoraShowMetadata | None = None

    def performer_ids(self) -> list[int]:
        """Performer ids in cast order, skipping entries without one."""

        return [
            member.performer.id
            for member in self.cast or []
            if member.performer is not None and member.performer.id is not None
        ]


class EncoraSubtitle(_WireModel):
    recording_id: int | None = None
    language: str | None = None
    author: str | None = None
    file_type: str | None = None
    url: str | None = None


class StageMediaPerformer(_WireModel):
    id: int | None = None
    url: str | None = None


class StageMediaImages(_WireModel):
    posters: list[str] | None = None
    performers: list[StageMediaPerformer] | None = None

    @classmethod
    def empty(cls) -> "StageMediaImages":
        return cls(posters=[], performers=[])

    def headshot_for(self, performer_id: int | None) -> str | None:
        if performer_id is None or performer_id <= 0:
            return None
        for performer in self.performers or []:
            if performer.id == performer_id and performer.url:
                return performer.url
        return None

    @property
    def first_poster(self) -> str | None:
        for poster in self.posters or []:
            if poster and poster.strip():
                return poster
        return None


class PersonKind(str, Enum):
    ACTOR = "actor"
    DIRECTOR = "director"


@dataclass(slots=True)
class PersonInfo:
    name: str
    kind: PersonKind = PersonKind.ACTOR
    role: str | None = None
    image_url: str | None = None


@dataclass(slots=True)
class ResolvedMetadata:
    """Structured metadata produced for one media path."""

    has_metadata: bool = False
    title: str | None = None
    overview: str | None = None
    premiere_date: datetime | None = None
    production_year: int | None = None
    original_title: str | None = None
    sort_title: str | None = None
    homepage_url: str | None = None
    genres: list[str] = field(default_factory=list)
    studio: str | None = None
    official_rating: str | None = None
    primary_image_url: str | None = None
    people: list[PersonInfo] = field(default_factory=list)
    subtitle_files: list[str] = field(default_factory=list)
    has_subtitles: bool = False
    provider_ids: dict[str, str] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "ResolvedMetadata":
        return cls()
