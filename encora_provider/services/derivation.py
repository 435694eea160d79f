"""Map Encora recording fields onto the resolved metadata shape."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Iterable

from encora_provider.services.models import (
    EncoraCastMember,
    EncoraNft,
    EncoraRecording,
    PersonInfo,
    PersonKind,
    StageMediaImages,
)

SKIPPED_MASTERS = frozenset({"pro-shot", "house-cam", "press-reel", "soundboard"})
DEFAULT_DESCRIPTION = "Fetched from Encora.it"
NFT_FOREVER_RATING = "NFT Forever"
NFT_RATING = "NFT"

_WORD = re.compile(r"[^\W\d_]+(?:'[^\W\d_]+)*")


def title_case(value: str) -> str:
    """Capitalise each word, leaving all-caps words (acronyms) untouched."""

    def _fix(match: re.Match[str]) -> str:
        word = match.group(0)
        return word if word.isupper() else word[:1].upper() + word[1:].lower()

    return _WORD.sub(_fix, value.strip())


def map_cast(
    cast: Iterable[EncoraCastMember] | None,
    images: StageMediaImages | None = None,
    *,
    master: str | None = None,
    add_master_director: bool = False,
) -> list[PersonInfo]:
    """Build actor entries from the cast list, plus the master as director when enabled."""

    people: list[PersonInfo] = []
    for member in cast or []:
        performer = member.performer
        name = performer.name.strip() if performer and performer.name else ""
        if not name:
            continue
        role = member.character.name if member.character else None
        abbreviation = member.status.abbreviation if member.status else None
        if abbreviation:
            role = f"{abbreviation} {role or ''}".strip()
        people.append(
            PersonInfo(
                name=name,
                kind=PersonKind.ACTOR,
                role=role,
                image_url=images.headshot_for(performer.id) if images else None,
            )
        )

    if add_master_director and master and master.strip():
        if master.strip().lower() not in SKIPPED_MASTERS:
            people.append(PersonInfo(name=master.strip(), kind=PersonKind.DIRECTOR, role="Director"))
    return people


def derive_genres(recording: EncoraRecording) -> list[str]:
    metadata = recording.metadata
    if metadata is None:
        return []
    genres: list[str] = []
    for raw in (metadata.recording_type, metadata.amount_recorded):
        if raw and raw.strip():
            genres.append(title_case(raw))
    if metadata.boot_camp_recommended:
        genres.append("Boot Camp")
    if metadata.has_subtitles:
        genres.append("Subtitled")
    if metadata.is_concert:
        genres.append("Concert")
    return genres


def _parse_timestamp(raw: str) -> datetime | None:
    text = raw.strip()
    # fromisoformat only accepts a "Z" suffix from 3.11 on.
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def derive_rating(nft: EncoraNft | None, *, now: datetime | None = None) -> str:
    """``NFT Forever``, ``NFT`` while the NFT date is still ahead, otherwise empty."""

    if nft is None:
        return ""
    if nft.nft_forever:
        return NFT_FOREVER_RATING
    if nft.nft_date and nft.nft_date.strip():
        expires = _parse_timestamp(nft.nft_date)
        now = now or datetime.now(timezone.utc)
        if expires is not None and expires > now:
            return NFT_RATING
    return ""


def build_description(recording: EncoraRecording) -> str:
    """Show description (or the general notes), followed by labelled note sections."""

    show_description = recording.metadata.show_description if recording.metadata else None
    notes_as_base = not (show_description and show_description.strip())
    description = (recording.notes or "") if notes_as_base else show_description

    if recording.master_notes:
        description += f"\n\nMaster Notes: \n{recording.master_notes}"
    if recording.notes and not notes_as_base:
        description += f"\n\nGeneral Notes: \n{recording.notes}"

    description = description.lstrip("\n").strip()
    return description or DEFAULT_DESCRIPTION


def parse_recording_date(recording: EncoraRecording) -> datetime | None:
    full_date = recording.date.full_date if recording.date else None
    if not full_date:
        return None
    try:
        return datetime.fromisoformat(full_date.strip())
    except ValueError:
        return None
