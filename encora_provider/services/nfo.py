"""Read fallback metadata from a ``movie.nfo`` sidecar."""

from __future__ import annotations

import logging
import os
import xml.etree.ElementTree as ET
from datetime import datetime

from encora_provider.services.models import PersonInfo, PersonKind, ResolvedMetadata

logger = logging.getLogger(__name__)

NFT_RATING = "NFT"


def find_nfo_path(media_path: str) -> str | None:
    """``movie.nfo`` in the media directory wins over ``<media name>.nfo``."""

    directory = os.path.dirname(media_path)
    if not directory:
        return None
    candidates = [
        os.path.join(directory, "movie.nfo"),
        os.path.join(directory, os.path.splitext(os.path.basename(media_path))[0] + ".nfo"),
    ]
    for candidate in candidates:
        if os.path.isfile(candidate):
            return candidate
    return None


def _text(node: ET.Element | None) -> str | None:
    if node is None:
        return None
    text = (node.text or "").strip()
    return text or None


def _parse_datetime(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        return datetime.fromisoformat(raw.strip())
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(raw.strip()[:10])
    except ValueError:
        return None


def _parse_int(raw: str | None) -> int | None:
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        return None


def read_local_metadata(media_path: str) -> ResolvedMetadata:
    """Parse the sidecar for ``media_path``.

    Returns an empty, unsuccessful result when there is no sidecar, when it
    cannot be parsed, or when its root element is not ``<movie>``.
    """

    nfo_path = find_nfo_path(media_path)
    if nfo_path is None:
        logger.info("No NFO file found for %s", media_path)
        return ResolvedMetadata.empty()

    try:
        root = ET.parse(nfo_path).getroot()
    except (ET.ParseError, OSError, UnicodeDecodeError) as exc:
        logger.warning("Failed to parse NFO %s: %s", nfo_path, exc)
        return ResolvedMetadata.empty()

    # Strip any namespace before comparing the root name.
    local_name = root.tag.rsplit("}", 1)[-1]
    if local_name.lower() != "movie":
        logger.info("NFO %s has root <%s>, expected <movie>", nfo_path, local_name)
        return ResolvedMetadata.empty()

    result = ResolvedMetadata(
        has_metadata=True,
        title=_text(root.find("title")),
        overview=_text(root.find("plot")),
        original_title=_text(root.find("originaltitle")),
        sort_title=_text(root.find("sorttitle")),
        premiere_date=(
            _parse_datetime(_text(root.find("premiered")))
            or _parse_datetime(_text(root.find("releasedate")))
        ),
        production_year=_parse_int(_text(root.find("year"))),
        studio=_text(root.find("studio")),
    )

    result.genres = [value for value in (_text(node) for node in root.findall("genre")) if value]

    for node in root.findall("certification"):
        if _text(node):
            result.official_rating = NFT_RATING

    for thumb in root.findall("thumb"):
        if thumb.get("aspect") == "poster":
            result.primary_image_url = _text(thumb)
            break

    for actor in root.findall("actor"):
        name = _text(actor.find("name"))
        if not name:
            continue
        result.people.append(
            PersonInfo(
                name=name,
                kind=PersonKind.ACTOR,
                role=_text(actor.find("role")),
                image_url=_text(actor.find("thumb")),
            )
        )

    logger.info("Loaded NFO metadata for %s from %s", media_path, nfo_path)
    return result
