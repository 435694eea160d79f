"""Render the configured title template for a recording."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date

from encora_provider.services.models import EncoraDate, EncoraRecording

_ACT_PATTERN = re.compile(r"\bAct\s*(\d+)", re.IGNORECASE)
_MONTHS = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


@dataclass(frozen=True, slots=True)
class DateLabels:
    long: str
    iso: str
    usa: str
    numeric: str


def _as_int(value: str) -> int | None:
    try:
        return int(value)
    except ValueError:
        return None


def _long_date(year: str, month: str, day: str, info: EncoraDate, unknown: str) -> str:
    y, m, d = _as_int(year), _as_int(month), _as_int(day)
    if info.month_known and info.day_known and y is not None and m is not None and d is not None:
        try:
            parsed = date(y, m, d)
        except ValueError:
            return f"{year}-{month}-{day}"
        return f"{_MONTHS[parsed.month - 1]} {parsed.day}, {parsed.year}"
    if info.month_known and y is not None and m is not None and 1 <= m <= 12:
        return f"{_MONTHS[m - 1]} {unknown}, {year}"
    if y is not None:
        return year
    return f"{year}-{month}-{day}"


def build_date_labels(info: EncoraDate | None, replace_char: str = "x") -> DateLabels | None:
    """Long, ISO, US and day-first renderings of a recording date.

    Unknown month/day components are written as two ``replace_char``
    characters. Returns None when the recording has no date string.
    """

    if info is None or not info.full_date or not info.full_date.strip():
        return None

    unknown = (replace_char or "x")[0] * 2
    parts = info.full_date.strip().split("T")[0].split("-")
    year = parts[0]
    month = parts[1] if len(parts) > 1 and info.month_known else unknown
    day = parts[2] if len(parts) > 2 and info.day_known else unknown

    labels = [
        _long_date(year, month, day, info, unknown),
        f"{year}-{month}-{day}",
        f"{month}-{day}-{year}",
        f"{day}-{month}-{year}",
    ]

    suffix = ""
    if info.date_variant and info.date_variant.strip():
        suffix += f" ({info.date_variant})"
    if info.time and info.time.strip().lower() == "matinee":
        suffix += " (matinée)"

    return DateLabels(*(label + suffix for label in labels))


def show_with_act(show: str | None, media_path: str | None) -> str:
    """Append ``Act N`` to the show name when the media path names an act."""

    name = show or ""
    match = _ACT_PATTERN.search(media_path or "")
    if match:
        name = f"{name} Act {match.group(1)}"
    return name


def format_title(
    template: str,
    recording: EncoraRecording,
    media_path: str | None,
    replace_char: str = "x",
) -> str:
    """Substitute ``{show}``, ``{date*}``, ``{tour}`` and ``{master}`` into ``template``.

    Unknown values become empty strings; unrecognised tokens are left as-is.
    """

    labels = build_date_labels(recording.date, replace_char)
    variables = {
        "show": show_with_act(recording.show, media_path),
        "date": labels.long if labels else None,
        "date_iso": labels.iso if labels else None,
        "date_numeric": labels.numeric if labels else None,
        "date_usa": labels.usa if labels else None,
        "tour": recording.tour,
        "master": recording.master,
    }

    title = template
    for key, value in variables.items():
        title = title.replace("{" + key + "}", value or "")
    return title.strip()
