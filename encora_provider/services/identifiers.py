"""Locate the Encora recording id for a media file."""

from __future__ import annotations

import logging
import os
import re

logger = logging.getLogger(__name__)

_PATH_MARKER = re.compile(r"\{e-(\d+)\}", re.IGNORECASE)
_MARKER_FILE = re.compile(r"^\.encora-(\d+)", re.IGNORECASE)
ID_FILE_NAME = ".encora-id"


def extract_encora_id(path: str) -> str | None:
    """Return the recording id for ``path`` or None when nothing identifies it.

    Lookup order: a ``{e-<digits>}`` marker anywhere in the path, then a
    ``.encora-<digits>`` file next to the media file, then the trimmed
    contents of a ``.encora-id`` file in the same directory.
    """

    match = _PATH_MARKER.search(path)
    if match:
        logger.debug("Found Encora id %s in path %s", match.group(1), path)
        return match.group(1)

    directory = os.path.dirname(path)
    if not directory or not os.path.isdir(directory):
        return None

    try:
        entries = os.listdir(directory)
    except OSError as exc:
        logger.warning("Could not list %s while looking for Encora id: %s", directory, exc)
        return None

    for name in entries:
        file_match = _MARKER_FILE.match(name)
        if file_match and os.path.isfile(os.path.join(directory, name)):
            logger.debug("Found Encora id %s in marker file %s", file_match.group(1), name)
            return file_match.group(1)

    id_file = os.path.join(directory, ID_FILE_NAME)
    if os.path.isfile(id_file):
        try:
            with open(id_file, "r", encoding="utf-8") as handle:
                value = handle.read().strip()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", id_file, exc)
            return None
        logger.debug("Found Encora id %r in %s", value, id_file)
        return value or None

    return None
