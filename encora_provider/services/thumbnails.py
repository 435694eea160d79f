"""Best-effort ``thumb.png`` extraction with ffmpeg."""

from __future__ import annotations

import asyncio
import logging
import os
import random
import re
import shutil
from typing import Protocol

logger = logging.getLogger(__name__)

THUMB_NAME = "thumb.png"
DEFAULT_DURATION_SECONDS = 30 * 60
_DURATION = re.compile(r"Duration: (\d+):(\d+):(\d+)\.(\d+)")


class ThumbnailGenerator(Protocol):
    async def generate(self, media_path: str, directory: str) -> None: ...


class NullThumbnailGenerator:
    """Used when thumbnail extraction is disabled."""

    async def generate(self, media_path: str, directory: str) -> None:
        return None


def parse_duration(stderr: str) -> int | None:
    """Seconds from ffmpeg's ``Duration: HH:MM:SS.xx`` banner line."""

    match = _DURATION.search(stderr)
    if not match:
        return None
    hours, minutes, seconds = (int(match.group(i)) for i in range(1, 4))
    return hours * 3600 + minutes * 60 + seconds


def format_timestamp(seconds: float) -> str:
    total = int(seconds)
    return f"{total // 3600:02d}:{total % 3600 // 60:02d}:{total % 60:02d}"


class FfmpegThumbnailGenerator:
    """Grab one frame between 15% and 60% into the media and save it as ``thumb.png``.

    Never raises: every failure is logged and the thumbnail is simply absent.
    """

    def __init__(
        self,
        ffmpeg_path: str = "ffmpeg",
        *,
        timeout: float = 120.0,
        rng: random.Random | None = None,
    ) -> None:
        self.ffmpeg_path = ffmpeg_path
        self.timeout = timeout
        self._rng = rng or random.Random()

    async def _run(self, *args: str) -> tuple[int, str]:
        process = await asyncio.create_subprocess_exec(
            self.ffmpeg_path,
            *args,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            _, stderr = await asyncio.wait_for(process.communicate(), timeout=self.timeout)
        except (asyncio.TimeoutError, asyncio.CancelledError):
            process.kill()
            await process.wait()
            raise
        return process.returncode or 0, stderr.decode("utf-8", errors="replace")

    async def _probe_duration(self, media_path: str) -> int:
        try:
            _, stderr = await self._run("-hide_banner", "-i", media_path)
        except (OSError, asyncio.TimeoutError) as exc:
            logger.warning("Failed to determine duration of %s: %s", media_path, exc)
            return DEFAULT_DURATION_SECONDS
        return parse_duration(stderr) or DEFAULT_DURATION_SECONDS

    async def generate(self, media_path: str, directory: str) -> None:
        if not directory:
            return
        thumb_path = os.path.join(directory, THUMB_NAME)
        if os.path.exists(thumb_path):
            return
        if shutil.which(self.ffmpeg_path) is None and not os.path.isfile(self.ffmpeg_path):
            logger.warning("ffmpeg not found at %r, skipping thumbnail for %s", self.ffmpeg_path, media_path)
            return

        duration = await self._probe_duration(media_path)
        seek = format_timestamp(duration * (0.15 + 0.45 * self._rng.random()))
        logger.info("Extracting %s from %s at %s", THUMB_NAME, media_path, seek)
        try:
            code, stderr = await self._run(
                "-ss", seek,
                "-i", media_path,
                "-frames:v", "1",
                "-vf", "scale=1920:1080",
                "-y", thumb_path,
            )
        except (OSError, asyncio.TimeoutError) as exc:
            logger.warning("Exception while generating %s for %s: %s", THUMB_NAME, media_path, exc)
            return

        if code == 0 and os.path.exists(thumb_path):
            logger.info("Generated %s", thumb_path)
        else:
            logger.warning("ffmpeg failed to generate %s (exit code %s): %s", thumb_path, code, stderr[-500:])
