"""Thin async wrapper around the Encora API: recordings and subtitles."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from encora_provider.core.config import ProviderConfig
from encora_provider.services.files import write_bytes_atomic
from encora_provider.services.models import EncoraRecording, EncoraSubtitle

logger = logging.getLogger(__name__)

_SUBTITLE_LIST = TypeAdapter(list[EncoraSubtitle])


class EncoraError(Exception):
    """Base exception for Encora-related failures."""


class EncoraNotConfigured(EncoraError):
    """Raised when no Encora API key is available."""


class EncoraNotFound(EncoraError):
    """Raised when Encora has no recording for the requested id."""


class EncoraClient:
    """Encora HTTP client using bearer auth."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://encora.it",
        timeout: float = 10.0,
        user_agent: str = "EncoraProvider/0.1",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport

    @classmethod
    def from_config(
        cls, config: ProviderConfig, *, transport: httpx.AsyncBaseTransport | None = None
    ) -> "EncoraClient":
        return cls(
            api_key=config.encora_api_key,
            base_url=config.encora_base_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            transport=transport,
        )

    def recording_url(self, encora_id: str) -> str:
        """Public page for a recording, used as the homepage link."""

        return f"{self.base_url}/recordings/{encora_id}"

    def _client(self) -> httpx.AsyncClient:
        if not self.api_key:
            raise EncoraNotConfigured("ENCORA_API_KEY is not configured")
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "User-Agent": self.user_agent,
            },
            follow_redirects=True,
        )

    async def _get(self, client: httpx.AsyncClient, url: str) -> httpx.Response:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            if exc.response.status_code == 404:
                raise EncoraNotFound(f"Encora returned 404 for {url}") from exc
            raise EncoraError(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise EncoraError(f"Encora request failed for {url}: {exc}") from exc
        return response

    async def _get_json(self, path: str) -> Any:
        async with self._client() as client:
            response = await self._get(client, f"{self.base_url}{path}")
        try:
            return response.json()
        except ValueError as exc:
            raise EncoraError(f"Encora returned malformed JSON for {path}") from exc

    async def fetch_recording(self, encora_id: str) -> EncoraRecording:
        """Fetch a recording by id."""

        payload = await self._get_json(f"/api/recording/{encora_id}")
        logger.debug("Encora recording payload: %s", payload)
        if payload is None:
            raise EncoraNotFound(f"Encora returned an empty body for recording {encora_id}")
        try:
            return EncoraRecording.model_validate(payload)
        except ValidationError as exc:
            raise EncoraError(f"Unexpected recording payload for {encora_id}: {exc}") from exc

    async def fetch_subtitles(self, encora_id: str) -> list[EncoraSubtitle]:
        payload = await self._get_json(f"/api/recording/{encora_id}/subtitles")
        logger.debug("Encora subtitles payload: %s", payload)
        if payload is None:
            return []
        try:
            return _SUBTITLE_LIST.validate_python(payload)
        except ValidationError as exc:
            raise EncoraError(f"Unexpected subtitles payload for {encora_id}: {exc}") from exc

    async def download_subtitles(
        self,
        subtitles: list[EncoraSubtitle],
        *,
        media_path: str,
    ) -> list[str]:
        """Save each subtitle next to the media file as ``<name>.<lang>.<ext>``.

        Downloads run concurrently. Assets without a URL or file type are
        skipped, as is any later asset that maps to an already claimed file
        name. A failed download is logged and the remaining files are kept.
        Returns the written paths in listing order.
        """

        directory = os.path.dirname(media_path)
        base_name = os.path.splitext(os.path.basename(media_path))[0]
        targets: list[tuple[EncoraSubtitle, str]] = []
        seen: set[str] = set()
        for subtitle in subtitles:
            if not (subtitle.url and subtitle.url.strip() and subtitle.file_type and subtitle.file_type.strip()):
                continue
            path = os.path.join(directory, subtitle_file_name(base_name, subtitle))
            if path in seen:
                logger.info("Skipping subtitle %s, %s is already taken", subtitle.url, path)
                continue
            seen.add(path)
            targets.append((subtitle, path))
        if not targets:
            return []

        async with self._client() as client:
            results = await asyncio.gather(
                *(self._download_one(client, subtitle.url, path) for subtitle, path in targets),
                return_exceptions=True,
            )

        written: list[str] = []
        for (subtitle, path), outcome in zip(targets, results):
            if isinstance(outcome, asyncio.CancelledError):
                raise outcome
            if isinstance(outcome, BaseException):
                logger.warning("Could not download subtitle %s to %s: %s", subtitle.url, path, outcome)
                continue
            written.append(outcome)
        return written

    async def _download_one(self, client: httpx.AsyncClient, url: str, path: str) -> str:
        response = await self._get(client, url)
        return await write_bytes_atomic(path, response.content)


def subtitle_file_name(base_name: str, subtitle: EncoraSubtitle) -> str:
    """``Show`` + English/SRT -> ``Show.en.srt``; unknown languages default to ``en``."""

    language = (subtitle.language or "").strip()
    lang = language[:2].lower() if len(language) >= 2 else "en"
    ext = (subtitle.file_type or "").strip().lower()
    return f"{base_name}.{lang}.{ext}"
