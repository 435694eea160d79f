"""StageMedia client: show posters and performer headshots."""

from __future__ import annotations

import logging
from typing import Iterable

import httpx
from pydantic import ValidationError

from encora_provider.core.config import ProviderConfig
from encora_provider.services.files import write_bytes_atomic
from encora_provider.services.models import StageMediaImages

logger = logging.getLogger(__name__)

# StageMedia rejects an empty actor_ids parameter.
PLACEHOLDER_ACTOR_ID = "1"


class StageMediaError(Exception):
    """Base exception for StageMedia-related failures."""


def format_actor_ids(performer_ids: Iterable[int | str | None]) -> str:
    ids = [str(pid) for pid in performer_ids if pid is not None and str(pid).strip()]
    return ",".join(ids) if ids else PLACEHOLDER_ACTOR_ID


class StageMediaClient:
    """StageMedia HTTP client using bearer auth."""

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str = "https://stagemedia.me",
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
    ) -> "StageMediaClient":
        return cls(
            api_key=config.stagemedia_api_key,
            base_url=config.stagemedia_base_url,
            timeout=config.timeout,
            user_agent=config.user_agent,
            transport=transport,
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    def _client(self) -> httpx.AsyncClient:
        if not self.configured:
            raise StageMediaError("STAGEMEDIA_API_KEY is not configured")
        return httpx.AsyncClient(
            timeout=self.timeout,
            transport=self._transport,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "User-Agent": self.user_agent,
            },
            follow_redirects=True,
        )

    async def _get(self, url: str, *, params: dict[str, str] | None = None) -> httpx.Response:
        async with self._client() as client:
            try:
                response = await client.get(url, params=params)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                raise StageMediaError(f"StageMedia request failed: {exc}") from exc
        return response

    async def fetch_images(
        self, show_id: int, performer_ids: Iterable[int | str | None] = ()
    ) -> StageMediaImages:
        """Fetch posters for ``show_id`` and headshots for the given performers."""

        actor_ids = format_actor_ids(performer_ids)
        logger.info("Fetching StageMedia images for show %s with actors %s", show_id, actor_ids)
        response = await self._get(
            f"{self.base_url}/api/images",
            params={"show_id": str(show_id), "actor_ids": actor_ids},
        )
        try:
            payload = response.json()
        except ValueError as exc:
            raise StageMediaError(f"StageMedia returned malformed JSON for show {show_id}") from exc
        logger.debug("StageMedia images payload: %s", payload)
        if payload is None:
            return StageMediaImages.empty()
        try:
            return StageMediaImages.model_validate(payload)
        except ValidationError as exc:
            raise StageMediaError(f"Unexpected StageMedia payload for show {show_id}: {exc}") from exc

    async def fetch_posters(self, show_id: int) -> list[str]:
        """Poster URLs for a show, without headshot lookups."""

        images = await self.fetch_images(show_id)
        return [poster for poster in images.posters or [] if poster and poster.strip()]

    async def download_poster(self, url: str, path: str) -> str:
        response = await self._get(url)
        return await write_bytes_atomic(path, response.content)
