"""Resolve metadata for a media file: Encora first, local NFO as the fallback."""

from __future__ import annotations

import asyncio
import logging
import os

import httpx

from encora_provider.core.config import ProviderConfig, get_settings
from encora_provider.services import derivation
from encora_provider.services.encora import EncoraClient, EncoraError
from encora_provider.services.identifiers import extract_encora_id
from encora_provider.services.models import EncoraRecording, ResolvedMetadata, StageMediaImages
from encora_provider.services.nfo import read_local_metadata
from encora_provider.services.stagemedia import StageMediaClient, StageMediaError
from encora_provider.services.thumbnails import (
    FfmpegThumbnailGenerator,
    NullThumbnailGenerator,
    ThumbnailGenerator,
)
from encora_provider.services.title import format_title

logger = logging.getLogger(__name__)

POSTER_FILE_NAME = "folder.jpg"
ENCORA_ID_KEY = "EncoraRecordingId"
STAGEMEDIA_SHOW_ID_KEY = "StageMediaShowId"


def default_thumbnail_generator() -> ThumbnailGenerator:
    settings = get_settings()
    if not settings.generate_thumbnails:
        return NullThumbnailGenerator()
    return FfmpegThumbnailGenerator(settings.ffmpeg_path)


class MetadataResolver:
    """Runs one resolution per call; holds no state between calls.

    ``resolve`` never raises for remote or local failures. It returns an
    unsuccessful, empty ``ResolvedMetadata`` when nothing could be found.
    Cancellation still propagates to the caller.
    """

    def __init__(
        self,
        config: ProviderConfig,
        *,
        encora: EncoraClient | None = None,
        stagemedia: StageMediaClient | None = None,
        thumbnails: ThumbnailGenerator | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.encora = encora or EncoraClient.from_config(config, transport=transport)
        self.stagemedia = stagemedia or StageMediaClient.from_config(config, transport=transport)
        self.thumbnails = thumbnails or NullThumbnailGenerator()

    async def resolve(self, media_path: str | None) -> ResolvedMetadata:
        if not media_path or not media_path.strip():
            logger.info("No path provided, skipping metadata fetch")
            return ResolvedMetadata.empty()
        if not self.config.encora_api_key or not self.config.encora_api_key.strip():
            logger.info("No Encora API key configured, skipping metadata fetch for %s", media_path)
            return ResolvedMetadata.empty()

        logger.info("Resolving metadata for %s", media_path)
        result = await self._resolve(media_path)
        await self._generate_thumbnail(media_path)
        return result

    async def _resolve(self, media_path: str) -> ResolvedMetadata:
        encora_id = await asyncio.to_thread(extract_encora_id, media_path)
        if not encora_id:
            logger.info("No Encora id found for %s, falling back to NFO", media_path)
            return await self._local(media_path)

        logger.info("Extracted Encora id %s from %s", encora_id, media_path)
        try:
            recording = await self.encora.fetch_recording(encora_id)
        except EncoraError as exc:
            logger.info("Encora lookup failed for %s (%s), falling back to NFO for %s", encora_id, exc, media_path)
            return await self._local(media_path)

        try:
            return await self._from_recording(encora_id, recording, media_path)
        except Exception:
            logger.exception("Error while building Encora metadata for %s, falling back to NFO", encora_id)
            return await self._local(media_path)

    async def _local(self, media_path: str) -> ResolvedMetadata:
        return await asyncio.to_thread(read_local_metadata, media_path)

    async def _from_recording(
        self, encora_id: str, recording: EncoraRecording, media_path: str
    ) -> ResolvedMetadata:
        logger.info("Fetched Encora metadata for id %s", encora_id)
        images = await self._fetch_images(recording)
        poster_url = images.first_poster
        if poster_url:
            await self._save_poster(poster_url, media_path)
        subtitle_files = await self._save_subtitles(encora_id, recording, media_path)

        premiere = derivation.parse_recording_date(recording)
        result = ResolvedMetadata(
            has_metadata=True,
            title=format_title(
                self.config.effective_title_format,
                recording,
                media_path,
                self.config.replace_char,
            ),
            overview=derivation.build_description(recording),
            premiere_date=premiere,
            production_year=premiere.year if premiere else None,
            original_title=recording.show,
            sort_title=recording.show,
            homepage_url=self.encora.recording_url(encora_id),
            genres=derivation.derive_genres(recording),
            official_rating=derivation.derive_rating(recording.nft),
            primary_image_url=poster_url,
            people=derivation.map_cast(
                recording.cast,
                images,
                master=recording.master,
                add_master_director=self.config.add_master_director,
            ),
            subtitle_files=subtitle_files,
            has_subtitles=bool(subtitle_files),
            provider_ids={ENCORA_ID_KEY: encora_id},
        )

        metadata = recording.metadata
        if metadata is not None:
            if metadata.venue and metadata.venue.strip():
                result.studio = metadata.venue.strip()
            if metadata.show_id is not None:
                result.provider_ids[STAGEMEDIA_SHOW_ID_KEY] = str(metadata.show_id)
        return result

    async def _fetch_images(self, recording: EncoraRecording) -> StageMediaImages:
        show_id = recording.metadata.show_id if recording.metadata else None
        if not self.stagemedia.configured or not show_id or show_id <= 0:
            return StageMediaImages.empty()
        try:
            return await self.stagemedia.fetch_images(show_id, recording.performer_ids())
        except StageMediaError as exc:
            logger.warning("Could not fetch StageMedia images for show %s: %s", show_id, exc)
            return StageMediaImages.empty()

    async def _save_poster(self, poster_url: str, media_path: str) -> None:
        directory = os.path.dirname(media_path)
        if not directory:
            return
        poster_path = os.path.join(directory, POSTER_FILE_NAME)
        if os.path.exists(poster_path):
            return
        try:
            await self.stagemedia.download_poster(poster_url, poster_path)
        except (StageMediaError, OSError) as exc:
            logger.warning("Could not save StageMedia poster to %s: %s", poster_path, exc)
            return
        logger.info("Saved poster to %s", poster_path)

    async def _save_subtitles(
        self, encora_id: str, recording: EncoraRecording, media_path: str
    ) -> list[str]:
        if not (recording.metadata and recording.metadata.has_subtitles):
            return []
        if not os.path.dirname(media_path):
            return []
        logger.info("Fetching subtitles for recording %s", encora_id)
        try:
            subtitles = await self.encora.fetch_subtitles(encora_id)
            return await self.encora.download_subtitles(subtitles, media_path=media_path)
        except (EncoraError, OSError) as exc:
            logger.warning("Could not download subtitles for recording %s: %s", encora_id, exc)
            return []

    async def _generate_thumbnail(self, media_path: str) -> None:
        directory = os.path.dirname(media_path)
        if not directory:
            return
        try:
            await self.thumbnails.generate(media_path, directory)
        except Exception:
            logger.warning("Thumbnail generation failed for %s", media_path, exc_info=True)


async def resolve_metadata(
    media_path: str | None,
    config: ProviderConfig | None = None,
    *,
    thumbnails: ThumbnailGenerator | None = None,
) -> ResolvedMetadata:
    """Resolve ``media_path`` with settings-derived config unless one is given."""

    resolver = MetadataResolver(
        config or ProviderConfig.from_settings(),
        thumbnails=thumbnails if thumbnails is not None else default_thumbnail_generator(),
    )
    return await resolver.resolve(media_path)
