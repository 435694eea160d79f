"""Application configuration loaded from environment variables."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TITLE_FORMAT = "{show} - {date}"
DEFAULT_DATE_REPLACE_CHAR = "x"


class Settings(BaseSettings):
    encora_api_key: str | None = Field(default=None, alias="ENCORA_API_KEY")
    stagemedia_api_key: str | None = Field(default=None, alias="STAGEMEDIA_API_KEY")
    add_master_director: bool = Field(default=False, alias="ENCORA_ADD_MASTER_DIRECTOR")
    title_format: str = Field(default=DEFAULT_TITLE_FORMAT, alias="ENCORA_TITLE_FORMAT")
    date_replace_char: str = Field(
        default=DEFAULT_DATE_REPLACE_CHAR, alias="ENCORA_DATE_REPLACE_CHAR"
    )
    encora_base_url: str = Field(default="https://encora.it")
    stagemedia_base_url: str = Field(default="https://stagemedia.me")
    http_timeout: float = Field(default=10.0)
    user_agent: str = Field(default="EncoraProvider/0.1")
    ffmpeg_path: str = Field(default="ffmpeg", alias="FFMPEG_PATH")
    generate_thumbnails: bool = Field(default=True, alias="ENCORA_GENERATE_THUMBNAILS")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        populate_by_name=True,
        extra="ignore",
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


@dataclass(frozen=True, slots=True)
class ProviderConfig:
    """Options for a single resolution, passed explicitly into the resolver."""

    encora_api_key: str | None = None
    stagemedia_api_key: str | None = None
    add_master_director: bool = False
    title_format: str = DEFAULT_TITLE_FORMAT
    date_replace_char: str = DEFAULT_DATE_REPLACE_CHAR
    encora_base_url: str = "https://encora.it"
    stagemedia_base_url: str = "https://stagemedia.me"
    timeout: float = 10.0
    user_agent: str = "EncoraProvider/0.1"

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "ProviderConfig":
        settings = settings or get_settings()
        return cls(
            encora_api_key=settings.encora_api_key,
            stagemedia_api_key=settings.stagemedia_api_key,
            add_master_director=settings.add_master_director,
            title_format=settings.title_format,
            date_replace_char=settings.date_replace_char,
            encora_base_url=settings.encora_base_url.rstrip("/"),
            stagemedia_base_url=settings.stagemedia_base_url.rstrip("/"),
            timeout=settings.http_timeout,
            user_agent=settings.user_agent,
        )

    @property
    def effective_title_format(self) -> str:
        return self.title_format if self.title_format and self.title_format.strip() else DEFAULT_TITLE_FORMAT

    @property
    def replace_char(self) -> str:
        # Only the first character is used as the unknown-date placeholder.
        raw = (self.date_replace_char or "").strip()
        return raw[0] if raw else DEFAULT_DATE_REPLACE_CHAR

    def __repr__(self) -> str:  # masks credentials
        return (
            f"ProviderConfig(encora_api_key={'***' if self.encora_api_key else None}, "
            f"stagemedia_api_key={'***' if self.stagemedia_api_key else None}, "
            f"add_master_director={self.add_master_director}, "
            f"title_format={self.title_format!r}, date_replace_char={self.date_replace_char!r})"
        )
