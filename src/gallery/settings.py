from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

PROJECT_ROOT = Path(__file__).resolve().parents[2]


class UiSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    title: str = "Photo Gallery"

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        text = value.strip()
        if not text:
            raise ValueError("ui.title must not be empty")
        return text


class FeedSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    api_url: str = "https://api.unsplash.com/photos"
    per_page: int | None = Field(default=None, ge=1, le=30)
    request_timeout_seconds: float = Field(default=10, ge=1, le=120)
    fetch_timeout_seconds: float | None = Field(default=30, gt=0, le=600)
    clear_error_on_success: bool = False

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, value: str) -> str:
        text = value.strip()
        parsed = urlparse(text)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError("feed.api_url must be an absolute http(s) URL")
        return text

    @model_validator(mode="after")
    def validate_timeouts(self) -> FeedSettings:
        # A request outliving the fetch timeout could overlap the retry of its page.
        if (
            self.fetch_timeout_seconds is not None
            and self.request_timeout_seconds > self.fetch_timeout_seconds
        ):
            raise ValueError(
                "feed.request_timeout_seconds must not exceed feed.fetch_timeout_seconds"
            )
        return self


class SessionSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    idle_timeout_minutes: int = Field(default=30, ge=1, le=1440)
    prune_interval_minutes: int = Field(default=5, ge=1, le=60)


class GalleryYamlSettings(BaseModel):
    model_config = ConfigDict(extra="ignore")

    ui: UiSettings = Field(default_factory=UiSettings)
    feed: FeedSettings = Field(default_factory=FeedSettings)
    sessions: SessionSettings = Field(default_factory=SessionSettings)


class EnvSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    gallery_env: Literal["dev", "test", "prod"] = "dev"
    gallery_config_path: Path = Path("config/gallery.yaml")
    gallery_log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    unsplash_access_key: str | None = None

    @field_validator("gallery_log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @field_validator("unsplash_access_key")
    @classmethod
    def validate_access_key(cls, value: str | None) -> str | None:
        if value is None:
            return None
        text = value.strip()
        return text or None


class AppSettings(BaseModel):
    env: EnvSettings
    yaml: GalleryYamlSettings
    project_root: Path
    config_path: Path


def _resolve_project_path(path: Path) -> Path:
    if path.is_absolute():
        return path
    return (PROJECT_ROOT / path).resolve()


def _load_yaml_settings(path: Path) -> GalleryYamlSettings:
    if not path.exists():
        raise FileNotFoundError(f"Gallery config file not found: {path}")

    raw_config = yaml.safe_load(path.read_text(encoding="utf-8"))
    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ValueError("Gallery config must be a YAML mapping/object at the top level")
    return GalleryYamlSettings.model_validate(raw_config)


@lru_cache(maxsize=1)
def load_settings() -> AppSettings:
    env = EnvSettings()
    config_path = _resolve_project_path(env.gallery_config_path)
    yaml_settings = _load_yaml_settings(config_path)
    return AppSettings(
        env=env,
        yaml=yaml_settings,
        project_root=PROJECT_ROOT,
        config_path=config_path,
    )
