from __future__ import annotations

import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.parse import urlencode
from urllib.request import Request, urlopen

from pydantic import ValidationError

from ...domain.models import PhotoRecord
from .base import PhotosAdapterError

UNSPLASH_PHOTOS_URL = "https://api.unsplash.com/photos"
DEFAULT_TIMEOUT_SECONDS = 10


def _fetch_json(url: str, *, timeout: float) -> Any:
    request = Request(
        url,
        headers={"User-Agent": "photo-gallery/0.1", "Accept-Version": "v1"},
    )
    try:
        with urlopen(request, timeout=timeout) as response:
            return json.loads(response.read().decode("utf-8"))
    except (HTTPError, URLError, TimeoutError, json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PhotosAdapterError("Failed to fetch photos from Unsplash") from exc


def _nested_text(item: dict[str, Any], section: str, field_name: str) -> str:
    container = item.get(section)
    if not isinstance(container, dict):
        raise PhotosAdapterError(f"Unsplash photo is missing '{section}'")
    value = container.get(field_name)
    if not isinstance(value, str):
        raise PhotosAdapterError(f"Unsplash photo is missing '{section}.{field_name}'")
    return value


def _parse_photo(item: Any) -> PhotoRecord:
    if not isinstance(item, dict):
        raise PhotosAdapterError("Unsplash photo entry was not an object")

    raw_id = item.get("id")
    if not isinstance(raw_id, str):
        raise PhotosAdapterError("Unsplash photo is missing 'id'")

    alt_description = item.get("alt_description")
    try:
        return PhotoRecord(
            id=raw_id,
            thumbnail_url=_nested_text(item, "urls", "small"),
            author_name=_nested_text(item, "user", "name"),
            alt_text=alt_description if isinstance(alt_description, str) else None,
        )
    except ValidationError as exc:
        raise PhotosAdapterError(f"Unsplash photo '{raw_id}' was invalid") from exc


class UnsplashPhotosAdapter:
    def __init__(
        self,
        *,
        access_key: str,
        api_url: str = UNSPLASH_PHOTOS_URL,
        per_page: int | None = None,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not access_key.strip():
            raise ValueError("Unsplash access key must not be empty")
        self._access_key = access_key.strip()
        self._api_url = api_url
        self._per_page = per_page
        self._timeout_seconds = timeout_seconds

    def build_url(self, page: int) -> str:
        if page < 1:
            raise ValueError("page must be >= 1")
        params: dict[str, str] = {"page": str(page), "client_id": self._access_key}
        if self._per_page is not None:
            params["per_page"] = str(self._per_page)
        return f"{self._api_url}?{urlencode(params)}"

    def get_page(self, page: int) -> list[PhotoRecord]:
        payload = _fetch_json(self.build_url(page), timeout=self._timeout_seconds)
        if not isinstance(payload, list):
            raise PhotosAdapterError("Unexpected Unsplash response shape")
        return [_parse_photo(item) for item in payload]
