from __future__ import annotations

from typing import Protocol

from ...domain.models import PhotoRecord


class PhotosAdapterError(RuntimeError):
    """Raised when a page of photos cannot be loaded from the photo API."""


class PhotoFeedClient(Protocol):
    def get_page(self, page: int) -> list[PhotoRecord]:
        """Return the photos of one 1-based listing page, in API order."""
