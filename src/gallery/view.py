from __future__ import annotations

from typing import Any

from .feed.controller import PaginationController
from .feed.trigger import VisibilityTrigger


class GalleryView:
    """Template context for the photo grid of one mounted gallery."""

    def __init__(self, controller: PaginationController, trigger: VisibilityTrigger) -> None:
        self._controller = controller
        self._trigger = trigger
        self._mounted = False
        self._wired_count = 0

    @property
    def mounted(self) -> bool:
        return self._mounted

    def mount(self) -> None:
        if self._mounted:
            return
        self._mounted = True
        self._controller.advance()

    def render_context(self) -> dict[str, Any]:
        state = self._controller.state
        last_id = state.items[-1].id if state.items else None
        self._wire_last_item(last_id, len(state.items))

        # Duplicate ids across pages are kept, so "last" is positional.
        last_index = len(state.items) - 1
        photo_rows: list[dict[str, Any]] = []
        for index, photo in enumerate(state.items):
            photo_rows.append(
                {
                    "id": photo.id,
                    "url": photo.thumbnail_url,
                    "alt": photo.alt_text or "",
                    "author": photo.author_name,
                    "is_last": index == last_index,
                }
            )

        return {
            "photo_items": photo_rows,
            "photo_total_count": len(photo_rows),
            "photo_last_id": last_id,
            "gallery_error": state.last_error,
            "gallery_is_loading": state.is_loading,
            "gallery_next_page": state.next_page,
        }

    def _wire_last_item(self, last_id: str | None, count: int) -> None:
        # A new page can end with the previous last id, so position counts too.
        if (
            self._trigger.is_attached
            and self._trigger.observed_element == last_id
            and self._wired_count == count
        ):
            return
        self._wired_count = count
        self._trigger.attach(last_id)
