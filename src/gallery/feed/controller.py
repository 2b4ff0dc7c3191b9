from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from ..adapters.photos import PhotoFeedClient, PhotosAdapterError
from ..domain.models import PhotoRecord

LOGGER = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to load images"


@dataclass(slots=True)
class FeedState:
    items: list[PhotoRecord] = field(default_factory=list)
    next_page: int = 1
    is_loading: bool = False
    last_error: str | None = None


class PaginationController:
    """Single-flight page loader for one gallery view.

    ``advance()`` marks the state as loading before it returns and schedules
    the fetch of ``next_page`` on the running event loop. Calls made while a
    fetch is outstanding are dropped, not queued. Results are merged in one
    synchronous step once the fetch resolves, so readers never observe a
    half-applied page.
    """

    def __init__(
        self,
        client: PhotoFeedClient,
        *,
        fetch_timeout_seconds: float | None = None,
        clear_error_on_success: bool = False,
    ) -> None:
        self._client = client
        self._fetch_timeout_seconds = fetch_timeout_seconds
        self._clear_error_on_success = clear_error_on_success
        self._state = FeedState()
        self._inflight: asyncio.Task[None] | None = None

    @property
    def state(self) -> FeedState:
        return self._state

    def is_loading(self) -> bool:
        return self._state.is_loading

    def advance(self) -> None:
        if self._state.is_loading:
            LOGGER.debug("Ignoring advance while page %s is loading", self._state.next_page)
            return

        self._state.is_loading = True
        page = self._state.next_page
        loop = asyncio.get_running_loop()
        self._inflight = loop.create_task(self._load_page(page))

    async def settle(self) -> None:
        task = self._inflight
        if task is None or task.done():
            return
        # Cancelling one waiter must not cancel the fetch other handlers share.
        await asyncio.shield(task)

    def snapshot(self) -> dict[str, Any]:
        return {
            "next_page": self._state.next_page,
            "is_loading": self._state.is_loading,
            "last_error": self._state.last_error,
            "count": len(self._state.items),
            "items": [item.model_dump(mode="json") for item in self._state.items],
        }

    async def _fetch(self, page: int) -> list[PhotoRecord]:
        call = asyncio.to_thread(self._client.get_page, page)
        if self._fetch_timeout_seconds is None:
            return await call
        return await asyncio.wait_for(call, timeout=self._fetch_timeout_seconds)

    async def _load_page(self, page: int) -> None:
        try:
            photos = await self._fetch(page)
        except PhotosAdapterError as exc:
            LOGGER.warning("Loading page %s failed: %s", page, exc)
            self._fail()
            return
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Loading page %s timed out after %ss", page, self._fetch_timeout_seconds
            )
            self._fail()
            return
        except asyncio.CancelledError:
            LOGGER.warning("Loading page %s was cancelled", page)
            self._fail()
            raise
        except Exception:
            LOGGER.exception("Loading page %s failed", page)
            self._fail()
            return

        self._state.items.extend(photos)
        self._state.next_page = page + 1
        if self._clear_error_on_success:
            self._state.last_error = None
        self._state.is_loading = False
        LOGGER.info(
            "Loaded page %s with %s photos (%s total)", page, len(photos), len(self._state.items)
        )

    def _fail(self) -> None:
        self._state.last_error = FETCH_FAILED_MESSAGE
        self._state.is_loading = False
