from __future__ import annotations

import logging
from typing import Callable

from .visibility import Observation, VisibilityObserver

LOGGER = logging.getLogger(__name__)


class VisibilityTrigger:
    """Turns "last item became visible" into a call to ``on_visible``.

    Holds at most one observation. ``is_loading`` is an accessor and is read
    on every attach, never captured.
    """

    def __init__(
        self,
        *,
        observer: VisibilityObserver,
        is_loading: Callable[[], bool],
        on_visible: Callable[[], None],
    ) -> None:
        self._observer = observer
        self._is_loading = is_loading
        self._on_visible = on_visible
        self._observation: Observation | None = None
        self._element: str | None = None
        self._visible = False
        self._generation = 0

    @property
    def observed_element(self) -> str | None:
        return self._element

    @property
    def is_attached(self) -> bool:
        return self._observation is not None

    def attach(self, element: str | None) -> None:
        self.detach()

        if self._is_loading():
            LOGGER.debug("Skipping attach to '%s' while a page is loading", element)
            return
        if element is None:
            return

        self._generation += 1
        generation = self._generation

        def handle_visibility(visible: bool) -> None:
            if generation == self._generation:
                self._handle_visibility(visible)

        self._visible = False
        self._element = element
        self._observation = self._observer.observe(element, handle_visibility)

    def detach(self) -> None:
        observation = self._observation
        self._observation = None
        self._element = None
        self._visible = False
        self._generation += 1
        if observation is not None:
            observation.disconnect()

    def _handle_visibility(self, visible: bool) -> None:
        was_visible = self._visible
        self._visible = visible
        if visible and not was_visible:
            self._on_visible()
