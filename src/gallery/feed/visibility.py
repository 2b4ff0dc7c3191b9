from __future__ import annotations

import logging
from typing import Callable, Protocol

LOGGER = logging.getLogger(__name__)

VisibilityCallback = Callable[[bool], None]


class Observation(Protocol):
    def disconnect(self) -> None:
        """Stop delivering visibility changes for the observed element."""


class VisibilityObserver(Protocol):
    def observe(self, element: str, callback: VisibilityCallback) -> Observation:
        """Begin observing ``element``; ``callback`` receives is-visible changes."""


class ReportedObservation:
    def __init__(self, owner: ReportedVisibility, element: str, callback: VisibilityCallback) -> None:
        self._owner = owner
        self.element = element
        self.callback = callback
        self.active = True

    def disconnect(self) -> None:
        if not self.active:
            return
        self.active = False
        self._owner._remove(self)


class ReportedVisibility:
    """Visibility capability fed by intersection reports from the browser.

    The page observes the card the server flagged as last and posts every
    intersection change; ``report`` routes it to the live observations of
    that element. Reports for elements nobody observes are ignored.
    """

    def __init__(self) -> None:
        self._observations: dict[str, list[ReportedObservation]] = {}

    def observe(self, element: str, callback: VisibilityCallback) -> ReportedObservation:
        observation = ReportedObservation(self, element, callback)
        self._observations.setdefault(element, []).append(observation)
        return observation

    def report(self, element: str, visible: bool) -> int:
        observations = list(self._observations.get(element, ()))
        if not observations:
            LOGGER.debug("Ignoring visibility report for unobserved element '%s'", element)
            return 0
        for observation in observations:
            if observation.active:
                observation.callback(visible)
        return len(observations)

    def observed_elements(self) -> list[str]:
        return sorted(self._observations)

    def _remove(self, observation: ReportedObservation) -> None:
        observations = self._observations.get(observation.element)
        if not observations:
            return
        if observation in observations:
            observations.remove(observation)
        if not observations:
            del self._observations[observation.element]
