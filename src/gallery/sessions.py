from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Callable
from uuid import uuid4

from .feed.controller import PaginationController
from .feed.trigger import VisibilityTrigger
from .feed.visibility import ReportedVisibility
from .view import GalleryView

LOGGER = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """Raised when a gallery session id is unknown or was already closed."""


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class GallerySession:
    session_id: str
    controller: PaginationController
    visibility: ReportedVisibility
    trigger: VisibilityTrigger
    view: GalleryView
    created_at: datetime = field(default_factory=_utc_now)
    last_seen: datetime = field(default_factory=_utc_now)

    def touch(self, now: datetime | None = None) -> None:
        self.last_seen = now or _utc_now()

    def is_idle(self, timeout: timedelta, now: datetime | None = None) -> bool:
        reference = now or _utc_now()
        return reference - self.last_seen > timeout


def build_session(session_id: str, controller: PaginationController) -> GallerySession:
    visibility = ReportedVisibility()
    trigger = VisibilityTrigger(
        observer=visibility,
        is_loading=controller.is_loading,
        on_visible=controller.advance,
    )
    return GallerySession(
        session_id=session_id,
        controller=controller,
        visibility=visibility,
        trigger=trigger,
        view=GalleryView(controller, trigger),
    )


class SessionRegistry:
    def __init__(
        self,
        controller_factory: Callable[[], PaginationController],
        *,
        idle_timeout_seconds: int = 30 * 60,
    ) -> None:
        if idle_timeout_seconds <= 0:
            raise ValueError("idle_timeout_seconds must be > 0")
        self._controller_factory = controller_factory
        self._idle_timeout = timedelta(seconds=idle_timeout_seconds)
        self._sessions: dict[str, GallerySession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def open(self) -> GallerySession:
        session = build_session(uuid4().hex, self._controller_factory())
        self._sessions[session.session_id] = session
        LOGGER.info("Opened gallery session '%s'", session.session_id)
        return session

    def get(self, session_id: str) -> GallerySession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.touch()
        return session

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.trigger.detach()
        LOGGER.info("Closed gallery session '%s'", session_id)

    def prune_idle(self, *, now: datetime | None = None) -> int:
        idle_ids = [
            session_id
            for session_id, session in self._sessions.items()
            if session.is_idle(self._idle_timeout, now)
        ]
        for session_id in idle_ids:
            self.close(session_id)
        return len(idle_ids)
