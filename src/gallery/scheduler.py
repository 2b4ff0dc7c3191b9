from __future__ import annotations

import asyncio
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .sessions import SessionRegistry
from .settings import AppSettings

LOGGER = logging.getLogger(__name__)


async def run_session_prune_job(registry: SessionRegistry) -> None:
    pruned = registry.prune_idle()
    if pruned:
        LOGGER.info("Session prune job closed %s idle gallery sessions", pruned)


def build_scheduler(
    settings: AppSettings,
    registry: SessionRegistry,
    *,
    event_loop: asyncio.AbstractEventLoop | None = None,
) -> AsyncIOScheduler:
    # Coroutine jobs run on the application's loop, alongside the request handlers.
    scheduler = AsyncIOScheduler(
        timezone="UTC",
        event_loop=event_loop or asyncio.get_running_loop(),
    )
    scheduler.add_job(
        run_session_prune_job,
        "interval",
        kwargs={"registry": registry},
        minutes=settings.yaml.sessions.prune_interval_minutes,
        id="session_prune_job",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
        misfire_grace_time=60,
    )
    return scheduler
