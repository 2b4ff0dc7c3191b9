import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from gallery.feed.controller import PaginationController
from gallery.scheduler import build_scheduler, run_session_prune_job
from gallery.sessions import SessionNotFoundError, SessionRegistry
from gallery.settings import AppSettings, EnvSettings, GalleryYamlSettings

from fakes import FakeFeedClient


def _registry(idle_timeout_seconds=60):
    client = FakeFeedClient()
    return SessionRegistry(
        lambda: PaginationController(client),
        idle_timeout_seconds=idle_timeout_seconds,
    )


def test_open_creates_independent_sessions():
    registry = _registry()

    first = registry.open()
    second = registry.open()

    assert len(registry) == 2
    assert first.session_id != second.session_id
    assert first.controller is not second.controller
    assert first.session_id in registry


def test_get_unknown_session_raises():
    registry = _registry()

    with pytest.raises(SessionNotFoundError):
        registry.get("nope")


def test_get_refreshes_last_seen():
    registry = _registry()
    session = registry.open()
    session.last_seen = datetime.now(timezone.utc) - timedelta(minutes=5)

    registry.get(session.session_id)

    assert datetime.now(timezone.utc) - session.last_seen < timedelta(minutes=1)


def test_close_detaches_trigger():
    registry = _registry()
    session = registry.open()
    session.trigger.attach("p1-0")

    registry.close(session.session_id)

    assert len(registry) == 0
    assert session.visibility.observed_elements() == []
    with pytest.raises(SessionNotFoundError):
        registry.close(session.session_id)


def test_prune_idle_closes_only_stale_sessions():
    registry = _registry(idle_timeout_seconds=60)
    stale = registry.open()
    fresh = registry.open()
    now = datetime.now(timezone.utc)
    stale.last_seen = now - timedelta(minutes=10)
    fresh.last_seen = now

    pruned = registry.prune_idle(now=now)

    assert pruned == 1
    assert stale.session_id not in registry
    assert fresh.session_id in registry


def test_registry_rejects_non_positive_timeout():
    with pytest.raises(ValueError):
        _registry(idle_timeout_seconds=0)


def test_prune_job_uses_registry():
    registry = _registry(idle_timeout_seconds=1)
    session = registry.open()
    session.last_seen = datetime.now(timezone.utc) - timedelta(minutes=1)

    asyncio.run(run_session_prune_job(registry))

    assert len(registry) == 0


def test_build_scheduler_registers_prune_job(tmp_path):
    settings = AppSettings(
        env=EnvSettings(gallery_env="test"),
        yaml=GalleryYamlSettings.model_validate({"sessions": {"prune_interval_minutes": 7}}),
        project_root=tmp_path,
        config_path=tmp_path / "gallery.yaml",
    )
    registry = _registry()

    async def scenario():
        scheduler = build_scheduler(settings, registry)
        return scheduler.get_jobs()

    jobs = asyncio.run(scenario())

    assert [job.id for job in jobs] == ["session_prune_job"]
    assert jobs[0].trigger.interval == timedelta(minutes=7)
