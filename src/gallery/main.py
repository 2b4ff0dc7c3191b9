from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path

from fastapi import APIRouter, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, ConfigDict, Field

from .adapters.photos import PhotoFeedClient, UnsplashPhotosAdapter
from .feed.controller import PaginationController
from .scheduler import build_scheduler
from .sessions import GallerySession, SessionNotFoundError, SessionRegistry
from .settings import AppSettings, load_settings

LOGGER = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parent
WEB_DIR = BASE_DIR / "web"
TEMPLATES_DIR = WEB_DIR / "templates"
STATIC_DIR = WEB_DIR / "static"

templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter()


class VisibilityReport(BaseModel):
    model_config = ConfigDict(extra="ignore")

    element_id: str = Field(min_length=1)
    visible: bool


def _get_settings(request: Request) -> AppSettings:
    return request.app.state.settings


def _get_registry(request: Request) -> SessionRegistry:
    return request.app.state.sessions


def _get_session(request: Request, session_id: str) -> GallerySession:
    try:
        return _get_registry(request).get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Gallery session not found") from exc


def _build_feed_client(settings: AppSettings) -> UnsplashPhotosAdapter:
    access_key = settings.env.unsplash_access_key
    if access_key is None:
        raise ValueError("UNSPLASH_ACCESS_KEY is not configured")
    feed = settings.yaml.feed
    return UnsplashPhotosAdapter(
        access_key=access_key,
        api_url=feed.api_url,
        per_page=feed.per_page,
        timeout_seconds=feed.request_timeout_seconds,
    )


def _build_registry(settings: AppSettings, client: PhotoFeedClient) -> SessionRegistry:
    feed = settings.yaml.feed

    def controller_factory() -> PaginationController:
        return PaginationController(
            client,
            fetch_timeout_seconds=feed.fetch_timeout_seconds,
            clear_error_on_success=feed.clear_error_on_success,
        )

    return SessionRegistry(
        controller_factory,
        idle_timeout_seconds=settings.yaml.sessions.idle_timeout_minutes * 60,
    )


def _grid_response(request: Request, session: GallerySession) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "components/gallery_grid.html",
        {
            "session_id": session.session_id,
            **session.view.render_context(),
        },
    )


def create_app(
    *,
    settings: AppSettings | None = None,
    feed_client: PhotoFeedClient | None = None,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(application: FastAPI):
        app_settings = settings or load_settings()
        logging.getLogger("gallery").setLevel(app_settings.env.gallery_log_level)
        client = feed_client or _build_feed_client(app_settings)
        registry = _build_registry(app_settings, client)
        scheduler = build_scheduler(app_settings, registry)
        scheduler.start()

        application.state.settings = app_settings
        application.state.sessions = registry
        application.state.scheduler = scheduler
        application.state.started_at_utc = datetime.now(timezone.utc)
        LOGGER.info("Photo gallery started in '%s' mode", app_settings.env.gallery_env)

        try:
            yield
        finally:
            if scheduler.running:
                scheduler.shutdown(wait=False)

    application = FastAPI(title="Photo Gallery", version="0.1.0", lifespan=lifespan)
    application.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    application.include_router(router)
    return application


@router.get("/", response_class=HTMLResponse)
async def gallery_page(request: Request) -> HTMLResponse:
    settings = _get_settings(request)
    session = _get_registry(request).open()
    session.view.mount()
    await session.controller.settle()

    return templates.TemplateResponse(
        request,
        "gallery.html",
        {
            "title": settings.yaml.ui.title,
            "environment": settings.env.gallery_env,
            "session_id": session.session_id,
            **session.view.render_context(),
        },
    )


@router.get("/partials/gallery/{session_id}", response_class=HTMLResponse)
async def partial_gallery(request: Request, session_id: str) -> HTMLResponse:
    session = _get_session(request, session_id)
    return _grid_response(request, session)


@router.post("/api/sessions/{session_id}/visibility", response_class=HTMLResponse)
async def report_visibility(
    request: Request, session_id: str, report: VisibilityReport
) -> HTMLResponse:
    session = _get_session(request, session_id)
    session.visibility.report(report.element_id, report.visible)
    await session.controller.settle()
    return _grid_response(request, session)


@router.get("/api/sessions/{session_id}", response_class=JSONResponse)
async def session_state(request: Request, session_id: str) -> JSONResponse:
    session = _get_session(request, session_id)
    return JSONResponse(
        {
            "session_id": session.session_id,
            "observed_element": session.trigger.observed_element,
            **session.controller.snapshot(),
        }
    )


@router.post("/api/sessions/{session_id}/unmount", status_code=204)
async def unmount_session(request: Request, session_id: str) -> Response:
    try:
        _get_registry(request).close(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Gallery session not found") from exc
    return Response(status_code=204)


@router.get("/health", response_class=JSONResponse)
async def health(request: Request) -> JSONResponse:
    settings = _get_settings(request)
    return JSONResponse(
        {
            "status": "ok",
            "service": "photo-gallery",
            "environment": settings.env.gallery_env,
            "session_count": len(_get_registry(request)),
            "scheduler_running": request.app.state.scheduler.running,
            "started_at_utc": request.app.state.started_at_utc.isoformat(),
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
    )


app = create_app()
