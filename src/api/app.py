"""HTTP API: trigger ingestion, read the feed, manage sources."""

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from pydantic import BaseModel

from ..config.logging_setup import configure_logging
from ..config.source_registry import RegistryError, SourceRegistry
from ..pipeline.orchestrator import FetchOrchestrator
from ..pipeline.scheduling import schedule_fetches
from ..storage.interfaces import ArticleStoreInterface, StoreReadError
from .views import render_plain_text

logger = structlog.get_logger()

router = APIRouter()


class SourceCreate(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None


class SourceUpdate(BaseModel):
    enabled: bool


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# ===== HEALTH CHECK ENDPOINT =====
@router.get("/health")
def health_check(request: Request):
    """Health check endpoint for load balancers."""
    try:
        articles = request.app.state.store.load_all()
    except StoreReadError as e:
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "error": str(e)}
        )
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "articles": len(articles),
        "fetch_running": request.app.state.orchestrator.is_running,
    }


# ===== SOURCES =====
@router.get("/api/sources")
def list_sources(request: Request):
    try:
        sources = request.app.state.registry.list_sources()
    except RegistryError as e:
        logger.error("sources_read_failed", error=str(e))
        return _error(500, "Failed to read sources")
    return [s.to_dict() for s in sources]


@router.post("/api/sources")
def add_source(request: Request, body: SourceCreate):
    if not body.name or not body.url or not body.type:
        return _error(400, "Missing required fields")
    try:
        source = request.app.state.registry.add(body.name, body.url, body.type)
    except ValueError as e:
        return _error(400, str(e))
    except RegistryError as e:
        logger.error("source_add_failed", error=str(e))
        return _error(500, "Failed to add source")
    return {"success": True, "id": source.id}


@router.patch("/api/sources/{source_id}")
def update_source(request: Request, source_id: str, body: SourceUpdate):
    try:
        found = request.app.state.registry.set_enabled(source_id, body.enabled)
    except RegistryError as e:
        logger.error("source_update_failed", id=source_id, error=str(e))
        return _error(500, "Failed to update source")
    if not found:
        return _error(404, "Source not found")
    return {"success": True}


@router.delete("/api/sources/{source_id}")
def delete_source(request: Request, source_id: str):
    try:
        request.app.state.registry.remove(source_id)
    except RegistryError as e:
        logger.error("source_delete_failed", id=source_id, error=str(e))
        return _error(500, "Failed to delete source")
    return {"success": True}


# ===== FEED =====
@router.get("/api/feed")
def get_feed(request: Request):
    try:
        articles = request.app.state.store.feed()
    except StoreReadError as e:
        logger.error("feed_read_failed", error=str(e))
        return _error(500, "Failed to read articles")
    return [a.to_dict() for a in articles]


@router.post("/api/fetch")
async def trigger_fetch(request: Request):
    result = await request.app.state.orchestrator.run()
    return result.to_dict()


@router.get("/text/plain", response_class=PlainTextResponse)
def feed_plain_text(request: Request):
    try:
        articles = request.app.state.store.feed()
    except StoreReadError as e:
        logger.error("feed_read_failed", error=str(e))
        return PlainTextResponse("Error loading feed\n", status_code=500)
    return PlainTextResponse(render_plain_text(articles))


@router.get("/")
def index():
    return RedirectResponse("/text/plain")


def create_app(
    registry: SourceRegistry = None,
    store: ArticleStoreInterface = None,
    orchestrator: FetchOrchestrator = None,
    enable_scheduler: bool = True,
) -> FastAPI:
    """Build the application. Collaborators default to the configured ones."""
    if registry is None or store is None:
        from ..storage.factory import get_article_store, get_source_registry
        registry = registry or get_source_registry()
        store = store or get_article_store()
    if orchestrator is None:
        from ..summarization.summarizer import get_summarizer
        orchestrator = FetchOrchestrator(registry=registry, store=store, summarizer=get_summarizer())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        scheduler = None
        if enable_scheduler:
            scheduler = AsyncIOScheduler()
            schedule_fetches(scheduler, orchestrator)
            scheduler.start()
            logger.info("scheduler_started", jobs=len(scheduler.get_jobs()))
        yield
        if scheduler:
            scheduler.shutdown(wait=False)
            logger.info("scheduler_stopped")

    app = FastAPI(title="Newsfeed", lifespan=lifespan)
    app.state.registry = registry
    app.state.store = store
    app.state.orchestrator = orchestrator
    app.include_router(router)
    return app
