"""Main FastAPI application entry point.

Serves the assistant question endpoint and catalog/health/sync endpoints, and
owns the lifecycle of the two background sync schedulers.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import logging
import os
import uuid
from datetime import datetime
from pathlib import Path

from app.config import load_settings
from app.db.config import (
    CatalogSessionLocal,
    SourceSessionLocal,
    dispose_engines,
)
from app.jobs.metadata_sync import MetadataSyncJob
from app.jobs.scheduler import PeriodicScheduler
from app.jobs.vector_publish import VectorPublishJob
from app.repositories.course_repo import CourseCatalogRepository
from app.repositories.source_course_repo import SourceCourseReader
from app.routers import assistant, catalog, health, sync
from app.services.answer_service import ConversationalQueryService
from app.services.assistant_client import AssistantClient
from app.services.http_client import build_http_client
from app.services.retrieval_index import InMemoryRetrievalIndex
from app.services.vector_store_client import VectorStoreClient
from app.utils.error_log import persist_error_record
from app.utils.feature_flags import is_feature_enabled

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Application metadata
APP_NAME = "LMS Training Buddy API"
VERSION = "1.0.0"
DESCRIPTION = """
LMS Training Buddy Backend API

* **Assistant**: answer course questions through the hosted assistant
* **Catalog**: read the mirrored course metadata
* **Sync**: trigger or inspect the metadata and vector store sync jobs
* **Health**: monitor application status
"""

# Initialize FastAPI app
app = FastAPI(
    title=APP_NAME,
    description=DESCRIPTION,
    version=VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware configuration
cors_origins = os.getenv(
    "CORS_ORIGINS",
    "http://localhost:3000,http://localhost:3001"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

# Global exception handlers


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions with consistent error format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "timestamp": datetime.utcnow().isoformat(),
            "path": str(request.url)
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Log, persist and hide unexpected failures behind a trace id"""
    trace_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    logger.error(
        "Unhandled exception occurred. TraceId: %s", trace_id, exc_info=exc
    )
    settings = getattr(request.app.state, "settings", None) or load_settings()
    try:
        await persist_error_record(
            Path(settings.error_log_dir),
            exc,
            request.method,
            request.url.path,
            trace_id,
        )
    except OSError as e:
        logger.error("Could not persist error record %s: %s", trace_id, e)
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "An unexpected error occurred.",
            "traceId": trace_id,
            "timestamp": datetime.utcnow().isoformat(),
            "path": request.url.path
        }
    )

# Include routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(assistant.router, prefix="/api/v1")
app.include_router(catalog.router, prefix="/api/v1")
app.include_router(sync.router, prefix="/api/v1")


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "name": APP_NAME,
        "version": VERSION,
        "status": "running",
        "environment": os.getenv("ENVIRONMENT", "development"),
        "timestamp": datetime.utcnow().isoformat(),
        "docs": "/docs",
        "health": "/api/v1/health"
    }


def _run_migrations() -> None:
    import subprocess
    logger.info("AUTO_MIGRATE enabled: running 'alembic upgrade head'")
    try:
        result = subprocess.run(
            ["alembic", "upgrade", "head"],
            cwd=os.path.join(os.path.dirname(__file__), ".."),
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.error(
            "Alembic not found - ensure it's installed in the environment"
        )
        return
    if result.returncode != 0:
        logger.error(
            "Alembic upgrade failed (code %s): %s\n%s",
            result.returncode,
            result.stdout,
            result.stderr,
        )
    else:
        logger.info("Alembic migration applied successfully")


@app.on_event("startup")
async def startup_event():
    """Wire clients, jobs and schedulers from the current settings"""
    settings = load_settings()
    app.state.settings = settings
    logger.info(f"Starting {APP_NAME} v{VERSION}")
    logger.info(f"Environment: {os.getenv('ENVIRONMENT', 'development')}")
    for name in settings.missing_required():
        logger.warning("Configuration value %s is not set", name)

    if os.getenv("AUTO_MIGRATE", "false").lower() in {"1", "true", "yes"}:
        _run_migrations()

    vector_http = build_http_client(
        settings.vector_store.base_url, settings.vector_store.api_key
    )
    beta = settings.ai_answer.beta_header_value
    assistant_http = build_http_client(
        settings.ai_answer.base_url,
        settings.ai_answer.api_key,
        extra_headers={"OpenAI-Beta": beta} if beta else None,
    )
    app.state.http_clients = [vector_http, assistant_http]

    catalog_repo = CourseCatalogRepository(CatalogSessionLocal)
    app.state.metadata_job = MetadataSyncJob(
        SourceCourseReader(SourceSessionLocal), catalog_repo
    )
    app.state.vector_job = VectorPublishJob(
        catalog_repo,
        VectorStoreClient(vector_http),
        settings.vector_store.vector_store_id,
        page_size=settings.background_jobs.publish_page_size,
        dedup=is_feature_enabled("vector_store_dedup"),
        purge=is_feature_enabled("vector_store_purge"),
    )
    app.state.answer_service = ConversationalQueryService(
        AssistantClient(assistant_http), settings.ai_answer.assistant_id
    )
    # Shared chunk index for in-process consumers; no route reads it yet
    app.state.retrieval_index = InMemoryRetrievalIndex()

    interval = settings.background_jobs.run_interval_seconds
    app.state.schedulers = [
        PeriodicScheduler("Course metadata sync", interval, app.state.metadata_job.run),
        PeriodicScheduler("Vector store sync", interval, app.state.vector_job.run),
    ]
    if is_feature_enabled("background_sync"):
        for scheduler in app.state.schedulers:
            scheduler.start()
    else:
        logger.info("Background sync disabled; schedulers not started")


@app.on_event("shutdown")
async def shutdown_event():
    """Stop schedulers and release outbound connections"""
    logger.info(f"Shutting down {APP_NAME}")
    for scheduler in getattr(app.state, "schedulers", []):
        await scheduler.stop()
    for client in getattr(app.state, "http_clients", []):
        await client.aclose()
    await dispose_engines()


if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8000))
    host = os.getenv("HOST", "0.0.0.0")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        reload=True,
        log_level="info"
    )
