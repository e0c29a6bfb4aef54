"""FastAPI application setup for the retrieval core."""

from __future__ import annotations

import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
import uvicorn

from ghostwriter.api.dependencies import (
    get_app_settings,
    get_database,
    get_embedding_provider,
    get_ingest_pipeline,
    get_search_service,
)
from ghostwriter.api.routes_admin import router as admin_router
from ghostwriter.api.routes_ingest import router as ingest_router
from ghostwriter.api.routes_search import router as search_router
from ghostwriter.core.errors import GhostwriterError
from ghostwriter.core.logging import configure_logging, get_logger

configure_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    """Warm up core singletons on startup."""
    settings = get_app_settings()
    get_database()
    get_embedding_provider()
    get_ingest_pipeline()
    get_search_service()
    logger.info("Retrieval core ready (db=%s, embeddings=%s)", settings.db_path, settings.embedding_backend)
    yield


app = FastAPI(
    title="Ghostwriter Retrieval",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

app.include_router(ingest_router, tags=["ingest"])
app.include_router(search_router, tags=["search"])
app.include_router(admin_router, tags=["admin"])


@app.exception_handler(GhostwriterError)
async def handle_core_error(_: Request, exc: GhostwriterError) -> JSONResponse:
    status = 400 if isinstance(exc, ValueError) else 500
    return JSONResponse(status_code=status, content={"detail": str(exc)})


@app.get("/health", tags=["admin"])
def health() -> dict[str, bool]:
    """Simple liveness check."""
    return {"ok": True}


def main() -> None:
    """Serve the API with uvicorn (``GHW_SERVER_HOST`` / ``GHW_SERVER_PORT``)."""
    uvicorn.run(
        "ghostwriter.app:app",
        host=os.environ.get("GHW_SERVER_HOST", "127.0.0.1"),
        port=int(os.environ.get("GHW_SERVER_PORT", "8000")),
        log_level="info",
    )


if __name__ == "__main__":
    main()
