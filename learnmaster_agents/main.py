"""LearnMaster Agents - FastAPI Application Entry Point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api.v1.dependencies import close_clients
from .api.v1.endpoints.exports import router as exports_router
from .api.v1.endpoints.learning_paths import router as learning_paths_router
from .api.v1.endpoints.research import router as research_router
from .api.v1.endpoints.transcripts import router as transcripts_router
from .api.v1.endpoints.verification import router as verification_router
from .core.config import get_settings
from .core.logging_config import configure_logging

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    logger.info(
        "service_starting",
        port=settings.API_PORT,
        llm_model=settings.LLM_MODEL,
        ai_enabled=settings.ai_enabled,
        searxng=settings.SEARXNG_BASE_URL,
        url_probe=settings.ENABLE_URL_PROBE,
    )

    yield

    await close_clients()
    logger.info("service_stopped")


app = FastAPI(
    title="LearnMaster Agents API",
    description="Learning path assembly with resource verification and quality scoring",
    version=__version__,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/v1/health", tags=["Health"])
async def health_check() -> JSONResponse:
    """Health check endpoint.

    Returns:
        JSONResponse: Service health status
    """
    settings = get_settings()
    return JSONResponse(
        content={
            "status": "healthy",
            "service": "learnmaster-agents",
            "version": __version__,
            "aiEnabled": settings.ai_enabled,
            "environment": "development" if settings.DEBUG else "production",
        }
    )


@app.get("/", tags=["Root"])
async def root() -> JSONResponse:
    """Root endpoint with service information."""
    return JSONResponse(
        content={
            "service": "LearnMaster Agents API",
            "version": __version__,
            "docs": "/api/docs",
            "health": "/api/v1/health",
            "status": "ready",
        }
    )


app.include_router(learning_paths_router, prefix="/api")
app.include_router(verification_router, prefix="/api")
app.include_router(research_router, prefix="/api")
app.include_router(transcripts_router, prefix="/api")
app.include_router(exports_router, prefix="/api")


def run() -> None:
    """Serve the API with uvicorn using the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "learnmaster_agents.main:app",
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
