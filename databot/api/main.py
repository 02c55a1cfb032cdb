"""
FastAPI Application

Main FastAPI application for DataBot with:
- Lifespan management for the credential cache, pipeline and turn runner
- Global exception handlers for collaborator errors
- Google Chat webhook and health endpoints

Usage:
    uvicorn databot.api.main:app --port 8000
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from databot.api.routes import health, webhook
from databot.api.runner import TurnRunner
from databot.config import get_settings
from databot.models.errors import DataBotError
from databot.pipeline.orchestrator import create_credential_cache, create_pipeline

logger = logging.getLogger(__name__)

# Global state for the pipeline and its shared collaborators
app_state = {
    "credentials": None,
    "pipeline": None,
    "runner": None,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """
    Lifespan context manager for startup and shutdown.

    Initializes:
    - Credential cache (one per process, shared by all turns)
    - Turn pipeline
    - Background turn runner
    """
    logger.info("Starting DataBot API server...")

    try:
        try:
            config = get_settings()
            credentials = create_credential_cache(config)
            pipeline = create_pipeline(config, credentials=credentials)
        except ValueError as e:
            logger.warning(f"Pipeline not initialized: {e}")
        else:
            app_state["credentials"] = credentials
            app_state["pipeline"] = pipeline
            app_state["runner"] = TurnRunner(pipeline)
            logger.info("DataBot API server started successfully")

        yield  # Application runs here

    finally:
        logger.info("Shutting down DataBot API server...")

        if app_state["runner"]:
            await app_state["runner"].drain()

        pipeline = app_state["pipeline"]
        if pipeline:
            for name, resource in (
                ("connector", pipeline.connector),
                ("messenger", pipeline.messenger),
                ("llm", pipeline.llm),
                ("credentials", pipeline.credentials),
            ):
                try:
                    await resource.close()
                except Exception as e:
                    logger.error(f"Error closing {name}: {e}")

        app_state.update(credentials=None, pipeline=None, runner=None)
        logger.info("DataBot API server shut down complete")


app = FastAPI(
    title="DataBot API",
    description="Google Chat bot answering questions with BigQuery",
    version="0.1.0",
    lifespan=lifespan,
)


@app.exception_handler(DataBotError)
async def databot_error_handler(request: Request, exc: DataBotError) -> JSONResponse:
    """Handle collaborator errors that escape a route."""
    logger.error(f"{exc.__class__.__name__}: {exc}", extra={"error": exc.to_dict()})
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": exc.__class__.__name__,
            "message": exc.message,
            "component": exc.component,
            "recoverable": exc.recoverable,
        },
    )


app.include_router(webhook.router, tags=["webhook"])
app.include_router(health.router, prefix="/api/v1", tags=["health"])


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "name": "DataBot API",
        "version": "0.1.0",
        "description": "Google Chat bot answering questions with BigQuery",
        "webhook": "/googlechat",
    }
