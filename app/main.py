"""
FastAPI app entrypoint for the deepfake analysis service.

Wires the shared HTTP session and the classifier registry into the app
lifespan, installs CORS and the error handlers that keep every failure in
the { error, details } shape.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api import analysis, system
from app.config import settings
from app.core.file_validator import sanitize_log_message
from app.detection.errors import MalformedInput
from app.detection.registry import build_default_registry
from app.integrations import http_client

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

ANALYSIS_FAILURE_DETAILS = "Failed to analyze image with deepfake detection model"
NO_MEDIA_DETAILS = "The request did not contain usable media data"
PAYLOAD_TOO_LARGE_DETAILS = "The media payload exceeds the configured upload size limit"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await http_client.initialize()
    app.state.registry = build_default_registry(settings)
    logger.info(
        f"[STARTUP] Classifier chain: {[s.name for s in app.state.registry.sources]}"
    )
    yield
    await http_client.close()
    app.state.registry = None
    logger.info("[SHUTDOWN] Analysis service stopped")


app = FastAPI(title="Deepfake Analysis API", lifespan=lifespan)


def _cors_headers() -> dict:
    # Handler responses bypass CORSMiddleware
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": "*",
        "Access-Control-Allow-Headers": "*",
    }


def _error(status_code: int, error: str, details: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "details": details},
        headers=_cors_headers(),
    )


@app.exception_handler(MalformedInput)
async def malformed_input_handler(request: Request, exc: MalformedInput):
    logger.info(f"[ERROR HANDLER] Malformed input ({exc.status_code}): {exc.message}")
    if exc.status_code == 413:
        return _error(413, exc.message, PAYLOAD_TOO_LARGE_DETAILS)
    return _error(exc.status_code, exc.message, NO_MEDIA_DETAILS)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.info(f"[ERROR HANDLER] Invalid request body: {exc.errors()}")
    return _error(400, "Invalid request body", str(exc.errors()))


@app.exception_handler(StarletteHTTPException)
async def custom_http_exception_handler(request: Request, exc: StarletteHTTPException):
    headers = dict(getattr(exc, "headers", None) or {})
    headers.update(_cors_headers())
    logger.info(f"[ERROR HANDLER] Returning {exc.status_code} to client: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail), "details": f"HTTP {exc.status_code}"},
        headers=headers,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception(sanitize_log_message(f"[ERROR HANDLER] Unhandled error on {request.url.path}: {exc}"))
    return _error(500, "Internal processing error.", ANALYSIS_FAILURE_DETAILS)


# ---- CORS ----
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(system.router)
app.include_router(analysis.router)


if __name__ == "__main__":
    import os
    import uvicorn

    port = int(os.getenv("PORT", "8000"))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, log_level="info")
