"""FastAPI application entry point."""

import logging
import sys
from collections.abc import AsyncGenerator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import get_settings
from app.errors import INVALID_JSON, MISSING_FIELDS, ChatError
from app.llm.chat.reaper import SessionReaper
from app.llm.chat.store import SessionStore
from app.llm.gemini_client import get_gemini_client

settings = get_settings()

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup and shutdown."""
    # Startup
    client = get_gemini_client()
    if client is None:
        logger.warning("GEMINI_API_KEY not found in environment; replies will use offline mode")
    else:
        logger.info(f"Gemini API key loaded, using model {client.model}")

    store = SessionStore(client=client)
    reaper = SessionReaper(store, ttl=timedelta(seconds=settings.session_ttl_seconds))
    app.state.session_store = store
    await reaper.start()

    yield

    # Shutdown
    await reaper.stop()


app = FastAPI(
    title="Gemini Fitness Assistant",
    description="Chat proxy relaying conversations with Google Gemini to the browser",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.cors_origin_regex,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "Cache-Control"],
)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Log every incoming request with its origin and user agent."""
    logger.info(
        f"{request.method} {request.url.path} - "
        f"Origin: {request.headers.get('origin', 'No origin')} - "
        f"User-Agent: {request.headers.get('user-agent', 'No user-agent')}"
    )
    return await call_next(request)


@app.exception_handler(ChatError)
async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    """Render service errors as ``{"error": ...}``."""
    content: dict[str, str] = {"error": exc.message}
    if exc.details and settings.is_development:
        content["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies get a 400 in the same shape as other errors."""
    errors = exc.errors()
    logger.warning(f"Rejected request body for {request.url.path}: {errors}")
    if any(error.get("type") == "json_invalid" for error in errors):
        return JSONResponse(status_code=400, content={"error": INVALID_JSON})
    return JSONResponse(status_code=400, content={"error": MISSING_FIELDS})


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500; details are only exposed in development."""
    logger.exception(f"Unhandled error: {exc}")
    content: dict[str, str] = {"error": "Internal server error"}
    if settings.is_development:
        content["details"] = str(exc)
    return JSONResponse(status_code=500, content=content)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint."""
    return {"status": "OK", "message": "Gemini Fitness Assistant API is running!"}


# Import and include routers after app is created to avoid circular imports
from app.api import chat  # noqa: E402

app.include_router(chat.router, prefix="/api", tags=["chat"])
