"""FastAPI application entry point."""
import time
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Awaitable, Callable

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.stylize import error_response
from app.api.stylize import router as stylize_router
from app.core.config import get_settings
from app.core.logging import setup_logging

# Setup logging
logger = setup_logging("main")
access_logger = setup_logging("access")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Initialize services at startup, clean up at shutdown."""
    settings = get_settings()
    try:
        from app.services.analyzer import RandomImageAnalyzer
        from app.services.generation import GenerationClient
        from app.services.stylize import StylizeService

        app.state.stylize_service = StylizeService(
            analyzer=RandomImageAnalyzer(),
            generation_client=GenerationClient.from_settings(settings),
        )
        logger.info("Services initialized successfully (space=%s)", settings.gradio_space)
    except Exception as exc:
        logger.error(
            "Service initialization failed, running in degraded mode",
            exc_info=True,
            extra={"error_type": type(exc).__name__},
        )
        # Continue without services; endpoints return 503 until fixed

    yield


# Create FastAPI app
app = FastAPI(
    title="Sketch Stylizer",
    description="Turns sketches into styled artwork via a hosted img2img model",
    version="0.1.0",
    lifespan=lifespan,
)

# CORS configuration
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """Access log: one line per request with status and duration."""
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    access_logger.info(
        "%s %s %d %.1fms",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": duration_ms,
        },
    )
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    """Malformed bodies get the same 400 shape as missing fields."""
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    logger.warning("Request validation failed: %s %s", location, message)
    return error_response(400, f"{location}: {message}" if location else message)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> Response:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> Response:
    logger.error(
        "Server error",
        exc_info=(type(exc), exc, exc.__traceback__),
        extra={"error_type": type(exc).__name__},
    )
    return error_response(500, str(exc) or "Internal server error")


# Register routers
app.include_router(stylize_router)


@app.get("/health")
async def health_check(request: Request) -> dict:
    """Health check endpoint.

    Always returns HTTP 200; `services.stylize` reports whether the
    stylization service was initialized.
    """
    svc = getattr(request.app.state, "stylize_service", None)

    logger.debug("Health check requested")
    return {
        "status": "ok",
        "message": "Stylization API is running",
        "version": app.version,
        "services": {
            "stylize": "ok" if svc is not None else "unavailable",
        },
    }
