"""Organization portal FastAPI application."""

import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from orgportal.config import get_settings
from orgportal.database import close_db, init_db
from orgportal.exceptions import PortalError, error_body
from orgportal.logging_config import (
    bind_request_context,
    clear_request_context,
    configure_logging,
    get_logger,
)
from orgportal.redis import close_redis, init_redis

logger = get_logger(__name__)
settings = get_settings()

_HTTP_ERROR_TYPES = {
    401: "unauthorized",
    403: "forbidden",
    404: "not_found",
    405: "method_not_allowed",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: init DB + Redis on startup, cleanup on shutdown."""
    configure_logging(level=settings.log_level, log_format=settings.log_format)

    logger.info("starting_database_init")
    await init_db()

    if settings.redis_url:
        try:
            await init_redis(settings.redis_url)
            logger.info("redis_connected", url=settings.redis_url)
        except Exception as e:
            logger.warning("redis_unavailable", url=settings.redis_url, error=str(e))

    logger.info("application_started")
    yield

    logger.info("shutting_down")
    await close_redis()
    await close_db()
    logger.info("shutdown_complete")


app = FastAPI(
    title="Organization Portal",
    description="Organization registration, review and service catalogue",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Bind a request id to every log line emitted while handling the request."""
    request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    bind_request_context(request_id, request.method, request.url.path)
    started = time.perf_counter()
    try:
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        logger.info(
            "request_completed",
            status_code=response.status_code,
            duration_ms=round((time.perf_counter() - started) * 1000, 1),
        )
        return response
    finally:
        clear_request_context()


# --- Error envelope ---


def setup_exception_handlers(app: FastAPI) -> None:
    """Render every failure as ``{success: false, message, error}``."""

    @app.exception_handler(PortalError)
    async def portal_error_handler(request: Request, exc: PortalError):
        log = logger.warning if exc.status_code >= 500 else logger.info
        log("request_failed", error_type=exc.error_type, message=exc.message)
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.message, exc.error_type),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(
                str(exc.detail), _HTTP_ERROR_TYPES.get(exc.status_code, "http_error")
            ),
            headers=exc.headers,
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = first.get("msg", "Invalid request")
        if location:
            message = f"{location}: {message}"
        return JSONResponse(status_code=422, content=error_body(message, "validation_error"))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("unhandled_exception", error=str(exc))
        return JSONResponse(
            status_code=500,
            content=error_body("Internal server error", "internal_error"),
        )


setup_exception_handlers(app)

# --- Routers ---
from orgportal.routes.notifications import router as notifications_router  # noqa: E402
from orgportal.routes.organizations import router as organizations_router  # noqa: E402
from orgportal.routes.pending_organizations import router as pending_organizations_router  # noqa: E402
from orgportal.routes.services import router as services_router  # noqa: E402

app.include_router(pending_organizations_router)
app.include_router(organizations_router)
app.include_router(services_router)
app.include_router(notifications_router)

# Generated DOCX/PDF files; the directory is created on first upload
app.mount(
    settings.generated_docs_base_url,
    StaticFiles(directory=Path(settings.generated_docs_dir), check_dir=False),
    name="generated-docs",
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "service": "orgportal"}
