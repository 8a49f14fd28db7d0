"""
Pastebin Lite - Main FastAPI application.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pastebin.config import Settings, settings as default_settings
from pastebin.database import PasteStore
from pastebin.exceptions import NotFoundError, StorageError, ValidationError
from pastebin.routes import health, pastes

logger = logging.getLogger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "no-referrer",
}


def configure_logging(level: str = "INFO"):
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the paste store on startup and close it on shutdown."""
    logger.info("Pastebin Lite application starting...")

    owns_store = getattr(app.state, "store", None) is None
    if owns_store:
        app.state.store = PasteStore.from_url(app.state.settings.REDIS_URL)

    if app.state.store.using_fallback:
        logger.warning("DATABASE: Using IN-MEMORY storage (Redis not available)")
        logger.warning("   Data will NOT persist across server restarts!")
    else:
        logger.info("DATABASE: Connected to Redis")

    yield

    logger.info("Pastebin Lite application shutting down...")
    if owns_store:
        app.state.store.close()
        app.state.store = None


async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


async def not_found_handler(request: Request, exc: NotFoundError):
    logger.info(f"Paste {exc.paste_id} not served: {exc.reason}")
    return JSONResponse(status_code=404, content={"detail": "Paste not found"})


async def storage_error_handler(request: Request, exc: StorageError):
    logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[PasteStore] = None,
) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Settings to use, defaults to the environment-loaded ones
        store: Pre-built store; when given the app neither opens nor closes it
    """
    settings = settings or default_settings

    app = FastAPI(
        title="Pastebin Lite",
        description="A lightweight Pastebin-like application for sharing text",
        version="1.0.0",
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store

    # Add CORS middleware (optional, for cross-origin requests)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_length = request.headers.get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > settings.MAX_BODY_BYTES:
            logger.warning(f"Rejected {content_length}-byte body on {request.url.path}")
            return JSONResponse(status_code=413, content={"detail": "Request body too large"})
        return await call_next(request)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        for name, value in SECURITY_HEADERS.items():
            response.headers.setdefault(name, value)
        return response

    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(StorageError, storage_error_handler)

    # Include route modules; the unprefixed copies are aliases
    app.include_router(health.router, prefix="/api")
    app.include_router(pastes.router, prefix="/api")
    app.include_router(health.router, include_in_schema=False)
    app.include_router(pastes.router, include_in_schema=False)
    app.include_router(pastes.view_router)

    return app


configure_logging(default_settings.LOG_LEVEL)
app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "pastebin.main:app",
        host="0.0.0.0",
        port=8000,
        reload=default_settings.DEBUG,
    )
