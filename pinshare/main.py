"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from pinshare.accounts.routes import router as accounts_router
from pinshare.auth.jwt import TokenIssuer
from pinshare.config import Settings, get_settings
from pinshare.db.session import Database
from pinshare.errors import PinShareError, StorageError
from pinshare.files.routes import router as files_router
from pinshare.files.storage import ObjectStorage
from pinshare.limiter import configure_limiter
from pinshare.logging_config import setup_logging

log = logging.getLogger(__name__)

# Room for the multipart envelope and the name/code fields around the file part
UPLOAD_ENVELOPE_BYTES = 64 * 1024


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables and make sure the bucket exists on startup."""
    log.info("Startup: initializing database and object storage")
    if not app.state.settings.jwt_secret:
        log.warning("PINSHARE_JWT_SECRET is not set; tokens are signed with an empty key")
    await app.state.db.init()
    try:
        await app.state.storage.ensure_bucket()
    except StorageError as e:
        # Uploads will fail until storage is reachable; downloads and auth still work
        log.error("Object storage check failed: %s", e.details)
    log.info("Startup complete (require_auth=%s)", app.state.settings.require_auth)
    yield
    await app.state.db.dispose()
    log.info("Shutdown")


def _error_response(status_code: int, error: str, details: Optional[str] = None) -> JSONResponse:
    content = {"error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content)


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(PinShareError)
    async def pinshare_error_handler(request: Request, exc: PinShareError):
        headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        details = f"{where}: {first.get('msg')}" if where else first.get("msg")
        return _error_response(400, "Invalid request", details)

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        """Return generic 500 without leaking stack trace or internals."""
        log.exception("Unhandled exception: %s", exc)
        return _error_response(500, "Internal server error")


def create_app(
    settings: Optional[Settings] = None,
    storage: Optional[ObjectStorage] = None,
    db: Optional[Database] = None,
) -> FastAPI:
    """Build the app; handles (database, tokens, storage) live on app.state."""
    settings = settings or get_settings()
    setup_logging(settings)

    app = FastAPI(title="PinShare API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.db = db or Database(settings.database_url)
    app.state.tokens = TokenIssuer.from_settings(settings)
    app.state.storage = storage or ObjectStorage.from_settings(settings)

    @app.middleware("http")
    async def limit_upload_size(request: Request, call_next):
        """Refuse oversized uploads from Content-Length before the body is parsed."""
        if request.method == "POST" and request.url.path == "/api/upload":
            length = request.headers.get("content-length")
            limit = settings.max_upload_bytes + UPLOAD_ENVELOPE_BYTES
            if length and length.isdigit() and int(length) > limit:
                log.info("Rejected upload with content-length=%s", length)
                return _error_response(
                    413, f"File size exceeds {settings.max_upload_bytes / (1024 * 1024):g} MB limit"
                )
        return await call_next(request)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        """Add security headers to all responses."""
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        return response

    # Added last so it wraps the other middlewares and early 413s still carry CORS headers
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    _register_exception_handlers(app)
    limiter = configure_limiter(settings)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.include_router(accounts_router)
    app.include_router(files_router)

    @app.get("/")
    def root() -> dict:
        """Service banner with the route map."""
        gated = " (requires auth)" if settings.require_auth else ""
        return {
            "message": "File Share API is running",
            "endpoints": {
                "signup": "POST /api/auth/signup",
                "login": "POST /api/auth/login",
                "upload": f"POST /api/upload{gated}",
                "download": f"POST /api/download{gated}",
                "stats": f"GET /api/stats{gated}",
            },
        }

    @app.get("/health")
    @limiter.exempt
    def health() -> JSONResponse:
        """Health check. Exempt from rate limiting."""
        return JSONResponse(content={"status": "ok"})

    return app
