"""
============================================================================
FILE: main.py
LOCATION: isim_api/main.py
============================================================================

PURPOSE:
    FastAPI application factory for the names catalogue service.

ROLE IN PROJECT:
    Builds every shared component once (catalogue gateway, response cache,
    classifier, two rate limiters) and keeps them on app.state, registers
    the JSON error handlers and the CORS/preflight middleware, and mounts
    the catalogue and classification routers.

KEY COMPONENTS:
    - create_app(): Wire settings, store, cache and classifier into an app
    - register_exception_handlers(): {"error", "details"} error bodies
    - app: Default instance for `uvicorn isim_api.main:app`

DEPENDENCIES:
    - External: fastapi, starlette, uvicorn
    - Internal: isim_api.*, isim_services.*

USAGE:
    uvicorn isim_api.main:app --reload --port 8000
============================================================================
"""

import time
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from isim_api import __version__
from isim_api.cache import MemoryResponseCache, RedisResponseCache
from isim_api.catalogue import CatalogueGateway
from isim_api.config import Settings, get_db
from isim_api.errors import MethodNotAllowed, NameServiceError, RateLimitExceeded
from isim_api.limiter import RateLimiter, client_ip
from isim_api.logging_config import get_logger, log_request, setup_logging
from isim_api.routers import catalogue_router, classify_router
from isim_services.classifier import NameClassifier
from isim_services.genai_client import GenAIClient

logger = get_logger("main")

CORS_HEADERS = {
    "Access-Control-Allow-Credentials": "true",
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,OPTIONS,PATCH,DELETE,POST,PUT",
    "Access-Control-Allow-Headers": (
        "X-CSRF-Token, X-Requested-With, Accept, Accept-Version, "
        "Content-Length, Content-MD5, Content-Type, Date, X-Api-Version, X-API-Key"
    ),
}


def _error_response(status_code: int, body: Dict[str, Any], headers=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body, headers=headers)


# ============================================================================
# ERROR HANDLERS
# ============================================================================


def register_exception_handlers(app: FastAPI) -> None:
    """Render every failure as {"error": ..., "details": ...}."""

    @app.exception_handler(NameServiceError)
    async def name_service_error_handler(request: Request, exc: NameServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.error}: {exc.details}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.details}")

        headers = None
        if isinstance(exc, RateLimitExceeded):
            headers = {"Retry-After": str(exc.reset_in)}
        return _error_response(exc.status_code, exc.to_dict(), headers)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            first = errors[0]
            location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
            details = f"{location}: {first.get('msg')}" if location else str(first.get("msg"))
        else:
            details = "Invalid request"
        return _error_response(400, {"error": "Validation error", "details": details})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            body = MethodNotAllowed(
                f"{request.method} is not supported on {request.url.path}"
            ).to_dict()
        elif exc.status_code == 404:
            body = {"error": "Not found", "details": f"No route for {request.url.path}"}
        else:
            body = {"error": str(exc.detail), "details": str(exc.detail)}
        return _error_response(exc.status_code, body, getattr(exc, "headers", None))

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        # Runs outside the CORS middleware, so the headers are added here
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return _error_response(
            500,
            {"error": "Internal server error", "details": str(exc) or exc.__class__.__name__},
            dict(CORS_HEADERS),
        )


def register_cors(app: FastAPI) -> None:
    """Permissive CORS headers and an access log line on every response.

    OPTIONS on any path answers 200 with an empty body.
    """

    @app.middleware("http")
    async def cors_middleware(request: Request, call_next):
        started = time.perf_counter()
        if request.method == "OPTIONS":
            response = Response(status_code=200)
        else:
            response = await call_next(request)
        for name, value in CORS_HEADERS.items():
            response.headers[name] = value
        log_request(
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
            client_ip(request),
        )
        return response


# ============================================================================
# APPLICATION FACTORY
# ============================================================================


def _build_cache(settings: Settings):
    if settings.redis_enabled:
        logger.info(f"Response cache: Redis at {settings.redis_url}")
        return RedisResponseCache(settings.redis_url, ttl=settings.cache_ttl_seconds)
    return MemoryResponseCache(ttl=settings.cache_ttl_seconds)


def create_app(
    settings: Optional[Settings] = None,
    db: Any = None,
    cache: Any = None,
    classifier: Optional[NameClassifier] = None,
) -> FastAPI:
    """
    Build a fully wired application.

    Args:
        settings: Configuration (defaults to Settings.from_env())
        db: Firestore client or MockFirestoreClient (defaults to get_db())
        cache: Response cache (defaults to memory, or Redis when enabled)
        classifier: Name classifier (defaults to a Gemini-backed one)

    Returns:
        FastAPI app with its shared state on app.state
    """
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level, production=settings.log_json)

    if db is None:
        db = get_db(settings)
    if cache is None:
        cache = _build_cache(settings)
    if classifier is None:
        classifier = NameClassifier(
            GenAIClient(
                api_key=settings.google_api_key,
                model_name=settings.gemini_model,
                timeout_seconds=settings.gemini_timeout_seconds,
            )
        )

    app = FastAPI(title="İsim Atlası API", version=__version__)

    app.state.settings = settings
    app.state.gateway = CatalogueGateway(db, settings.names_collection)
    app.state.cache = cache
    app.state.classifier = classifier
    app.state.classify_limiter = RateLimiter(
        settings.classify_rate_limit, settings.rate_limit_storage_uri
    )
    app.state.catalogue_limiter = RateLimiter(
        settings.catalogue_rate_limit, settings.rate_limit_storage_uri
    )

    register_exception_handlers(app)
    register_cors(app)
    app.include_router(catalogue_router)
    app.include_router(classify_router)

    @app.get("/")
    def root():
        return {"message": "İsim Atlası API - names catalogue and classification"}

    @app.get("/health")
    def health(request: Request):
        store_ok = request.app.state.gateway.ping()
        cache_ok = request.app.state.cache.is_available()
        return {
            "status": "healthy" if store_ok else "degraded",
            "store": "connected" if store_ok else "unavailable",
            "cache": "connected" if cache_ok else "unavailable",
        }

    logger.info(
        f"App ready: collection='{settings.names_collection}', "
        f"model='{settings.gemini_model}', "
        f"store={'firestore' if settings.use_real_firebase else 'mock'}"
    )
    return app


app = create_app()


def run() -> None:
    """Console entry point: serve the default app with uvicorn."""
    import uvicorn

    uvicorn.run("isim_api.main:app", host="0.0.0.0", port=8000)


if __name__ == "__main__":
    run()
