"""
============================================================================
FILE: security.py
LOCATION: isim_api/security.py
============================================================================

PURPOSE:
    Request guards: optional X-API-Key validation plus the per-bucket rate
    limits for both endpoints.

ROLE IN PROJECT:
    Routers call these before any validation or store access, so abusive
    clients are rejected as early as possible. Guards only raise typed
    errors and set X-RateLimit-* headers; main.py renders the errors.

KEY COMPONENTS:
    - is_trusted_origin(): Origin/Referer allow-list check
    - catalogue_bucket(): Resolve the rate-limit bucket for catalogue calls
    - enforce_catalogue_access(): API-key check + catalogue rate limit
    - enforce_classify_limit(): IP-based limit for the classification flow

DEPENDENCIES:
    - External: starlette (Request/Response)
    - Internal: isim_api.config, isim_api.errors, isim_api.limiter

USAGE:
    enforce_catalogue_access(request, response, settings, limiter)
============================================================================
"""

import typing

from starlette.requests import Request
from starlette.responses import Response

from isim_api.config import Settings
from isim_api.errors import RateLimitExceeded, Unauthorized
from isim_api.limiter import RateLimiter, client_ip
from isim_api.logging_config import get_logger

logger = get_logger("security")

API_KEY_HEADER = "x-api-key"


def is_trusted_origin(request: Request, trusted_origins: typing.Iterable[str]) -> bool:
    """True when Origin (or Referer) contains one of the allow-listed hosts."""
    origin = request.headers.get("origin") or request.headers.get("referer") or ""
    if not origin:
        return False
    return any(trusted in origin for trusted in trusted_origins if trusted)


def catalogue_bucket(request: Request, settings: Settings) -> str:
    """Rate-limit bucket for a catalogue request.

    Args:
        request: Incoming request.
        settings: Active settings.

    Returns:
        str: "key:<api key>" when a valid key is sent, else "ip:<client ip>".

    Raises:
        Unauthorized: Wrong key, or no key while API_KEY_REQUIRED is set and
            the origin is not trusted.
    """
    api_key = request.headers.get(API_KEY_HEADER)

    if not api_key:
        if is_trusted_origin(request, settings.trusted_origins) or not settings.api_key_required:
            return f"ip:{client_ip(request)}"
        raise Unauthorized("API key is required. Include X-API-Key header.")

    if settings.mobile_api_key and api_key != settings.mobile_api_key:
        logger.warning(f"Rejected invalid API key from {client_ip(request)}")
        raise Unauthorized("Invalid API key")

    return f"key:{api_key}"


def _rate_limit_headers(response: Response, limiter: RateLimiter, bucket: str) -> None:
    info = limiter.info(bucket)
    response.headers["X-RateLimit-Limit"] = str(info.limit)
    response.headers["X-RateLimit-Remaining"] = str(info.remaining)
    response.headers["X-RateLimit-Reset"] = str(info.reset_in)


def enforce_catalogue_access(
    request: Request,
    response: Response,
    settings: Settings,
    limiter: RateLimiter,
) -> str:
    """Validate the API key (if any) and count the request in its bucket."""
    bucket = catalogue_bucket(request, settings)

    if not limiter.allow(bucket):
        info = limiter.info(bucket)
        logger.info(f"Catalogue rate limit hit for {bucket}")
        raise RateLimitExceeded(
            f"Rate limit exceeded. Try again in {info.reset_in} seconds.",
            reset_in=info.reset_in,
            limit=info.limit,
            error="Too Many Requests",
        )

    _rate_limit_headers(response, limiter, bucket)
    return bucket


def enforce_classify_limit(request: Request, limiter: RateLimiter) -> str:
    """Count a classification request against the caller's IP."""
    bucket = f"classify:{client_ip(request)}"
    if not limiter.allow(bucket):
        info = limiter.info(bucket)
        logger.info(f"Classification rate limit hit for {bucket}")
        raise RateLimitExceeded(
            "Lütfen bir dakika bekleyip tekrar deneyin.",
            reset_in=info.reset_in,
            limit=info.limit,
        )
    return bucket
