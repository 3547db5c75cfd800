# catalogue.py
# FastAPI router for listing and adding catalogue names

# GET lists names with the filter set of the web front-end (gender, origin,
# syllables, maxLength, inQuran, search, excludeLetters) and page/limit/all
# pagination. POST adds one record or a batch. Both endpoints pass the
# API-key guard and the catalogue rate limiter before anything else.

# @see: isim_api/catalogue.py - Gateway, filters, pagination
# @see: isim_api/cache.py - Cached default listing (X-Cache header)
# @see: isim_api/security.py - X-API-Key check and rate-limit headers
# @note: Mounted at /api/names with /catalogue as an alias

from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status

from isim_api.catalogue import (
    CatalogueFilters,
    CatalogueGateway,
    PageRequest,
    load_catalogue,
    paginate,
)
from isim_api.config import Settings
from isim_api.dependencies import (
    get_cache,
    get_catalogue_limiter,
    get_gateway,
    get_settings,
)
from isim_api.errors import InvalidBodyError, PayloadTooLarge, ValidationError
from isim_api.limiter import RateLimiter
from isim_api.logging_config import get_logger
from isim_api.models import (
    NAME_MAX_LENGTH,
    CatalogueListResponse,
    CreateNamesResponse,
    ErrorResponse,
    Gender,
)
from isim_api.security import enforce_catalogue_access
from isim_api.validators import parse_exclude_letters, strip_markup, validate_record

logger = get_logger("routers.catalogue")

router = APIRouter(tags=["Catalogue"])

MAX_BODY_BYTES = 10_000
CACHE_CONTROL = "public, s-maxage=300"
ANY_VALUE = "Tümü"

ERROR_RESPONSES = {
    code: {"model": ErrorResponse} for code in (400, 401, 409, 413, 429)
}


def catalogue_guard(
    request: Request,
    response: Response,
    settings: Settings = Depends(get_settings),
    limiter: RateLimiter = Depends(get_catalogue_limiter),
) -> str:
    """Dependency: API key check plus catalogue rate limit."""
    return enforce_catalogue_access(request, response, settings, limiter)


# ============================================================================
# QUERY PARSING
# ============================================================================


def _is_unset(value: Optional[str]) -> bool:
    return value is None or value.strip() in ("", ANY_VALUE)


def _parse_int(value: Optional[str], field: str) -> Optional[int]:
    if _is_unset(value):
        return None
    try:
        return int(value.strip())
    except ValueError:
        raise ValidationError(f"{field} must be a number", field=field)


def _parse_gender(value: Optional[str]) -> Optional[Gender]:
    if _is_unset(value):
        return None
    try:
        return Gender.parse(value.strip())
    except ValueError:
        raise ValidationError(f"Unknown gender: {value}", field="gender")


def _parse_search(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    cleaned = strip_markup(value).strip()[:NAME_MAX_LENGTH]
    return cleaned or None


def build_filters(
    gender: Optional[str] = None,
    origin: Optional[str] = None,
    syllables: Optional[str] = None,
    max_length: Optional[str] = None,
    in_quran: Optional[str] = None,
    search: Optional[str] = None,
    exclude_letters: Optional[str] = None,
) -> CatalogueFilters:
    """Turn raw query-string values into CatalogueFilters ("Tümü" means any)."""
    return CatalogueFilters(
        gender=_parse_gender(gender),
        origin=None if _is_unset(origin) else origin.strip(),
        syllables=_parse_int(syllables, "syllables"),
        max_length=_parse_int(max_length, "maxLength"),
        in_quran=(in_quran or "").strip().lower() == "true",
        search=_parse_search(search),
        exclude_letters=parse_exclude_letters(exclude_letters),
    )


# ============================================================================
# ENDPOINTS
# ============================================================================


@router.get("/api/names", response_model=CatalogueListResponse, responses=ERROR_RESPONSES)
@router.get("/catalogue", response_model=CatalogueListResponse, include_in_schema=False)
def list_names(
    response: Response,
    _bucket: str = Depends(catalogue_guard),
    gender: Optional[str] = Query(None, description="Kız, Erkek, Her ikisi (or Girl/Boy/Both)"),
    origin: Optional[str] = Query(None),
    syllables: Optional[str] = Query(None, description="Exact count; 4 means 4 or more"),
    max_length: Optional[str] = Query(None, alias="maxLength"),
    in_quran: Optional[str] = Query(None, alias="inQuran"),
    search: Optional[str] = Query(None),
    exclude_letters: Optional[str] = Query(None, alias="excludeLetters"),
    page: Optional[int] = Query(None),
    limit: Optional[int] = Query(None),
    return_all: Optional[str] = Query(None, alias="all"),
    gateway: CatalogueGateway = Depends(get_gateway),
    cache=Depends(get_cache),
) -> Dict[str, Any]:
    """
    List catalogue names in Turkish alphabetical order.

    Only the unfiltered first page with the default size is served from
    the response cache; every other combination reads the store.
    """
    filters = build_filters(
        gender=gender,
        origin=origin,
        syllables=syllables,
        max_length=max_length,
        in_quran=in_quran,
        search=search,
        exclude_letters=exclude_letters,
    )
    page_request = PageRequest.clamp(
        page=page,
        limit=limit,
        return_all=(return_all or "").strip().lower() == "true",
    )

    if filters.is_empty() and page_request.is_default:
        records, hit = load_catalogue(gateway, cache)
        result = paginate(records, page_request)
        response.headers["X-Cache"] = "HIT" if hit else "MISS"
        if not hit:
            response.headers["Cache-Control"] = CACHE_CONTROL
    else:
        result = gateway.list(filters, page_request)
        response.headers["X-Cache"] = "BYPASS"

    return {"data": result.records, "pagination": result.pagination()}


async def read_capped_body(request: Request) -> Any:
    """
    Dependency: decode the JSON body, refusing anything over MAX_BODY_BYTES.

    Content-Length is checked before reading; the stream is also counted
    while it arrives, so a missing or understated header cannot get past
    the cap.
    """
    too_large = PayloadTooLarge(f"Request body must be {MAX_BODY_BYTES} bytes or less")
    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > MAX_BODY_BYTES:
        raise too_large

    received = bytearray()
    async for chunk in request.stream():
        received.extend(chunk)
        if len(received) > MAX_BODY_BYTES:
            raise too_large

    if not received.strip():
        return None
    try:
        return json.loads(bytes(received))
    except ValueError:
        raise InvalidBodyError("Request body must be valid JSON", field="body")


@router.post(
    "/api/names",
    response_model=CreateNamesResponse,
    status_code=status.HTTP_201_CREATED,
    responses=ERROR_RESPONSES,
)
@router.post(
    "/catalogue",
    response_model=CreateNamesResponse,
    status_code=status.HTTP_201_CREATED,
    include_in_schema=False,
)
def create_names(
    _bucket: str = Depends(catalogue_guard),
    payload: Any = Depends(read_capped_body),
    gateway: CatalogueGateway = Depends(get_gateway),
    cache=Depends(get_cache),
) -> Dict[str, Any]:
    """
    Add one name (JSON object) or several (JSON array).

    Every record is validated before anything is written, and the batch is
    stored atomically: a duplicate anywhere rejects all of it.
    """
    if not payload or not isinstance(payload, (dict, list)):
        raise InvalidBodyError("Request body must contain name data", error="Invalid request")

    items: List[Any] = payload if isinstance(payload, list) else [payload]
    records = [validate_record(item) for item in items]
    created = gateway.create(records)
    cache.invalidate()

    logger.info(f"Added {len(created)} name(s): {', '.join(r['name'] for r in created)}")
    return {
        "message": f"Successfully created {len(created)} name(s)",
        "names": created,
    }
