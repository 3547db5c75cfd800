# classify.py
# FastAPI router for "is this a name?" requests

# Pipeline per request: IP rate limit, sanitize the prompt, look it up in
# the catalogue, look for a near-identical catalogue name, and only then
# ask the model. The first two catalogue checks answer without a model call.

# @see: isim_services/classifier.py - Prompt building and reply parsing
# @see: isim_services/similarity.py - Levenshtein near-match check
# @note: Mounted at /api/generate with /classify as an alias

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Request

from isim_api.catalogue import CatalogueGateway, load_catalogue
from isim_api.dependencies import (
    get_cache,
    get_classifier,
    get_classify_limiter,
    get_gateway,
)
from isim_api.errors import ValidationError
from isim_api.limiter import RateLimiter
from isim_api.logging_config import get_logger
from isim_api.models import ErrorResponse
from isim_api.security import enforce_classify_limit
from isim_api.validators import sanitize_name
from isim_services.classifier import NameClassifier
from isim_services.similarity import exact_match, nearest_match

logger = get_logger("routers.classify")

router = APIRouter(tags=["Classification"])


def classify_guard(
    request: Request,
    limiter: RateLimiter = Depends(get_classify_limiter),
) -> str:
    """Dependency: per-IP limit for model-backed requests."""
    return enforce_classify_limit(request, limiter)


def suggestion_body(match: str, distance: int) -> Dict[str, Any]:
    return {
        "isName": False,
        "message": f"Bunu mu demek istediniz: {match}?",
        "suggestion": match,
        "distance": distance,
    }


@router.post(
    "/api/generate",
    responses={code: {"model": ErrorResponse} for code in (400, 429, 500)},
)
@router.post("/classify", include_in_schema=False)
def classify_name(
    _bucket: str = Depends(classify_guard),
    payload: Any = Body(None),
    gateway: CatalogueGateway = Depends(get_gateway),
    cache=Depends(get_cache),
    classifier: NameClassifier = Depends(get_classifier),
) -> Dict[str, Any]:
    """
    Classify one string as a personal name.

    Body: {"prompt": "<name>"}. The reply is the stored record for a known
    name, a "did you mean" suggestion for a near miss, or the model's
    verdict.
    """
    prompt = payload.get("prompt") if isinstance(payload, dict) else None
    if not isinstance(prompt, str):
        raise ValidationError("Prompt is required and must be a string", field="prompt")

    name = sanitize_name(prompt)
    records, _ = load_catalogue(gateway, cache)

    known = exact_match(name, records)
    if known is not None:
        logger.info(f"'{name}' answered from the catalogue")
        return {**known, "isName": True, "source": "catalogue"}

    near = nearest_match(name, [record.get("name", "") for record in records])
    if near is not None:
        logger.info(f"'{name}' is {near.distance} edit(s) away from '{near.match}'")
        return suggestion_body(near.match, near.distance)

    verdict = classifier.classify(name)
    body = classifier.verdict_body(verdict)
    body["source"] = "ai"
    return body
