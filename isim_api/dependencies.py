# dependencies.py
# FastAPI dependencies that hand out the per-app shared components

# create_app() builds settings, the catalogue gateway, the response cache,
# the classifier and both rate limiters exactly once and stores them on
# app.state. Routers receive them through Depends(), so tests can build a
# fresh app with fakes and never touch module globals.

# @see: isim_api/main.py - Populates app.state
# @see: isim_api/routers/catalogue.py, isim_api/routers/classify.py - Consumers

from fastapi import Request

from isim_api.catalogue import CatalogueGateway
from isim_api.config import Settings
from isim_api.limiter import RateLimiter
from isim_services.classifier import NameClassifier


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> CatalogueGateway:
    return request.app.state.gateway


def get_cache(request: Request):
    """Memory or Redis response cache, depending on configuration."""
    return request.app.state.cache


def get_classifier(request: Request) -> NameClassifier:
    return request.app.state.classifier


def get_classify_limiter(request: Request) -> RateLimiter:
    return request.app.state.classify_limiter


def get_catalogue_limiter(request: Request) -> RateLimiter:
    return request.app.state.catalogue_limiter
