# conftest.py
# Shared fixtures for the names catalogue test suite

# Every test gets a fresh app built by create_app() with an in-memory mock
# Firestore, an in-memory response cache, fresh rate limiters, and a
# classifier whose google-genai client is a MagicMock.

# @see: isim_api/main.py - create_app() under test
# @see: isim_api/mock_firestore.py - Store used by every fixture

import pytest
from fastapi.testclient import TestClient
from unittest.mock import MagicMock

from isim_api.cache import MemoryResponseCache
from isim_api.config import Settings
from isim_api.main import create_app
from isim_api.mock_firestore import MockFirestoreClient
from isim_services.classifier import NameClassifier
from isim_services.genai_client import GenAIClient
from tests.factories import model_reply


@pytest.fixture
def settings():
    return Settings(google_api_key="test-key", gemini_model="gemini-test")


@pytest.fixture
def db():
    """Fresh in-memory Firestore for each test."""
    return MockFirestoreClient()


@pytest.fixture
def cache():
    return MemoryResponseCache(ttl=300)


@pytest.fixture
def genai_sdk():
    """Stands in for google.genai.Client; set models.generate_content per test."""
    sdk = MagicMock()
    sdk.models.generate_content.return_value = model_reply({"isName": False, "message": "Bu bir isim değil veya yanlış yazılmış."})
    return sdk


@pytest.fixture
def classifier(genai_sdk, settings):
    client = GenAIClient(
        api_key=settings.google_api_key,
        model_name=settings.gemini_model,
        client=genai_sdk,
    )
    return NameClassifier(client)


@pytest.fixture
def app(settings, db, cache, classifier):
    return create_app(settings=settings, db=db, cache=cache, classifier=classifier)


@pytest.fixture
def client(app):
    return TestClient(app)
