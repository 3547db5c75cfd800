"""
============================================================================
FILE: config.py
LOCATION: isim_api/config.py
============================================================================

PURPOSE:
    Centralized configuration for the model client, rate limits, cache and
    Firestore access.

ROLE IN PROJECT:
    Loads environment variables (optionally from .env) into a Settings
    object that create_app() hands to every component, and initializes the
    Firestore client, supporting mock and real Firebase usage.

KEY COMPONENTS:
    - Settings: Frozen snapshot of all recognized options
    - get_db: Returns mock or real Firestore client
    - init_firebase: Initializes Firebase Admin SDK

DEPENDENCIES:
    - External: firebase_admin, python-dotenv
    - Internal: mock_firestore (when USE_REAL_FIREBASE is false)

USAGE:
    from isim_api.config import Settings, get_db
    settings = Settings.from_env()
============================================================================
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

import dotenv
import firebase_admin
from firebase_admin import credentials
from firebase_admin import firestore


# Load environment variables from .env
PROJECT_ROOT = Path(__file__).resolve().parent.parent
DOTENV_PATH = PROJECT_ROOT / ".env"
if DOTENV_PATH.exists():
    dotenv.load_dotenv(DOTENV_PATH)

DEFAULT_GEMINI_MODEL = "gemini-2.5-flash"
DEFAULT_TRUSTED_ORIGINS = ("localhost", "vercel.app")


def _env_bool(name: str, default: bool = False) -> bool:
    return os.getenv(name, str(default)).strip().lower() == "true"


def _env_list(name: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
    raw = os.getenv(name)
    if raw is None:
        return default
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    """Every option the service recognizes, read once at startup."""

    google_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    gemini_timeout_seconds: float = 20.0

    mobile_api_key: Optional[str] = None
    api_key_required: bool = False
    trusted_origins: Tuple[str, ...] = field(default=DEFAULT_TRUSTED_ORIGINS)

    classify_rate_limit: str = "10/minute"
    catalogue_rate_limit: str = "60/minute"
    rate_limit_storage_uri: str = "memory://"

    use_real_firebase: bool = False
    firebase_credentials: Optional[str] = None
    names_collection: str = "names"
    mock_db_file: Optional[str] = None

    redis_enabled: bool = False
    redis_url: str = "redis://127.0.0.1:6379/0"
    cache_ttl_seconds: int = 300

    log_level: str = "INFO"
    log_json: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from the process environment.

        Returns:
            Settings: Snapshot of the current environment.
        """
        trusted = list(_env_list("TRUSTED_ORIGINS", DEFAULT_TRUSTED_ORIGINS))
        # Deployment URL injected by the hosting platform counts as trusted
        vercel_url = os.getenv("VERCEL_URL")
        if vercel_url and vercel_url not in trusted:
            trusted.append(vercel_url)

        return cls(
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            gemini_timeout_seconds=float(os.getenv("GEMINI_TIMEOUT_SECONDS", "20")),
            mobile_api_key=os.getenv("MOBILE_API_KEY") or None,
            api_key_required=_env_bool("API_KEY_REQUIRED"),
            trusted_origins=tuple(trusted),
            classify_rate_limit=os.getenv("CLASSIFY_RATE_LIMIT", "10/minute"),
            catalogue_rate_limit=os.getenv("CATALOGUE_RATE_LIMIT", "60/minute"),
            rate_limit_storage_uri=os.getenv("RATE_LIMIT_STORAGE_URI", "memory://"),
            use_real_firebase=_env_bool("USE_REAL_FIREBASE"),
            firebase_credentials=os.getenv("FIREBASE_CREDENTIALS") or None,
            names_collection=os.getenv("NAMES_COLLECTION", "names"),
            mock_db_file=os.getenv("MOCK_DB_FILE") or None,
            redis_enabled=_env_bool("REDIS_ENABLED"),
            redis_url=os.getenv("REDIS_URL", "redis://127.0.0.1:6379/0"),
            cache_ttl_seconds=int(os.getenv("CACHE_TTL_SECONDS", "300")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_json=_env_bool("LOG_JSON"),
        )


def _resolve_credentials_path(settings: Settings) -> Path:
    """Resolve the Firebase credentials file path.

    Args:
        settings: Active settings.

    Returns:
        Path: Absolute path to the service account JSON file.
    """
    if settings.firebase_credentials:
        path = Path(settings.firebase_credentials)
        if not path.is_absolute():
            path = PROJECT_ROOT / path
        return path
    return PROJECT_ROOT / "serviceAccountKey.json"


def init_firebase(settings: Settings) -> None:
    """Initialize Firebase Admin SDK once per process.

    Args:
        settings: Active settings.

    Raises:
        FileNotFoundError: If real Firebase credentials are missing.
    """
    if firebase_admin._apps:
        return
    key_path = _resolve_credentials_path(settings)
    if not key_path.exists():
        raise FileNotFoundError(f"Firebase credentials not found: {key_path}")
    firebase_admin.initialize_app(credentials.Certificate(str(key_path)))


def get_db(settings: Settings):
    """Get Firestore database client (mock or real).

    Args:
        settings: Active settings.

    Returns:
        object: Firestore client or MockFirestoreClient instance.

    Raises:
        FileNotFoundError: If real Firebase credentials are missing.
    """
    if not settings.use_real_firebase:
        from isim_api.mock_firestore import MockFirestoreClient

        return MockFirestoreClient(db_file=settings.mock_db_file)

    init_firebase(settings)
    return firestore.client()
