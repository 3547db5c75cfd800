# conftest.py
# Pytest configuration for the names catalogue test environment
#
# Sets environment defaults before any isim_api module is imported so the
# default app never reaches Firebase, Redis or Gemini.
#
# @see: isim_api/config.py - Settings.from_env() reads these
# @note: tests/conftest.py builds per-test apps with explicit Settings

import os

os.environ.setdefault("USE_REAL_FIREBASE", "false")
os.environ.setdefault("REDIS_ENABLED", "false")
os.environ.setdefault("API_KEY_REQUIRED", "false")
os.environ["GOOGLE_API_KEY"] = ""
os.environ.pop("MOCK_DB_FILE", None)
