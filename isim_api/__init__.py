"""
============================================================================
FILE: __init__.py
LOCATION: isim_api/__init__.py
============================================================================

PURPOSE:
    HTTP service for the Turkish names catalogue: listing, adding and
    classifying names.

MODULES:
    - main: Application factory (create_app) and the default app
    - config: Environment-driven Settings and Firestore client selection
    - catalogue: Store gateway, filters and pagination
    - routers: /api/names and /api/generate endpoints

USAGE:
    from isim_api.main import create_app
    app = create_app()
============================================================================
"""

__version__ = "1.0.0"
