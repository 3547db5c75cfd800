from isim_api.routers.catalogue import router as catalogue_router
from isim_api.routers.classify import router as classify_router

__all__ = ["catalogue_router", "classify_router"]
