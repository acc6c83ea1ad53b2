from rentfinder.api.pages import router as pages_router
from rentfinder.api.search import router as search_router
from rentfinder.api.post_property import router as post_property_router

__all__ = [
    "pages_router",
    "search_router",
    "post_property_router",
]
