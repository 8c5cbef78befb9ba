"""
app/api/routers package marker.
"""

from app.api.routers.catalog import router as catalog_router
from app.api.routers.content import router as content_router
from app.api.routers.imports import router as imports_router
from app.api.routers.questions import router as questions_router

__all__ = [
    "catalog_router",
    "content_router",
    "imports_router",
    "questions_router",
]
