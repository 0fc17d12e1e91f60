from .signatures import router as signatures_router
from .images import router as images_router

__all__ = [
    'signatures_router',
    'images_router',
]
