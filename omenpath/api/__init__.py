from omenpath.api.convert import router as convert_router
from omenpath.api.health import router as health_router

__all__ = [
    "convert_router",
    "health_router",
]
