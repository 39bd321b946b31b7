from .health import router as health_router
from .control import router as control_router
from .assets import router as assets_router

__all__ = [
    "health_router",
    "control_router",
    "assets_router",
]
