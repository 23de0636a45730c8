from inventory_tracker.routers.dashboard import router as dashboard_router
from inventory_tracker.routers.health import router as health_router
from inventory_tracker.routers.parts import router as parts_router

__all__ = [
    "dashboard_router",
    "health_router",
    "parts_router",
]
