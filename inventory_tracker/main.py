from contextlib import asynccontextmanager

from fastapi import FastAPI

from inventory_tracker.config import Settings, get_settings
from inventory_tracker.core.logging import setup_logging
from inventory_tracker.database import Base, engine
from inventory_tracker.models import import_all_models
from inventory_tracker.routers import dashboard_router, health_router, parts_router

setup_logging()
settings: Settings = get_settings()

import_all_models()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    Base.metadata.create_all(bind=engine)
    try:
        yield
    finally:
        engine.dispose()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)

app.include_router(health_router)
app.include_router(parts_router)
app.include_router(dashboard_router)


__all__ = ["app"]
