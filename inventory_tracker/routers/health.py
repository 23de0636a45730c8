import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_tracker.config import get_settings
from inventory_tracker.dependencies import get_db
from inventory_tracker.models.part import Part

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(db: Session = Depends(get_db)):
    settings = get_settings()
    body = {
        "status": "ok",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "time": datetime.now(timezone.utc).isoformat(),
    }
    try:
        body["parts"] = db.execute(select(func.count(Part.id))).scalar_one()
        body["database"] = "ok"
    except SQLAlchemyError:
        logger.error("Health check could not reach the database", exc_info=True)
        body["status"] = "degraded"
        body["database"] = "unavailable"
        return JSONResponse(status_code=503, content=body)
    return body
