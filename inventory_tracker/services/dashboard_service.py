from typing import Optional

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from inventory_tracker.config import get_settings
from inventory_tracker.models.part import Part


def _count(db: Session, *conditions) -> int:
    stmt = select(func.count(Part.id))
    if conditions:
        stmt = stmt.where(*conditions)
    return db.execute(stmt).scalar_one()


def dashboard_summary(db: Session, latest_limit: Optional[int] = None) -> dict:
    if latest_limit is None:
        latest_limit = get_settings().DASHBOARD_LATEST_LIMIT

    total_parts = _count(db)
    # Low stock and out of stock are disjoint: empty parts only count as out of stock.
    low_stock_parts = _count(
        db,
        and_(Part.quantity <= Part.low_stock_threshold, Part.quantity > 0),
    )
    out_of_stock_parts = _count(db, Part.quantity <= 0)
    categories = db.execute(
        select(func.count(func.distinct(Part.category))).where(
            Part.category.is_not(None), Part.category != ""
        )
    ).scalar_one()

    latest_parts = (
        db.execute(
            select(Part)
            .order_by(Part.created_at.desc(), Part.id.desc())
            .limit(latest_limit)
        )
        .scalars()
        .all()
    )

    return {
        "total_parts": total_parts,
        "low_stock_parts": low_stock_parts,
        "out_of_stock_parts": out_of_stock_parts,
        "categories": categories,
        "latest_parts": list(latest_parts),
    }


def _severity_key(part: Part):
    # A zero threshold has no ratio; such parts are treated as most severe.
    if not part.low_stock_threshold:
        return (0, 0.0, part.quantity, part.part_number)
    return (1, part.quantity / part.low_stock_threshold, part.quantity, part.part_number)


def low_stock_listing(db: Session) -> list[Part]:
    parts = (
        db.execute(select(Part).where(Part.quantity <= Part.low_stock_threshold))
        .scalars()
        .all()
    )
    return sorted(parts, key=_severity_key)


__all__ = ["dashboard_summary", "low_stock_listing"]
