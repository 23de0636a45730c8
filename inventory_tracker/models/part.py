from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, DateTime, Index, Integer, Numeric, String, Text

from inventory_tracker.config import get_settings
from inventory_tracker.database.base import Base


# Largest value an INTEGER column holds on every supported backend.
MAX_QUANTITY = 2_147_483_647


def _utcnow():
    return datetime.now(timezone.utc)


class Part(Base):
    __tablename__ = "parts"

    id = Column(Integer, primary_key=True)

    part_number = Column(String(100), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    description = Column(Text)
    category = Column(String(100))
    manufacturer = Column(String(255))
    location = Column(String(255))
    unit = Column(String(20), nullable=False, default=lambda: get_settings().DEFAULT_UNIT)
    price = Column(Numeric(12, 2))

    quantity = Column(Integer, nullable=False, default=0)
    low_stock_threshold = Column(
        Integer,
        nullable=False,
        default=lambda: get_settings().DEFAULT_LOW_STOCK_THRESHOLD,
    )

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="ck_parts_quantity_non_negative"),
        CheckConstraint("low_stock_threshold >= 0", name="ck_parts_threshold_non_negative"),
        CheckConstraint("price IS NULL OR price >= 0", name="ck_parts_price_non_negative"),
        Index("idx_parts_category", "category"),
        Index("idx_parts_created_at", "created_at"),
        # Never reuse ids: ledger rows and tombstones keep pointing at deleted parts.
        {"sqlite_autoincrement": True},
    )

    def __repr__(self):
        return f"<Part id={self.id} part_number={self.part_number!r} quantity={self.quantity}>"


__all__ = ["MAX_QUANTITY", "Part"]
