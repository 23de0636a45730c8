from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from inventory_tracker.database.base import Base


class PartTombstone(Base):
    __tablename__ = "part_tombstones"

    part_id = Column(Integer, primary_key=True, autoincrement=False)
    part_number = Column(String(100), nullable=False)
    name = Column(String(255), nullable=False)
    deleted_by = Column(Integer)
    deleted_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


__all__ = ["PartTombstone"]
