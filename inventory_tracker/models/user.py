from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String

from inventory_tracker.database.base import Base

USER_ROLES = ("admin", "user")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    role = Column(String(20), nullable=False, default="user")

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))


__all__ = ["USER_ROLES", "User"]
