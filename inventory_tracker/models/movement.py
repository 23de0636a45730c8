import enum
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Index, Integer, Text
from sqlalchemy.orm import relationship

from inventory_tracker.database.base import Base


class MovementKind(str, enum.Enum):
    ADD = "add"
    SALE = "sale"
    ADJUSTMENT = "adjustment"


class Movement(Base):
    """One immutable stock ledger row.

    ``part_id`` carries no foreign key so ledger rows outlive the part they
    describe; deleted parts are recorded in ``part_tombstones``. ``user_id`` is
    the acting user as given by the caller, or None for system changes.
    """

    __tablename__ = "stock_movements"

    id = Column(Integer, primary_key=True, autoincrement=True)
    part_id = Column(Integer, nullable=False)

    quantity_change = Column(Integer, nullable=False)
    movement_type = Column(
        Enum(
            MovementKind,
            name="movement_kind",
            native_enum=False,
            values_callable=lambda kinds: [kind.value for kind in kinds],
        ),
        nullable=False,
    )
    notes = Column(Text)
    user_id = Column(Integer)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    actor = relationship(
        "User",
        primaryjoin="foreign(Movement.user_id) == User.id",
        viewonly=True,
        lazy="joined",
    )

    __table_args__ = (
        Index("idx_stock_movements_part_created", "part_id", "created_at"),
    )

    @property
    def user_name(self):
        return self.actor.name if self.actor is not None else None


__all__ = ["Movement", "MovementKind"]
