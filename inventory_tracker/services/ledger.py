from typing import Optional, cast

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from inventory_tracker.models.movement import Movement, MovementKind


class MovementLedger:
    """Append-only stock movement log. Rows are never updated or deleted."""

    def __init__(self, session: Session):
        self._session = session

    def append(
        self,
        part_id: int,
        delta: int,
        kind: MovementKind,
        note: Optional[str] = None,
        actor_id: Optional[int] = None,
    ) -> Movement:
        movement = Movement(
            part_id=part_id,
            quantity_change=delta,
            movement_type=MovementKind(kind),
            notes=note,
            user_id=actor_id,
        )
        self._session.add(movement)
        self._session.flush()
        return movement

    def history_for(self, part_id: int) -> list[Movement]:
        history = (
            self._session.execute(
                select(Movement)
                .where(Movement.part_id == part_id)
                .order_by(Movement.created_at.desc(), Movement.id.desc())
            )
            .unique()
            .scalars()
            .all()
        )
        return cast(list[Movement], list(history))

    def count_for(self, part_id: int) -> int:
        return self._session.execute(
            select(func.count(Movement.id)).where(Movement.part_id == part_id)
        ).scalar_one()

    def total_delta_for(self, part_id: int) -> int:
        return self._session.execute(
            select(func.coalesce(func.sum(Movement.quantity_change), 0)).where(
                Movement.part_id == part_id
            )
        ).scalar_one()


__all__ = ["MovementLedger"]
