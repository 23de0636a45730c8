"""Stock mutation engine: the only path that changes a part's on-hand quantity.

Every change reads the part inside a transaction, rejects results below zero,
writes the new quantity and appends exactly one ledger row, then commits.
Either both writes persist or neither does.

Concurrent changes to the same part are serialized by the row lock taken in
``PartStore.get_for_update`` (backends with ``SELECT ... FOR UPDATE``) and by
a compare-and-set on the observed quantity (all backends). A lost race
re-reads inside the same transaction, bounded by ``STOCK_CAS_MAX_ATTEMPTS``.
"""

import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from inventory_tracker.config import get_settings
from inventory_tracker.core.errors import (
    InvalidQuantityError,
    NegativeStockError,
    PartNotFoundError,
    SellExceedsStockError,
    TransientStorageError,
)
from inventory_tracker.database.session import unit_of_work
from inventory_tracker.models.movement import MovementKind
from inventory_tracker.models.part import MAX_QUANTITY, Part
from inventory_tracker.services.ledger import MovementLedger
from inventory_tracker.services.part_store import PartStore

logger = logging.getLogger(__name__)


def _require_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidQuantityError(f"{name} must be an integer")
    if abs(value) > MAX_QUANTITY:
        raise InvalidQuantityError(f"{name} must not exceed {MAX_QUANTITY} in magnitude")
    return value


def _require_positive(name: str, value) -> int:
    value = _require_int(name, value)
    if value <= 0:
        raise InvalidQuantityError(f"{name} must be a positive integer")
    return value


class StockMutationEngine:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        *,
        max_attempts: Optional[int] = None,
    ):
        self._session_factory = session_factory
        self._max_attempts = max_attempts or get_settings().STOCK_CAS_MAX_ATTEMPTS

    def apply_stock_change(
        self,
        part_id: int,
        delta: int,
        *,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
        kind: MovementKind = MovementKind.ADJUSTMENT,
    ) -> Part:
        delta = _require_int("delta", delta)
        if delta == 0:
            raise InvalidQuantityError("delta must be non-zero")
        return self._apply(part_id, delta, MovementKind(kind), note, actor_id, NegativeStockError)

    def add_stock(
        self,
        part_id: int,
        quantity: int,
        *,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> Part:
        quantity = _require_positive("quantity", quantity)
        if note is None:
            note = get_settings().DEFAULT_RESTOCK_NOTE
        return self._apply(part_id, quantity, MovementKind.ADD, note, actor_id, NegativeStockError)

    def sell_stock(
        self,
        part_id: int,
        quantity: int = 1,
        *,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> Part:
        quantity = _require_positive("quantity", quantity)
        if note is None:
            note = get_settings().DEFAULT_SALE_NOTE
        return self._apply(part_id, -quantity, MovementKind.SALE, note, actor_id, SellExceedsStockError)

    def adjust_stock(
        self,
        part_id: int,
        delta: int,
        *,
        actor_id: Optional[int] = None,
        note: Optional[str] = None,
    ) -> Part:
        return self.apply_stock_change(
            part_id, delta, actor_id=actor_id, note=note, kind=MovementKind.ADJUSTMENT
        )

    def _apply(self, part_id, delta, kind, note, actor_id, negative_error) -> Part:
        try:
            with unit_of_work(self._session_factory) as session:
                store = PartStore(session)
                part = self._write_quantity(store, part_id, delta, negative_error)
                movement = MovementLedger(session).append(part_id, delta, kind, note, actor_id)
                movement_id = movement.id
                session.refresh(part)
                session.expunge(part)
        except (PartNotFoundError, NegativeStockError, InvalidQuantityError) as exc:
            logger.warning(
                "Rejected %s of %+d on part %s: %s", kind.value, delta, part_id, exc
            )
            raise

        logger.info(
            "Part %s %s %+d -> quantity %s (movement %s, actor %s)",
            part_id,
            kind.value,
            delta,
            part.quantity,
            movement_id,
            actor_id,
        )
        return part

    def _write_quantity(self, store: PartStore, part_id, delta, negative_error) -> Part:
        for attempt in range(1, self._max_attempts + 1):
            part = store.get_for_update(part_id)
            if part is None:
                raise PartNotFoundError(part_id)

            current = part.quantity
            new_quantity = current + delta
            if new_quantity < 0:
                raise negative_error(part_id, current, delta)
            if new_quantity > MAX_QUANTITY:
                raise InvalidQuantityError(f"quantity would exceed {MAX_QUANTITY}")

            if store.set_quantity(part_id, new_quantity, expected=current):
                return part
            logger.debug(
                "Quantity of part %s changed concurrently, re-reading (attempt %d)",
                part_id,
                attempt,
            )

        logger.error(
            "Giving up on part %s after %d concurrent updates",
            part_id,
            self._max_attempts,
        )
        raise TransientStorageError(
            f"Part {part_id} changed concurrently {self._max_attempts} times; retry the operation"
        )


__all__ = ["StockMutationEngine"]
