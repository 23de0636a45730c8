from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from typing import Callable, Mapping, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from inventory_tracker.core.errors import (
    DuplicatePartNumberError,
    InvalidPartDataError,
    PartNotFoundError,
)
from inventory_tracker.models.part import MAX_QUANTITY, Part
from inventory_tracker.models.tombstone import PartTombstone

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = (
    "part_number",
    "name",
    "description",
    "category",
    "manufacturer",
    "location",
    "unit",
    "price",
    "low_stock_threshold",
)
CREATE_FIELDS = EDITABLE_FIELDS + ("quantity",)

SEARCH_COLUMNS = (
    Part.part_number,
    Part.name,
    Part.category,
    Part.manufacturer,
    Part.description,
)

SORT_FIELDS = {
    "part_number": Part.part_number,
    "partNumber": Part.part_number,
    "name": Part.name,
    "quantity": Part.quantity,
    "category": Part.category,
    "price": Part.price,
    "created_at": Part.created_at,
    "createdAt": Part.created_at,
    "manufacturer": Part.manufacturer,
}
DEFAULT_SORT_FIELD = Part.created_at


@dataclass
class PartFilter:
    search: Optional[str] = None
    category: Optional[str] = None
    low_stock: bool = False
    sort_by: Optional[str] = None
    sort_order: Optional[str] = None


def _like_pattern(term: str) -> str:
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _non_negative_int(field: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPartDataError(f"{field} must be an integer")
    if value < 0:
        raise InvalidPartDataError(f"{field} must be non-negative")
    if value > MAX_QUANTITY:
        raise InvalidPartDataError(f"{field} must not exceed {MAX_QUANTITY}")
    return value


def _non_negative_price(value) -> Optional[Decimal]:
    if value is None:
        return None
    try:
        price = Decimal(str(value))
    except InvalidOperation as exc:
        raise InvalidPartDataError("price must be a decimal number") from exc
    if not price.is_finite() or price < 0:
        raise InvalidPartDataError("price must be non-negative")
    return price


def _clean_values(attributes: Mapping, allowed: tuple) -> dict:
    if "quantity" in attributes and "quantity" not in allowed:
        raise InvalidPartDataError("quantity can only change through stock movements")
    unknown = sorted(set(attributes) - set(allowed))
    if unknown:
        raise InvalidPartDataError("Unknown part fields: {}".format(", ".join(unknown)))

    values = dict(attributes)
    if "quantity" in values:
        values["quantity"] = _non_negative_int("quantity", values["quantity"])
    if "low_stock_threshold" in values:
        values["low_stock_threshold"] = _non_negative_int(
            "low_stock_threshold", values["low_stock_threshold"]
        )
    if "price" in values:
        values["price"] = _non_negative_price(values["price"])
    return values


class PartStore:
    """Keyed storage of parts over one SQLAlchemy session.

    Write methods flush but never commit; the caller owns the transaction.
    """

    def __init__(self, session: Session):
        self._session = session

    def get(self, part_id) -> Optional[Part]:
        return self._session.get(Part, part_id)

    def require(self, part_id) -> Part:
        part = self.get(part_id)
        if part is None:
            raise PartNotFoundError(part_id)
        return part

    def get_by_part_number(self, part_number: str) -> Optional[Part]:
        return (
            self._session.execute(select(Part).where(Part.part_number == part_number))
            .scalars()
            .first()
        )

    def get_for_update(self, part_id) -> Optional[Part]:
        """Read the latest committed row and lock it where the backend supports row locks."""
        return (
            self._session.execute(
                select(Part)
                .where(Part.id == part_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            .scalars()
            .first()
        )

    def list(self, filters: Optional[PartFilter] = None) -> list[Part]:
        filters = filters or PartFilter()
        stmt = select(Part)

        conditions = []
        search = (filters.search or "").strip()
        if search:
            pattern = _like_pattern(search)
            conditions.append(or_(*(column.ilike(pattern, escape="\\") for column in SEARCH_COLUMNS)))
        if filters.category:
            conditions.append(Part.category == filters.category)
        if filters.low_stock:
            conditions.append(Part.quantity <= Part.low_stock_threshold)
        if conditions:
            stmt = stmt.where(*conditions)

        if filters.sort_by:
            sort_column = SORT_FIELDS.get(filters.sort_by, DEFAULT_SORT_FIELD)
            ascending = (filters.sort_order or "").lower() == "asc"
        else:
            sort_column = DEFAULT_SORT_FIELD
            ascending = False

        if ascending:
            stmt = stmt.order_by(sort_column.asc(), Part.id.asc())
        else:
            stmt = stmt.order_by(sort_column.desc(), Part.id.desc())

        return list(self._session.execute(stmt).scalars().all())

    def categories(self) -> list[str]:
        rows = self._session.execute(
            select(Part.category)
            .where(Part.category.is_not(None), Part.category != "")
            .distinct()
            .order_by(Part.category)
        )
        return [row[0] for row in rows]

    def create(self, attributes: Mapping) -> Part:
        values = _clean_values(attributes, CREATE_FIELDS)
        part_number = values.get("part_number")
        if part_number is not None and self.get_by_part_number(part_number) is not None:
            raise DuplicatePartNumberError(part_number)

        part = Part(**values)
        self._write_checking_part_number(part_number, lambda: self._session.add(part))
        logger.info("Created part %s (%s)", part.id, part.part_number)
        return part

    def update_attributes(self, part_id, partial: Mapping) -> Part:
        values = _clean_values(partial, EDITABLE_FIELDS)
        part = self.require(part_id)

        part_number = values.get("part_number")
        if part_number is not None and part_number != part.part_number:
            existing = self.get_by_part_number(part_number)
            if existing is not None and existing.id != part.id:
                raise DuplicatePartNumberError(part_number)

        def write():
            for field, value in values.items():
                setattr(part, field, value)
            part.updated_at = datetime.now(timezone.utc)

        self._write_checking_part_number(part_number, write)
        return part

    def delete(self, part_id, *, actor_id=None) -> None:
        """Delete the part row; its ledger rows stay and a tombstone records the deletion."""
        part = self.require(part_id)
        self._session.add(
            PartTombstone(
                part_id=part.id,
                part_number=part.part_number,
                name=part.name,
                deleted_by=actor_id,
            )
        )
        self._session.delete(part)
        self._session.flush()
        logger.info("Deleted part %s (%s)", part_id, part.part_number)

    def set_quantity(self, part_id, new_quantity: int, *, expected: int) -> bool:
        """Compare-and-set the stored quantity.

        Only the stock mutation engine calls this; it bypasses the ledger.
        Returns False when the row no longer holds ``expected``.
        """
        result = self._session.execute(
            update(Part)
            .where(Part.id == part_id, Part.quantity == expected)
            .values(quantity=new_quantity, updated_at=datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def _write_checking_part_number(self, part_number: Optional[str], write: Callable[[], None]) -> None:
        # The savepoint confines a unique-constraint failure to this write;
        # the caller's pending work stays in its transaction.
        try:
            with self._session.begin_nested():
                write()
                self._session.flush()
        except IntegrityError as exc:
            if part_number is not None and self.get_by_part_number(part_number) is not None:
                raise DuplicatePartNumberError(part_number) from exc
            raise


__all__ = ["PartFilter", "PartStore", "SORT_FIELDS"]
