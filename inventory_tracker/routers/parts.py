import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from inventory_tracker.core.errors import (
    DuplicatePartNumberError,
    InventoryError,
    InvalidPartDataError,
    InvalidQuantityError,
    NegativeStockError,
    PartNotFoundError,
    TransientStorageError,
)
from inventory_tracker.database.session import is_transient_error
from inventory_tracker.dependencies import get_actor_id, get_db, get_stock_engine, require_auth
from inventory_tracker.schemas.movement import MovementRead, StockChangeRequest, StockQuantityRequest
from inventory_tracker.schemas.part import PartCreate, PartRead, PartUpdate
from inventory_tracker.services.dashboard_service import low_stock_listing
from inventory_tracker.services.ledger import MovementLedger
from inventory_tracker.services.part_store import PartFilter, PartStore
from inventory_tracker.services.stock_engine import StockMutationEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/parts", tags=["Parts"], dependencies=[Depends(require_auth)])


def _http_error(exc: InventoryError) -> HTTPException:
    if isinstance(exc, PartNotFoundError):
        return HTTPException(status_code=404, detail="Part not found")
    if isinstance(exc, TransientStorageError):
        return HTTPException(status_code=503, detail="Storage temporarily unavailable, retry later")
    if isinstance(exc, (NegativeStockError, DuplicatePartNumberError, InvalidPartDataError, InvalidQuantityError)):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail="Server Error")


def _commit(db: Session) -> None:
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        if is_transient_error(exc):
            logger.error("Commit failed", exc_info=True)
            raise _http_error(TransientStorageError(str(exc))) from exc
        raise


@router.get("", response_model=List[PartRead])
def list_parts(
    search: Optional[str] = Query(None, description="Free-text search"),
    category: Optional[str] = Query(None, description="Exact category"),
    low_stock: bool = Query(False, alias="lowStock", description="Only parts at or below threshold"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc | desc"),
    db: Session = Depends(get_db),
):
    filters = PartFilter(
        search=search,
        category=category,
        low_stock=low_stock,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    return PartStore(db).list(filters)


@router.get("/low-stock", response_model=List[PartRead])
def list_low_stock(db: Session = Depends(get_db)):
    return low_stock_listing(db)


@router.get("/categories", response_model=List[str])
def list_categories(db: Session = Depends(get_db)):
    return PartStore(db).categories()


@router.get("/{part_id}", response_model=PartRead)
def get_part(part_id: int, db: Session = Depends(get_db)):
    part = PartStore(db).get(part_id)
    if part is None:
        raise HTTPException(status_code=404, detail="Part not found")
    return part


@router.get("/{part_id}/history", response_model=List[MovementRead])
def get_part_history(part_id: int, db: Session = Depends(get_db)):
    if PartStore(db).get(part_id) is None:
        raise HTTPException(status_code=404, detail="Part not found")
    return MovementLedger(db).history_for(part_id)


@router.post("", response_model=PartRead, status_code=201)
def create_part(payload: PartCreate, db: Session = Depends(get_db)):
    try:
        part = PartStore(db).create(payload.to_attributes())
    except InventoryError as exc:
        raise _http_error(exc) from exc
    _commit(db)
    db.refresh(part)
    return part


@router.put("/{part_id}", response_model=PartRead)
def update_part(part_id: int, payload: PartUpdate, db: Session = Depends(get_db)):
    try:
        part = PartStore(db).update_attributes(part_id, payload.to_changes())
    except InventoryError as exc:
        raise _http_error(exc) from exc
    _commit(db)
    db.refresh(part)
    return part


@router.delete("/{part_id}")
def delete_part(
    part_id: int,
    db: Session = Depends(get_db),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    try:
        PartStore(db).delete(part_id, actor_id=actor_id)
    except InventoryError as exc:
        raise _http_error(exc) from exc
    _commit(db)
    return {"detail": "Part removed"}


@router.put("/{part_id}/stock", response_model=PartRead)
def change_stock(
    part_id: int,
    payload: StockChangeRequest,
    engine: StockMutationEngine = Depends(get_stock_engine),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    try:
        return engine.apply_stock_change(
            part_id,
            payload.quantity_change,
            actor_id=actor_id,
            note=payload.notes,
            kind=payload.movement_type,
        )
    except InventoryError as exc:
        raise _http_error(exc) from exc


@router.patch("/{part_id}/add", response_model=PartRead)
def add_stock(
    part_id: int,
    payload: StockQuantityRequest,
    engine: StockMutationEngine = Depends(get_stock_engine),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    try:
        return engine.add_stock(part_id, payload.quantity, actor_id=actor_id, note=payload.notes)
    except InventoryError as exc:
        raise _http_error(exc) from exc


@router.patch("/{part_id}/sell", response_model=PartRead)
def sell_stock(
    part_id: int,
    payload: Optional[StockQuantityRequest] = None,
    engine: StockMutationEngine = Depends(get_stock_engine),
    actor_id: Optional[int] = Depends(get_actor_id),
):
    payload = payload or StockQuantityRequest()
    try:
        return engine.sell_stock(part_id, payload.quantity, actor_id=actor_id, note=payload.notes)
    except InventoryError as exc:
        raise _http_error(exc) from exc


__all__ = ["router"]
