from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from inventory_tracker.models.movement import MovementKind
from inventory_tracker.models.part import MAX_QUANTITY


class StockChangeRequest(BaseModel):
    quantity_change: int = Field(ge=-MAX_QUANTITY, le=MAX_QUANTITY)
    notes: Optional[str] = None
    movement_type: MovementKind = MovementKind.ADJUSTMENT


class StockQuantityRequest(BaseModel):
    quantity: int = Field(1, gt=0, le=MAX_QUANTITY)
    notes: Optional[str] = None


class MovementRead(BaseModel):
    id: int
    type: MovementKind = Field(validation_alias=AliasChoices("movement_type", "type"))
    quantity: int = Field(validation_alias=AliasChoices("quantity_change", "quantity"))
    date: datetime = Field(validation_alias=AliasChoices("created_at", "date"))
    note: Optional[str] = Field(None, validation_alias=AliasChoices("notes", "note"))
    user: Optional[str] = Field(None, validation_alias=AliasChoices("user_name", "user"))

    model_config = ConfigDict(from_attributes=True)
