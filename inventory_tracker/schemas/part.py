from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from inventory_tracker.models.part import MAX_QUANTITY

# Fields that may be omitted on update but never cleared.
_NON_NULLABLE_FIELDS = ("part_number", "name", "unit", "low_stock_threshold")


class PartAttributes(BaseModel):
    description: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    location: Optional[str] = None
    unit: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0)
    low_stock_threshold: Optional[int] = Field(
        None,
        ge=0,
        le=MAX_QUANTITY,
        validation_alias=AliasChoices("low_stock_threshold", "minStockLevel"),
    )

    model_config = ConfigDict(populate_by_name=True)


class PartCreate(PartAttributes):
    part_number: str = Field(
        min_length=1,
        validation_alias=AliasChoices("part_number", "partNumber"),
    )
    name: str = Field(min_length=1)
    quantity: int = Field(0, ge=0, le=MAX_QUANTITY)

    def to_attributes(self) -> dict:
        return self.model_dump(exclude_none=True)


class PartUpdate(PartAttributes):
    part_number: Optional[str] = Field(
        None,
        min_length=1,
        validation_alias=AliasChoices("part_number", "partNumber"),
    )
    name: Optional[str] = Field(None, min_length=1)

    def to_changes(self) -> dict:
        changes = self.model_dump(exclude_unset=True)
        for field in _NON_NULLABLE_FIELDS:
            if field in changes and changes[field] is None:
                del changes[field]
        return changes


class PartRead(BaseModel):
    id: int
    part_number: str
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    manufacturer: Optional[str] = None
    location: Optional[str] = None
    unit: str
    price: Optional[Decimal] = None
    quantity: int
    low_stock_threshold: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PartSummary(BaseModel):
    id: int
    name: str
    part_number: str
    category: Optional[str] = None
    quantity: int

    model_config = ConfigDict(from_attributes=True)
