from typing import List

from pydantic import BaseModel, Field

from inventory_tracker.schemas.part import PartSummary


class DashboardSummary(BaseModel):
    total_parts: int
    low_stock_parts: int
    out_of_stock_parts: int
    categories: int
    latest_parts: List[PartSummary] = Field(default_factory=list)
