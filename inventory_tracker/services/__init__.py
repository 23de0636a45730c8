from inventory_tracker.services.dashboard_service import dashboard_summary, low_stock_listing
from inventory_tracker.services.ledger import MovementLedger
from inventory_tracker.services.part_store import PartFilter, PartStore
from inventory_tracker.services.stock_engine import StockMutationEngine

__all__ = [
    "MovementLedger",
    "PartFilter",
    "PartStore",
    "StockMutationEngine",
    "dashboard_summary",
    "low_stock_listing",
]
