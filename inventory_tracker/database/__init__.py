from inventory_tracker.database.base import Base
from inventory_tracker.database.engine import create_db_engine, engine
from inventory_tracker.database.session import SessionLocal, get_db, unit_of_work

__all__ = ["Base", "SessionLocal", "create_db_engine", "engine", "get_db", "unit_of_work"]
