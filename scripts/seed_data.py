import argparse
from decimal import Decimal

from sqlalchemy import delete, select

from inventory_tracker.core.logging import setup_logging
from inventory_tracker.database import Base, SessionLocal, engine
from inventory_tracker.models import import_all_models
from inventory_tracker.models.part import Part
from inventory_tracker.models.user import User
from inventory_tracker.services.part_store import PartStore
from inventory_tracker.services.stock_engine import StockMutationEngine


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample parts and users.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing parts and users before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        if args.reset:
            # Ledger and tombstone rows are audit history and are never cleared.
            db.execute(delete(Part))
            db.execute(delete(User))
            db.commit()

        has_part = db.execute(select(Part.id).limit(1)).first()
        if has_part:
            print("Seed skipped: parts already exist.")
            return

        admin = User(name="Admin", email="admin@example.com", role="admin")
        clerk = User(name="Counter Clerk", email="clerk@example.com", role="user")
        db.add_all([admin, clerk])
        db.flush()

        store = PartStore(db)
        parts = [
            store.create(
                {
                    "part_number": "BRK-1001",
                    "name": "Brake Pad Set",
                    "category": "Brakes",
                    "manufacturer": "Bosch",
                    "location": "A1-03",
                    "price": Decimal("42.50"),
                    "quantity": 24,
                    "low_stock_threshold": 8,
                }
            ),
            store.create(
                {
                    "part_number": "FLT-2002",
                    "name": "Oil Filter",
                    "category": "Filters",
                    "manufacturer": "Mann",
                    "location": "B2-11",
                    "price": Decimal("9.95"),
                    "quantity": 6,
                    "low_stock_threshold": 10,
                }
            ),
            store.create(
                {
                    "part_number": "SPK-3003",
                    "name": "Spark Plug",
                    "category": "Ignition",
                    "manufacturer": "NGK",
                    "location": "C1-07",
                    "price": Decimal("4.20"),
                    "quantity": 0,
                    "low_stock_threshold": 20,
                }
            ),
        ]
        db.commit()
        admin_id = admin.id
        clerk_id = clerk.id
        part_ids = [part.id for part in parts]
    finally:
        db.close()

    stock_engine = StockMutationEngine(SessionLocal)
    stock_engine.add_stock(part_ids[2], 40, actor_id=admin_id, note="Initial delivery")
    stock_engine.sell_stock(part_ids[0], 2, actor_id=clerk_id)
    stock_engine.sell_stock(part_ids[2], 12, actor_id=clerk_id)

    print(f"Seeded {len(part_ids)} parts and 2 users.")


if __name__ == "__main__":
    main()
