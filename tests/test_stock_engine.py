import unittest
from unittest.mock import patch

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import sessionmaker

from inventory_tracker.core.errors import (
    InvalidQuantityError,
    NegativeStockError,
    PartNotFoundError,
    SellExceedsStockError,
    TransientStorageError,
)
from inventory_tracker.database.base import Base
from inventory_tracker.database.engine import create_db_engine
from inventory_tracker.models import import_all_models
from inventory_tracker.models.movement import MovementKind
from inventory_tracker.models.part import MAX_QUANTITY
from inventory_tracker.models.user import User
from inventory_tracker.services.dashboard_service import low_stock_listing
from inventory_tracker.services.ledger import MovementLedger
from inventory_tracker.services.part_store import PartStore
from inventory_tracker.services.stock_engine import StockMutationEngine


class StockMutationEngineTest(unittest.TestCase):
    def setUp(self):
        import_all_models()
        self.engine = create_db_engine("sqlite://")
        Base.metadata.create_all(bind=self.engine)
        self.Session = sessionmaker(bind=self.engine, expire_on_commit=False)
        self.stock = StockMutationEngine(self.Session)

    def tearDown(self):
        self.engine.dispose()

    def _create_part(self, quantity=10, threshold=5, part_number="BRK-1001"):
        db = self.Session()
        try:
            part = PartStore(db).create(
                {
                    "part_number": part_number,
                    "name": "Brake Pad Set",
                    "quantity": quantity,
                    "low_stock_threshold": threshold,
                }
            )
            db.commit()
            return part.id
        finally:
            db.close()

    def _quantity(self, part_id):
        db = self.Session()
        try:
            return PartStore(db).get(part_id).quantity
        finally:
            db.close()

    def _history(self, part_id):
        db = self.Session()
        try:
            return MovementLedger(db).history_for(part_id)
        finally:
            db.close()

    def test_add_stock_records_movement(self):
        part_id = self._create_part(quantity=10, threshold=5)

        part = self.stock.apply_stock_change(part_id, 20, kind=MovementKind.ADD)

        self.assertEqual(part.quantity, 30)
        self.assertEqual(self._quantity(part_id), 30)
        history = self._history(part_id)
        self.assertEqual(len(history), 1)
        self.assertEqual(history[0].quantity_change, 20)
        self.assertEqual(history[0].movement_type, MovementKind.ADD)

    def test_new_part_has_no_movements(self):
        part_id = self._create_part(quantity=10)
        self.assertEqual(self._history(part_id), [])

    def test_sell_down_to_threshold_lists_part_as_low_stock(self):
        part_id = self._create_part(quantity=30, threshold=5)

        part = self.stock.sell_stock(part_id, 25)

        self.assertEqual(part.quantity, 5)
        movement = self._history(part_id)[0]
        self.assertEqual(movement.quantity_change, -25)
        self.assertEqual(movement.movement_type, MovementKind.SALE)
        self.assertEqual(movement.notes, "Sale")

        db = self.Session()
        try:
            self.assertIn(part_id, [p.id for p in low_stock_listing(db)])
        finally:
            db.close()

    def test_overselling_is_rejected_without_side_effects(self):
        part_id = self._create_part(quantity=5)

        with self.assertRaises(SellExceedsStockError) as ctx:
            self.stock.sell_stock(part_id, 10)

        self.assertIsInstance(ctx.exception, NegativeStockError)
        self.assertEqual(str(ctx.exception), "Cannot sell more than available quantity")
        self.assertEqual(ctx.exception.available, 5)
        self.assertEqual(ctx.exception.delta, -10)
        self.assertEqual(self._quantity(part_id), 5)
        self.assertEqual(self._history(part_id), [])

    def test_negative_adjustment_uses_generic_message(self):
        part_id = self._create_part(quantity=2)

        with self.assertRaises(NegativeStockError) as ctx:
            self.stock.apply_stock_change(part_id, -3)

        self.assertNotIsInstance(ctx.exception, SellExceedsStockError)
        self.assertEqual(str(ctx.exception), "Cannot reduce quantity below zero")
        self.assertEqual(self._quantity(part_id), 2)

    def test_adjustment_may_empty_the_part(self):
        part_id = self._create_part(quantity=4)
        part = self.stock.adjust_stock(part_id, -4, note="Cycle count")
        self.assertEqual(part.quantity, 0)
        self.assertEqual(self._history(part_id)[0].movement_type, MovementKind.ADJUSTMENT)

    def test_missing_part(self):
        with self.assertRaises(PartNotFoundError):
            self.stock.apply_stock_change(404, 1)
        self.assertEqual(self._history(404), [])

    def test_invalid_quantities(self):
        part_id = self._create_part()
        for call in (
            lambda: self.stock.apply_stock_change(part_id, 0),
            lambda: self.stock.apply_stock_change(part_id, True),
            lambda: self.stock.apply_stock_change(part_id, 1.5),
            lambda: self.stock.add_stock(part_id, -2),
            lambda: self.stock.sell_stock(part_id, 0),
        ):
            with self.assertRaises(InvalidQuantityError):
                call()
        self.assertEqual(self._quantity(part_id), 10)
        self.assertEqual(self._history(part_id), [])

    def test_out_of_range_quantities_are_rejected(self):
        part_id = self._create_part(quantity=10)
        for call in (
            lambda: self.stock.apply_stock_change(part_id, 10**20),
            lambda: self.stock.apply_stock_change(part_id, -(10**20)),
            lambda: self.stock.add_stock(part_id, 2**63 - 1),
            lambda: self.stock.add_stock(part_id, MAX_QUANTITY),
            lambda: self.stock.sell_stock(part_id, MAX_QUANTITY + 1),
        ):
            with self.assertRaises(InvalidQuantityError):
                call()
        self.assertEqual(self._quantity(part_id), 10)
        self.assertEqual(self._history(part_id), [])

    def test_quantity_may_reach_the_column_limit(self):
        part_id = self._create_part(quantity=10)
        part = self.stock.add_stock(part_id, MAX_QUANTITY - 10)
        self.assertEqual(part.quantity, MAX_QUANTITY)

    def test_quantity_matches_initial_plus_successful_deltas(self):
        part_id = self._create_part(quantity=3)
        deltas = [4, -2, -9, 6, -11, -1, 15, -20, 2]
        applied = []
        for delta in deltas:
            try:
                self.stock.apply_stock_change(part_id, delta)
            except NegativeStockError:
                continue
            applied.append(delta)

        self.assertEqual(self._quantity(part_id), 3 + sum(applied))
        self.assertEqual(len(self._history(part_id)), len(applied))
        db = self.Session()
        try:
            ledger = MovementLedger(db)
            self.assertEqual(ledger.count_for(part_id), len(applied))
            self.assertEqual(ledger.total_delta_for(part_id), sum(applied))
        finally:
            db.close()

    def test_history_is_newest_first(self):
        part_id = self._create_part(quantity=0)
        deltas = [5, -2, 7, -1]
        self.stock.add_stock(part_id, 5)
        self.stock.sell_stock(part_id, 2)
        self.stock.add_stock(part_id, 7)
        self.stock.apply_stock_change(part_id, -1, note="Damaged")

        history = self._history(part_id)

        self.assertEqual([m.quantity_change for m in history], list(reversed(deltas)))
        self.assertEqual(
            [m.movement_type for m in history],
            [MovementKind.ADJUSTMENT, MovementKind.ADD, MovementKind.SALE, MovementKind.ADD],
        )
        timestamps = [m.created_at for m in history]
        self.assertEqual(timestamps, sorted(timestamps, reverse=True))
        self.assertEqual(history[0].notes, "Damaged")
        self.assertEqual(history[-1].notes, "Restock")

    def test_history_resolves_actor_name(self):
        db = self.Session()
        try:
            user = User(name="Dana", email="dana@example.com", role="admin")
            db.add(user)
            db.commit()
            user_id = user.id
        finally:
            db.close()
        part_id = self._create_part()

        self.stock.sell_stock(part_id, 1, actor_id=user_id)
        self.stock.sell_stock(part_id, 1)

        history = self._history(part_id)
        self.assertIsNone(history[0].user_id)
        self.assertIsNone(history[0].user_name)
        self.assertEqual(history[1].user_id, user_id)
        self.assertEqual(history[1].user_name, "Dana")

    def test_storage_failure_rolls_back_quantity(self):
        part_id = self._create_part(quantity=10)
        failure = OperationalError("INSERT INTO stock_movements", {}, Exception("database is locked"))

        with patch.object(MovementLedger, "append", side_effect=failure):
            with self.assertRaises(TransientStorageError):
                self.stock.add_stock(part_id, 5)

        self.assertEqual(self._quantity(part_id), 10)
        self.assertEqual(self._history(part_id), [])

    def test_exhausted_compare_and_set_is_transient(self):
        part_id = self._create_part(quantity=10)
        stock = StockMutationEngine(self.Session, max_attempts=3)

        with patch.object(PartStore, "set_quantity", return_value=False) as set_quantity:
            with self.assertRaises(TransientStorageError):
                stock.sell_stock(part_id, 1)

        self.assertEqual(set_quantity.call_count, 3)
        self.assertEqual(self._quantity(part_id), 10)
        self.assertEqual(self._history(part_id), [])

    def test_exhausted_compare_and_set_is_logged_as_error(self):
        part_id = self._create_part(quantity=10)
        stock = StockMutationEngine(self.Session, max_attempts=2)

        with patch.object(PartStore, "set_quantity", return_value=False):
            with self.assertLogs("inventory_tracker.services.stock_engine", level="ERROR") as logs:
                with self.assertRaises(TransientStorageError):
                    stock.sell_stock(part_id, 1)

        self.assertEqual([record.levelname for record in logs.records], ["ERROR"])
        self.assertIn(f"part {part_id}", logs.output[0])

    def test_storage_failure_is_logged_as_error(self):
        part_id = self._create_part(quantity=10)
        failure = OperationalError("INSERT INTO stock_movements", {}, Exception("database is locked"))

        with patch.object(MovementLedger, "append", side_effect=failure):
            with self.assertLogs("inventory_tracker", level="ERROR") as logs:
                with self.assertRaises(TransientStorageError):
                    self.stock.add_stock(part_id, 5)

        self.assertTrue(any(record.levelname == "ERROR" for record in logs.records))


if __name__ == "__main__":
    unittest.main()
