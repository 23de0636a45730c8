import unittest

from sqlalchemy.orm import sessionmaker

from inventory_tracker.database.base import Base
from inventory_tracker.database.engine import create_db_engine
from inventory_tracker.models import import_all_models
from inventory_tracker.services.dashboard_service import dashboard_summary, low_stock_listing
from inventory_tracker.services.part_store import PartStore


class DashboardServiceTest(unittest.TestCase):
    def setUp(self):
        import_all_models()
        self.engine = create_db_engine("sqlite://")
        Base.metadata.create_all(bind=self.engine)
        self.db = sessionmaker(bind=self.engine)()
        self.store = PartStore(self.db)

    def tearDown(self):
        self.db.close()
        self.engine.dispose()

    def _part(self, part_number, quantity, threshold, category=None):
        part = self.store.create(
            {
                "part_number": part_number,
                "name": part_number,
                "quantity": quantity,
                "low_stock_threshold": threshold,
                "category": category,
            }
        )
        self.db.commit()
        return part

    def test_empty_part_counts_only_as_out_of_stock(self):
        self._part("EMPTY", 0, 5)

        summary = dashboard_summary(self.db)

        self.assertEqual(summary["total_parts"], 1)
        self.assertEqual(summary["out_of_stock_parts"], 1)
        self.assertEqual(summary["low_stock_parts"], 0)

    def test_summary_counts(self):
        self._part("OK-1", 50, 10, category="Brakes")
        self._part("LOW-1", 10, 10, category="Brakes")
        self._part("LOW-2", 3, 10, category="Filters")
        self._part("OUT-1", 0, 10, category="Ignition")
        self._part("MISC-1", 7, 0)

        summary = dashboard_summary(self.db)

        self.assertEqual(summary["total_parts"], 5)
        self.assertEqual(summary["low_stock_parts"], 2)
        self.assertEqual(summary["out_of_stock_parts"], 1)
        self.assertEqual(summary["categories"], 3)

    def test_latest_parts_are_newest_first_and_limited(self):
        for index in range(7):
            self._part(f"P-{index}", 10, 1)

        summary = dashboard_summary(self.db, latest_limit=5)

        self.assertEqual(
            [part.part_number for part in summary["latest_parts"]],
            ["P-6", "P-5", "P-4", "P-3", "P-2"],
        )

    def test_latest_parts_uses_configured_limit(self):
        for index in range(7):
            self._part(f"P-{index}", 10, 1)
        self.assertEqual(len(dashboard_summary(self.db)["latest_parts"]), 5)

    def test_low_stock_listing_orders_by_ratio(self):
        self._part("HALF", 5, 10)
        self._part("EDGE", 10, 10)
        self._part("EMPTY", 0, 4)
        self._part("QUARTER", 1, 4)
        self._part("PLENTY", 40, 10)
        self._part("NO-THRESHOLD", 0, 0)

        listing = [part.part_number for part in low_stock_listing(self.db)]

        self.assertEqual(listing, ["NO-THRESHOLD", "EMPTY", "QUARTER", "HALF", "EDGE"])


if __name__ == "__main__":
    unittest.main()
