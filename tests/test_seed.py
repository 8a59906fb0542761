import unittest

from support import DatabaseTestCase

from models import Customer, Invoice, Revenue, User
from app.auth import authorize
from app.services import data
from app.services.seed import SEED_DIR, seed_database


class SeedTestCase(DatabaseTestCase):
    def test_loads_placeholder_data(self) -> None:
        counts = seed_database(self.db, SEED_DIR)

        self.assertEqual(counts, {"customers": 6, "invoices": 13, "revenue": 12, "users": 1})
        self.assertEqual(data.fetch_invoices_pages(self.db, ""), 3)
        self.assertEqual([r.month for r in data.fetch_revenue(self.db)][:3], ["Jan", "Feb", "Mar"])

    def test_demo_user_can_sign_in(self) -> None:
        seed_database(self.db, SEED_DIR)

        user = authorize(self.db, {"email": "user@nextmail.com", "password": "123456"})

        self.assertIsNotNone(user)
        self.assertNotEqual(user.password, "123456")

    def test_rerun_inserts_nothing(self) -> None:
        seed_database(self.db, SEED_DIR)
        counts = seed_database(self.db, SEED_DIR)

        self.assertEqual(counts, {"customers": 0, "invoices": 0, "revenue": 0, "users": 0})
        self.assertEqual(self.db.query(Customer).count(), 6)
        self.assertEqual(self.db.query(Invoice).count(), 13)
        self.assertEqual(self.db.query(Revenue).count(), 12)
        self.assertEqual(self.db.query(User).count(), 1)

    def test_missing_folder(self) -> None:
        with self.assertRaises(FileNotFoundError):
            seed_database(self.db, SEED_DIR / "missing")


if __name__ == "__main__":
    unittest.main()
