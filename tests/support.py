"""Shared fixtures for the dashboard test cases."""

import datetime as dt
import os
import tempfile
import unittest
from pathlib import Path

# keep the tests off the default on-disk database
os.environ.setdefault("DATABASE_URL", "sqlite://")

from sqlalchemy.orm import sessionmaker  # noqa: E402

from db import init_db, make_engine  # noqa: E402
from models import Customer, Invoice, Revenue, User  # noqa: E402
from app.auth import hash_password  # noqa: E402
from app.deps import PAGE_CACHE  # noqa: E402


class DatabaseTestCase(unittest.TestCase):
    """Each test gets its own SQLite file with the schema created."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.engine = make_engine(f"sqlite:///{Path(self._tmp.name) / 'test.db'}")
        init_db(self.engine)
        self.Session = sessionmaker(bind=self.engine, autoflush=False)
        self.db = self.Session()
        PAGE_CACHE.clear()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()
        PAGE_CACHE.clear()
        self._tmp.cleanup()

    def broken_session(self):
        """A session on a database without any tables."""
        engine = make_engine(f"sqlite:///{Path(self._tmp.name) / 'empty.db'}")
        self.addCleanup(engine.dispose)
        session = sessionmaker(bind=engine)()
        self.addCleanup(session.close)
        return session

    # ---- data builders ----

    def add_customer(self, name: str, email: str | None = None) -> Customer:
        customer = Customer(
            name=name,
            email=email or f"{name.split()[0].lower()}@example.com",
            image_url=f"/static/customers/{name.lower().replace(' ', '-')}.png",
        )
        self.db.add(customer)
        self.db.commit()
        return customer

    def add_invoice(self, customer: Customer, amount: int, status: str = "pending",
                    date: dt.date | str = "2023-06-01") -> Invoice:
        if isinstance(date, str):
            date = dt.date.fromisoformat(date)
        invoice = Invoice(customer_id=customer.id, amount=amount, status=status, date=date)
        self.db.add(invoice)
        self.db.commit()
        return invoice

    def add_revenue(self, month: str, revenue: int) -> Revenue:
        row = Revenue(month=month, revenue=revenue)
        self.db.add(row)
        self.db.commit()
        return row

    def add_user(self, email: str = "user@nextmail.com", password: str = "123456") -> User:
        user = User(name="User", email=email, password=hash_password(password))
        self.db.add(user)
        self.db.commit()
        return user
