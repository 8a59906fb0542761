import datetime as dt
import unittest
from types import SimpleNamespace
from unittest import mock

from support import DatabaseTestCase

from sqlalchemy.orm import Session

from models import Invoice
from app.deps import PAGE_CACHE
from app.results import ActionMessage, DatabaseFailure, Redirect, ValidationFailed
from app.services.actions import (
    INVOICES_PATH,
    authenticate,
    create_invoice,
    delete_invoice,
    update_invoice,
)

AMOUNT_ERROR = "Please enter an amount greater than $0."


class CreateInvoiceTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.customer = self.add_customer("Evil Rabbit")

    def form(self, **overrides):
        values = {"customerId": self.customer.id, "amount": "12.34", "status": "pending"}
        values.update(overrides)
        return values

    def test_stores_cents_and_today(self) -> None:
        result = create_invoice(self.db, self.form())

        self.assertEqual(result, Redirect(url=INVOICES_PATH))
        invoice = self.db.query(Invoice).one()
        self.assertEqual(invoice.amount, 1234)
        self.assertEqual(invoice.status, "pending")
        self.assertEqual(invoice.customer_id, self.customer.id)
        self.assertEqual(invoice.date, dt.date.today())

    def test_cents_are_rounded_not_truncated(self) -> None:
        # 0.29 * 100 == 28.999999999999996
        create_invoice(self.db, self.form(amount="0.29"))
        self.assertEqual(self.db.query(Invoice).one().amount, 29)

    def test_invalid_amounts_never_reach_the_database(self) -> None:
        for amount in ("0", "-5", "", None, "abc", "0.001"):
            with self.subTest(amount=amount):
                db = mock.Mock(spec=Session)

                result = create_invoice(db, self.form(amount=amount))

                self.assertIsInstance(result, ValidationFailed)
                self.assertEqual(result.errors, {"amount": [AMOUNT_ERROR]})
                self.assertEqual(result.message, "Missing Fields. Failed to Create Invoice.")
                self.assertEqual(db.method_calls, [])

    def test_amounts_beyond_the_column_are_rejected(self) -> None:
        for amount in ("1e308", "1e20", "21474836.48", "inf"):
            with self.subTest(amount=amount):
                db = mock.Mock(spec=Session)

                created = create_invoice(db, self.form(amount=amount))
                updated = update_invoice(db, "some-id", self.form(amount=amount))

                self.assertEqual(created.errors, {"amount": [AMOUNT_ERROR]})
                self.assertEqual(updated.errors, {"amount": [AMOUNT_ERROR]})
                self.assertEqual(db.method_calls, [])

    def test_largest_amount_is_stored(self) -> None:
        result = create_invoice(self.db, self.form(amount="21474836.47"))

        self.assertEqual(result, Redirect(url=INVOICES_PATH))
        self.assertEqual(self.db.query(Invoice).one().amount, 2**31 - 1)

    def test_driver_overflow_is_a_database_failure(self) -> None:
        db = mock.Mock(spec=Session)
        db.commit.side_effect = OverflowError("Python int too large to convert to SQLite INTEGER")

        with self.assertLogs("app.services.actions", level="ERROR"):
            result = create_invoice(db, self.form())

        self.assertEqual(result, DatabaseFailure(message="Database Error: Failed to Create Invoice."))
        db.rollback.assert_called_once_with()

    def test_field_errors_are_keyed_by_form_field(self) -> None:
        result = create_invoice(self.db, {"customerId": "", "amount": "10", "status": "overdue"})

        self.assertEqual(
            result.errors,
            {
                "customerId": ["Please select a customer."],
                "status": ["Please select an invoice status."],
            },
        )
        self.assertEqual(self.db.query(Invoice).count(), 0)

    def test_database_failure_is_returned(self) -> None:
        with self.assertLogs("app.services.actions", level="ERROR"):
            result = create_invoice(self.broken_session(), self.form())

        self.assertEqual(result, DatabaseFailure(message="Database Error: Failed to Create Invoice."))

    def test_success_revalidates_listing(self) -> None:
        PAGE_CACHE[INVOICES_PATH] = {("", 1): {"invoices": [], "total_pages": 0}}

        create_invoice(self.db, self.form())

        self.assertNotIn(INVOICES_PATH, PAGE_CACHE)

    def test_validation_failure_keeps_cache(self) -> None:
        PAGE_CACHE[INVOICES_PATH] = {("", 1): {"invoices": [], "total_pages": 0}}

        create_invoice(self.db, self.form(amount="0"))

        self.assertIn(INVOICES_PATH, PAGE_CACHE)


class UpdateAndDeleteTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.rabbit = self.add_customer("Evil Rabbit")
        self.amy = self.add_customer("Amy Burrell")
        self.invoice = self.add_invoice(self.rabbit, 15795, "pending", "2022-12-06")
        self.invoice_id = self.invoice.id

    def test_update_overwrites_fields(self) -> None:
        result = update_invoice(
            self.db,
            self.invoice_id,
            {"customerId": self.amy.id, "amount": "99.99", "status": "paid"},
        )

        self.assertEqual(result, Redirect(url=INVOICES_PATH))
        self.db.expire_all()
        invoice = self.db.get(Invoice, self.invoice_id)
        self.assertEqual(invoice.customer_id, self.amy.id)
        self.assertEqual(invoice.amount, 9999)
        self.assertEqual(invoice.status, "paid")
        # date is not touched by an edit
        self.assertEqual(invoice.date, dt.date(2022, 12, 6))

    def test_update_rejects_non_positive_amount(self) -> None:
        result = update_invoice(
            self.db,
            self.invoice_id,
            {"customerId": self.amy.id, "amount": "-1", "status": "paid"},
        )

        self.assertIsInstance(result, ValidationFailed)
        self.assertEqual(result.message, "Missing Fields. Failed to Update Invoice.")
        self.assertEqual(result.errors["amount"], [AMOUNT_ERROR])
        self.db.expire_all()
        self.assertEqual(self.db.get(Invoice, self.invoice_id).amount, 15795)

    def test_update_database_failure(self) -> None:
        with self.assertLogs("app.services.actions", level="ERROR"):
            result = update_invoice(
                self.broken_session(),
                self.invoice_id,
                {"customerId": self.amy.id, "amount": "5", "status": "paid"},
            )

        self.assertEqual(result, DatabaseFailure(message="Database Error: Failed to Update Invoice."))

    def test_delete(self) -> None:
        PAGE_CACHE[INVOICES_PATH] = {("", 1): {}}

        result = delete_invoice(self.db, self.invoice_id)

        self.assertEqual(result, ActionMessage(message="Deleted Invoice"))
        self.assertEqual(self.db.query(Invoice).count(), 0)
        self.assertNotIn(INVOICES_PATH, PAGE_CACHE)

    def test_delete_database_failure_does_not_raise(self) -> None:
        with self.assertLogs("app.services.actions", level="ERROR"):
            result = delete_invoice(self.broken_session(), self.invoice_id)

        self.assertEqual(result, DatabaseFailure(message="Database Error: Failed to Delete Invoice."))


class AuthenticateTestCase(DatabaseTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.user = self.add_user("user@nextmail.com", "123456")
        self.user_id = self.user.id
        self.request = SimpleNamespace(session={})

    def test_success_redirects_and_stores_user(self) -> None:
        result = authenticate(self.request, self.db, {"email": "user@nextmail.com", "password": "123456"})

        self.assertEqual(result, Redirect(url="/dashboard"))
        self.assertEqual(self.request.session["user_id"], self.user_id)

    def test_callback_url(self) -> None:
        form = {"email": "user@nextmail.com", "password": "123456", "callbackUrl": "/dashboard/invoices"}
        self.assertEqual(authenticate(self.request, self.db, form), Redirect(url="/dashboard/invoices"))

        form["callbackUrl"] = "https://elsewhere.example/"
        self.assertEqual(authenticate(self.request, self.db, form), Redirect(url="/dashboard"))

    def test_wrong_password(self) -> None:
        result = authenticate(self.request, self.db, {"email": "user@nextmail.com", "password": "654321"})

        self.assertEqual(result, "Invalid credentials.")
        self.assertNotIn("user_id", self.request.session)

    def test_unknown_user_and_malformed_credentials(self) -> None:
        for form in (
            {"email": "nobody@nextmail.com", "password": "123456"},
            {"email": "not-an-email", "password": "123456"},
            {"email": "user@nextmail.com", "password": "123"},
            {},
        ):
            with self.subTest(form=form):
                self.assertEqual(authenticate(self.request, self.db, form), "Invalid credentials.")

    def test_other_auth_failures_are_generic(self) -> None:
        with self.assertLogs("app.auth", level="ERROR"):
            result = authenticate(
                self.request,
                self.broken_session(),
                {"email": "user@nextmail.com", "password": "123456"},
            )

        self.assertEqual(result, "Something went wrong.")

    def test_non_auth_errors_propagate(self) -> None:
        # no session support on the request: not an auth failure
        request = SimpleNamespace()
        with self.assertRaises(AttributeError):
            authenticate(request, self.db, {"email": "user@nextmail.com", "password": "123456"})


if __name__ == "__main__":
    unittest.main()
