# app/services/actions.py
#
# Mutation Layer
# Validated create/update/delete of invoices, plus the sign-in form action.
# Validation problems and database problems are returned as distinct result
# types; success either redirects to the invoices listing or carries a message.

import logging
from datetime import date
from typing import Mapping, Union

from fastapi import Request
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Invoice
from app.auth import sign_in
from app.deps import revalidate_path
from app.errors import AuthError
from app.results import ActionMessage, DatabaseFailure, Redirect, ValidationFailed
from app.schemas import InvoiceFormIn, field_errors

logger = logging.getLogger(__name__)

INVOICES_PATH = "/dashboard/invoices"


InvoiceResult = Union[ValidationFailed, DatabaseFailure, Redirect]


def _validate_invoice_form(form: Mapping, failure_message: str) -> Union[InvoiceFormIn, ValidationFailed]:
    try:
        return InvoiceFormIn.model_validate(
            {
                "customerId": form.get("customerId"),
                "amount": form.get("amount"),
                "status": form.get("status"),
            }
        )
    except ValidationError as e:
        return ValidationFailed(errors=field_errors(e.errors()), message=failure_message)


# -------------------------------------------------------------------
# Invoices
# -------------------------------------------------------------------

def create_invoice(db: Session, form: Mapping) -> InvoiceResult:
    """
    Validate the form and insert one invoice dated today.

    Amounts are stored in cents. On success the invoices listing is
    revalidated and the caller is sent back to it.
    """
    validated = _validate_invoice_form(form, "Missing Fields. Failed to Create Invoice.")
    if isinstance(validated, ValidationFailed):
        return validated

    invoice = Invoice(
        customer_id=validated.customer_id,
        amount=validated.amount_in_cents,
        status=validated.status,
        date=date.today(),
    )

    try:
        db.add(invoice)
        db.commit()
    except (SQLAlchemyError, OverflowError) as e:
        db.rollback()
        logger.error("Database Error: %r", e)
        return DatabaseFailure(message="Database Error: Failed to Create Invoice.")

    revalidate_path(INVOICES_PATH)
    return Redirect(url=INVOICES_PATH)


def update_invoice(db: Session, invoice_id: str, form: Mapping) -> InvoiceResult:
    """Validate the form and overwrite customer, amount and status of one invoice."""
    validated = _validate_invoice_form(form, "Missing Fields. Failed to Update Invoice.")
    if isinstance(validated, ValidationFailed):
        return validated

    try:
        (
            db.query(Invoice)
            .filter(Invoice.id == invoice_id)
            .update(
                {
                    Invoice.customer_id: validated.customer_id,
                    Invoice.amount: validated.amount_in_cents,
                    Invoice.status: validated.status,
                },
                synchronize_session=False,
            )
        )
        db.commit()
    except (SQLAlchemyError, OverflowError) as e:
        db.rollback()
        logger.error("Database Error: %r", e)
        return DatabaseFailure(message="Database Error: Failed to Update Invoice.")

    revalidate_path(INVOICES_PATH)
    return Redirect(url=INVOICES_PATH)


def delete_invoice(db: Session, invoice_id: str) -> Union[ActionMessage, DatabaseFailure]:
    try:
        db.query(Invoice).filter(Invoice.id == invoice_id).delete(synchronize_session=False)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error("Database Error: %r", e)
        return DatabaseFailure(message="Database Error: Failed to Delete Invoice.")

    revalidate_path(INVOICES_PATH)
    return ActionMessage(message="Deleted Invoice")


# -------------------------------------------------------------------
# Sign-in
# -------------------------------------------------------------------

def authenticate(request: Request, db: Session, form: Mapping) -> Union[str, Redirect]:
    """
    Form action for the login page.

    Returns a user-facing error string for authentication failures; any other
    exception propagates to the caller unchanged.
    """
    try:
        return sign_in(request, db, form)
    except AuthError as e:
        if e.type == "CredentialsSignin":
            return "Invalid credentials."
        return "Something went wrong."
