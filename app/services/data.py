# app/services/data.py
#
# Query Layer
# Read-only fetch functions used by the dashboard pages. Every function takes
# the database session explicitly, maps rows into the records declared in
# app/schemas.py, and turns any database failure into a generic DatabaseError.

import logging
import math
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from sqlalchemy import String, case, cast, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models import Customer, Invoice, Revenue
from app.errors import DatabaseError
from app.schemas import (
    CardData,
    CustomerField,
    CustomersTableRow,
    InvoiceForm,
    InvoicesTableRow,
    LatestInvoice,
    Revenue as RevenueRecord,
)
from app.services.formatting import format_currency

logger = logging.getLogger(__name__)

ITEMS_PER_PAGE = 6

MONTH_ORDER = ["Jan", "Feb", "Mar", "Apr", "May", "Jun",
               "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]


def _db_error(exc: Exception, message: str) -> DatabaseError:
    logger.error("Database Error: %r", exc)
    return DatabaseError(message)


def _month_index(month: str) -> int:
    try:
        return MONTH_ORDER.index(month[:3].title())
    except ValueError:
        return len(MONTH_ORDER)


def _invoice_search(query: str):
    """WHERE clause shared by the invoices table and its page count."""
    pattern = f"%{query}%"
    return or_(
        Customer.name.ilike(pattern),
        Customer.email.ilike(pattern),
        cast(Invoice.amount, String).ilike(pattern),
        cast(Invoice.date, String).ilike(pattern),
        Invoice.status.ilike(pattern),
    )


# -------------------------------------------------------------------
# Dashboard overview
# -------------------------------------------------------------------

def fetch_revenue(db: Session) -> List[RevenueRecord]:
    """Monthly revenue, in calendar order."""
    try:
        rows = db.query(Revenue.month, Revenue.revenue).all()
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch revenue data.") from None

    rows = sorted(rows, key=lambda r: _month_index(r.month))
    return [RevenueRecord(month=r.month, revenue=r.revenue) for r in rows]


def fetch_latest_invoices(db: Session) -> List[LatestInvoice]:
    """The 5 most recent invoices with their customer, amount as currency."""
    try:
        rows = (
            db.query(
                Invoice.id,
                Invoice.amount,
                Customer.name,
                Customer.email,
                Customer.image_url,
            )
            .join(Customer, Invoice.customer_id == Customer.id)
            .order_by(Invoice.date.desc())
            .limit(5)
            .all()
        )
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch the latest invoices.") from None

    return [
        LatestInvoice(
            id=r.id,
            name=r.name,
            email=r.email,
            image_url=r.image_url,
            amount=format_currency(r.amount),
        )
        for r in rows
    ]


def _count_invoices(session: Session) -> int:
    return session.query(func.count(Invoice.id)).scalar() or 0


def _count_customers(session: Session) -> int:
    return session.query(func.count(Customer.id)).scalar() or 0


def _status_totals(session: Session):
    return session.query(
        func.sum(case((Invoice.status == "paid", Invoice.amount), else_=0)).label("paid"),
        func.sum(case((Invoice.status == "pending", Invoice.amount), else_=0)).label("pending"),
    ).one()


def fetch_card_data(db: Session) -> CardData:
    """
    Card statistics for the overview page.

    The three aggregates run concurrently, each on its own session bound to
    the same engine (a Session must not be shared across threads), and are
    recombined once all of them complete.
    """
    bind = db.get_bind()

    def run(fn):
        with Session(bind=bind) as session:
            return fn(session)

    try:
        with ThreadPoolExecutor(max_workers=3) as pool:
            invoice_count = pool.submit(run, _count_invoices)
            customer_count = pool.submit(run, _count_customers)
            status_totals = pool.submit(run, _status_totals)
            number_of_invoices = int(invoice_count.result())
            number_of_customers = int(customer_count.result())
            totals = status_totals.result()
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch card data.") from None

    return CardData(
        number_of_invoices=number_of_invoices,
        number_of_customers=number_of_customers,
        total_paid_invoices=format_currency(totals.paid or 0),
        total_pending_invoices=format_currency(totals.pending or 0),
    )


# -------------------------------------------------------------------
# Invoices
# -------------------------------------------------------------------

def fetch_filtered_invoices(db: Session, query: str, current_page: int) -> List[InvoicesTableRow]:
    """
    One page of invoices whose customer name/email or amount/date/status
    contains `query` (case-insensitive), newest first.
    """
    offset = (current_page - 1) * ITEMS_PER_PAGE

    try:
        rows = (
            db.query(
                Invoice.id,
                Invoice.customer_id,
                Invoice.amount,
                Invoice.date,
                Invoice.status,
                Customer.name,
                Customer.email,
                Customer.image_url,
            )
            .join(Customer, Invoice.customer_id == Customer.id)
            .filter(_invoice_search(query))
            .order_by(Invoice.date.desc())
            .limit(ITEMS_PER_PAGE)
            .offset(offset)
            .all()
        )
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch invoices.") from None

    return [
        InvoicesTableRow(
            id=r.id,
            customer_id=r.customer_id,
            name=r.name,
            email=r.email,
            image_url=r.image_url,
            date=r.date,
            amount=r.amount,
            status=r.status,
        )
        for r in rows
    ]


def fetch_invoices_pages(db: Session, query: str) -> int:
    """Number of pages needed to show every invoice matching `query`."""
    try:
        count = (
            db.query(func.count(Invoice.id))
            .join(Customer, Invoice.customer_id == Customer.id)
            .filter(_invoice_search(query))
            .scalar()
        )
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch total number of invoices.") from None

    return math.ceil(int(count or 0) / ITEMS_PER_PAGE)


def fetch_invoice_by_id(db: Session, invoice_id: str) -> Optional[InvoiceForm]:
    """
    Invoice prepared for the edit form, amount converted to dollars.
    Returns None when no invoice has this id.
    """
    try:
        row = (
            db.query(Invoice.id, Invoice.customer_id, Invoice.amount, Invoice.status)
            .filter(Invoice.id == invoice_id)
            .first()
        )
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch invoice.") from None

    if row is None:
        return None

    return InvoiceForm(
        id=row.id,
        customer_id=row.customer_id,
        amount=row.amount / 100,
        status=row.status,
    )


# -------------------------------------------------------------------
# Customers
# -------------------------------------------------------------------

def fetch_customers(db: Session) -> List[CustomerField]:
    """All customers by name (form dropdowns)."""
    try:
        rows = db.query(Customer.id, Customer.name).order_by(Customer.name.asc()).all()
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch all customers.") from None

    return [CustomerField(id=r.id, name=r.name) for r in rows]


def fetch_filtered_customers(db: Session, query: str) -> List[CustomersTableRow]:
    """
    Customers whose name or email contains `query`, each with invoice count
    and pending/paid totals (customers without invoices included).
    """
    pattern = f"%{query}%"

    try:
        rows = (
            db.query(
                Customer.id,
                Customer.name,
                Customer.email,
                Customer.image_url,
                func.count(Invoice.id).label("total_invoices"),
                func.sum(case((Invoice.status == "pending", Invoice.amount), else_=0)).label("total_pending"),
                func.sum(case((Invoice.status == "paid", Invoice.amount), else_=0)).label("total_paid"),
            )
            .outerjoin(Invoice, Customer.id == Invoice.customer_id)
            .filter(or_(Customer.name.ilike(pattern), Customer.email.ilike(pattern)))
            .group_by(Customer.id, Customer.name, Customer.email, Customer.image_url)
            .order_by(Customer.name.asc())
            .all()
        )
    except SQLAlchemyError as e:
        raise _db_error(e, "Failed to fetch customer table.") from None

    return [
        CustomersTableRow(
            id=r.id,
            name=r.name,
            email=r.email,
            image_url=r.image_url,
            total_invoices=int(r.total_invoices or 0),
            total_pending=format_currency(r.total_pending or 0),
            total_paid=format_currency(r.total_paid or 0),
        )
        for r in rows
    ]
