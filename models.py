# models.py
# Role: SQLAlchemy ORM models for the invoices dashboard domain.
#       Customers, their invoices, monthly revenue reference data,
#       and the users allowed to sign in.

import uuid

from sqlalchemy import CheckConstraint, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from db import Base

INVOICE_STATUSES = ("pending", "paid")


def _new_id() -> str:
    return str(uuid.uuid4())


class Customer(Base):
    """
    A customer that invoices are issued to.
    """

    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)

    # Path to the avatar under /static (or an absolute URL)
    image_url = Column(String(255), nullable=False)

    invoices = relationship("Invoice", back_populates="customer")


class Invoice(Base):
    """
    ORM model representing a single invoice.

    Amounts are stored as integer cents. They are converted to dollars only
    at the read boundary (edit form) or formatted as currency for display.
    """

    __tablename__ = "invoices"
    __table_args__ = (
        CheckConstraint("status IN ('pending', 'paid')", name="ck_invoices_status"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)

    # Enforced by the database, not the application
    customer_id = Column(String(36), ForeignKey("customers.id"), nullable=False, index=True)

    # Integer cents, always > 0
    amount = Column(Integer, nullable=False)

    # "pending" | "paid"
    status = Column(String(16), nullable=False)

    # Issue date (date only)
    date = Column(Date, nullable=False, index=True)

    customer = relationship("Customer", back_populates="invoices")


class Revenue(Base):
    """One row per calendar month (append-only reference data)."""

    __tablename__ = "revenue"

    # 3-letter month name, e.g. "Jan"
    month = Column(String(4), primary_key=True)
    revenue = Column(Integer, nullable=False)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Salted hash (passlib), never the plain password
    password = Column(String(255), nullable=False)
