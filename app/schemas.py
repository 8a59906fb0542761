# app/schemas.py
# Role: Pydantic records returned by the query layer, and the input models
#       used to validate invoice forms and sign-in credentials.

import math
import datetime as dt
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic_core import PydanticCustomError

InvoiceStatus = Literal["pending", "paid"]

# invoices.amount is a 32-bit INTEGER of cents
MAX_AMOUNT_CENTS = 2**31 - 1


# ---------- Query records ----------
class Revenue(BaseModel):
    month: str
    revenue: float


class LatestInvoice(BaseModel):
    id: str
    name: str
    email: str
    image_url: str
    amount: str  # already formatted as currency


class CardData(BaseModel):
    number_of_invoices: int
    number_of_customers: int
    total_paid_invoices: str
    total_pending_invoices: str


class InvoicesTableRow(BaseModel):
    id: str
    customer_id: str
    name: str
    email: str
    image_url: str
    date: dt.date
    amount: int  # cents
    status: InvoiceStatus


class InvoiceForm(BaseModel):
    """Invoice prepared for the edit form (amount in dollars)."""

    id: str
    customer_id: str
    amount: float
    status: InvoiceStatus


class CustomerField(BaseModel):
    id: str
    name: str


class CustomersTableRow(BaseModel):
    id: str
    name: str
    email: str
    image_url: str
    total_invoices: int
    total_pending: str
    total_paid: str


# ---------- Inputs ----------
class InvoiceFormIn(BaseModel):
    """
    Validates the create/edit invoice form.

    Field names on the wire are the form's input names (customerId, amount,
    status), so validation errors are keyed the same way.
    """

    model_config = ConfigDict(populate_by_name=True)

    customer_id: str = Field(alias="customerId")
    amount: float
    status: InvoiceStatus

    @field_validator("customer_id", mode="before")
    @classmethod
    def _customer_selected(cls, v: Any) -> Any:
        if not isinstance(v, str) or not v.strip():
            raise PydanticCustomError("customer_missing", "Please select a customer.")
        return v

    @field_validator("amount", mode="before")
    @classmethod
    def _amount_positive(cls, v: Any) -> float:
        # missing / empty input coerces to 0, like an empty number field
        if v is None or (isinstance(v, str) and not v.strip()):
            v = 0
        try:
            value = float(v)
        except (TypeError, ValueError):
            raise PydanticCustomError("amount_invalid", "Please enter an amount greater than $0.")
        # must survive conversion to whole cents within the amount column
        cents = value * 100
        if not math.isfinite(cents) or not 1 <= round(cents) <= MAX_AMOUNT_CENTS:
            raise PydanticCustomError("amount_invalid", "Please enter an amount greater than $0.")
        return value

    @field_validator("status", mode="before")
    @classmethod
    def _status_known(cls, v: Any) -> Any:
        if v not in ("pending", "paid"):
            raise PydanticCustomError("status_invalid", "Please select an invoice status.")
        return v

    @property
    def amount_in_cents(self) -> int:
        return round(self.amount * 100)


class CredentialsIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


def field_errors(exc_errors: list[dict]) -> dict[str, list[str]]:
    """
    Flatten pydantic errors into {field: [messages]} for inline form messages.
    """
    out: dict[str, list[str]] = {}
    for err in exc_errors:
        loc: Optional[Any] = err["loc"][0] if err.get("loc") else None
        key = str(loc) if loc is not None else "_form"
        out.setdefault(key, []).append(err["msg"])
    return out
