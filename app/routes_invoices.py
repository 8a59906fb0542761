# app/routes_invoices.py
"""
Routes for the invoices table and the create / edit / delete forms.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import HTMLResponse, RedirectResponse
from sqlalchemy.orm import Session

from models import User
from app.deps import cached_page, get_db, require_user, templates
from app.results import DatabaseFailure, Redirect, ValidationFailed
from app.services.actions import (
    INVOICES_PATH,
    create_invoice,
    delete_invoice,
    update_invoice,
)
from app.services.data import (
    fetch_customers,
    fetch_filtered_invoices,
    fetch_invoice_by_id,
    fetch_invoices_pages,
)
from app.services.formatting import generate_pagination

router = APIRouter(prefix="/dashboard/invoices")


def _render_form(
    request: Request,
    db: Session,
    user: User,
    invoice: Optional[Dict[str, Any]],
    state: Optional[Any] = None,
    status_code: int = 200,
):
    """Render create (invoice=None) or edit form, with inline errors from `state`."""
    errors = state.errors if isinstance(state, ValidationFailed) else {}
    message = getattr(state, "message", None)

    return templates.TemplateResponse(
        request,
        "invoice_form.html",
        {
            "user": user,
            "customers": fetch_customers(db),
            "invoice": invoice,
            "errors": errors,
            "message": message,
        },
        status_code=status_code,
    )


def _form_values(form) -> Dict[str, Any]:
    # Echo submitted values back into the form after a failed submit
    return {
        "customer_id": form.get("customerId") or "",
        "amount": form.get("amount") or "",
        "status": form.get("status") or "",
    }


# -------------------------------------------------------------------
# Table
# -------------------------------------------------------------------

@router.get("", response_class=HTMLResponse)
def invoices_page(
    request: Request,
    query: str = Query(""),
    page: str = Query("1"),
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    """
    Invoices table with search and pagination.

    Page data is cached per (query, page) until a mutation revalidates
    the listing.
    """
    try:
        current_page = max(int(page), 1)
    except ValueError:
        current_page = 1

    def load() -> Dict[str, Any]:
        return {
            "invoices": fetch_filtered_invoices(db, query, current_page),
            "total_pages": fetch_invoices_pages(db, query),
        }

    data = cached_page(INVOICES_PATH, (query, current_page), load)

    return templates.TemplateResponse(
        request,
        "invoices.html",
        {
            "user": user,
            "query": query,
            "current_page": current_page,
            "invoices": data["invoices"],
            "total_pages": data["total_pages"],
            "pagination": generate_pagination(current_page, data["total_pages"]),
            "flash": request.session.pop("flash", None),
        },
    )


# -------------------------------------------------------------------
# Create
# -------------------------------------------------------------------

@router.get("/create", response_class=HTMLResponse)
def create_invoice_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    return _render_form(request, db, user, invoice=None)


@router.post("/create")
async def create_invoice_submit(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    form = await request.form()
    result = create_invoice(db, form)

    if isinstance(result, Redirect):
        return RedirectResponse(url=result.url, status_code=303)

    status_code = 422 if isinstance(result, ValidationFailed) else 500
    return _render_form(
        request,
        db,
        user,
        invoice={"id": None, **_form_values(form)},
        state=result,
        status_code=status_code,
    )


# -------------------------------------------------------------------
# Edit
# -------------------------------------------------------------------

@router.get("/{invoice_id}/edit", response_class=HTMLResponse)
def edit_invoice_page(
    request: Request,
    invoice_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    invoice = fetch_invoice_by_id(db, invoice_id)
    if invoice is None:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"user": user, "message": "Could not find the requested invoice."},
            status_code=404,
        )
    return _render_form(request, db, user, invoice=invoice.model_dump())


@router.post("/{invoice_id}/edit")
async def edit_invoice_submit(
    request: Request,
    invoice_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    form = await request.form()
    result = update_invoice(db, invoice_id, form)

    if isinstance(result, Redirect):
        return RedirectResponse(url=result.url, status_code=303)

    status_code = 422 if isinstance(result, ValidationFailed) else 500
    return _render_form(
        request,
        db,
        user,
        invoice={"id": invoice_id, **_form_values(form)},
        state=result,
        status_code=status_code,
    )


# -------------------------------------------------------------------
# Delete
# -------------------------------------------------------------------

@router.post("/{invoice_id}/delete")
def delete_invoice_submit(
    request: Request,
    invoice_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    """
    Delete, then go back to the table. The outcome message is shown once
    on the next page load.
    """
    result = delete_invoice(db, invoice_id)
    request.session["flash"] = {
        "message": result.message,
        "error": isinstance(result, DatabaseFailure),
    }
    return RedirectResponse(url=INVOICES_PATH, status_code=303)
