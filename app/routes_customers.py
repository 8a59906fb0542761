# app/routes_customers.py

from fastapi import APIRouter, Request, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from models import User
from app.deps import get_db, require_user, templates
from app.services.data import fetch_filtered_customers

router = APIRouter()


@router.get("/dashboard/customers", response_class=HTMLResponse)
def customers_page(
    request: Request,
    query: str = Query(""),
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    """Customers table: invoice count and pending/paid totals per customer."""
    customers = fetch_filtered_customers(db, query)

    return templates.TemplateResponse(
        request,
        "customers.html",
        {
            "user": user,
            "query": query,
            "customers": customers,
        },
    )
