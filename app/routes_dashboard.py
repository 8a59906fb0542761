# app/routes_dashboard.py

from fastapi import APIRouter, Request, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from models import User
from .deps import templates, get_db, require_user
from .services.data import fetch_card_data, fetch_latest_invoices, fetch_revenue
from .services.formatting import generate_y_axis

router = APIRouter()


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard_page(
    request: Request,
    db: Session = Depends(get_db),
    user: User = Depends(require_user),
):
    card_data = fetch_card_data(db)
    revenue = fetch_revenue(db)
    latest_invoices = fetch_latest_invoices(db)

    # Bar heights are relative to the top y-axis label
    y_axis_labels, top_label = generate_y_axis(revenue)
    revenue_bars = [
        {
            "month": r.month,
            "revenue": r.revenue,
            "height_pct": round(r.revenue / top_label * 100, 1) if top_label else 0,
        }
        for r in revenue
    ]

    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": user,
            "cards": card_data,
            "revenue_bars": revenue_bars,
            "y_axis_labels": y_axis_labels,
            "latest_invoices": latest_invoices,
        },
    )
