# app/services/formatting.py
#
# Formatting Helpers
# Pure functions used by the query layer and templates: currency from cents,
# human-readable dates, revenue chart axis, and pagination links.

from datetime import date, datetime
from typing import List, Sequence, Tuple, Union


# ---- Currency & dates ----

def format_currency(cents: Union[int, float, str, None]) -> str:
    """
    Convert an amount in cents into an en-US currency string.

    Example: 123456 -> "$1,234.56"
    """
    value = float(cents or 0) / 100
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.2f}"


def format_date_to_local(value: Union[str, date]) -> str:
    """
    'YYYY-MM-DD' (or a date) -> 'Dec 6, 2022'.
    """
    if isinstance(value, str):
        value = datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    return f"{value.strftime('%b')} {value.day}, {value.year}"


# ---- Revenue chart ----

def generate_y_axis(revenue: Sequence) -> Tuple[List[str], int]:
    """
    Build y-axis labels for the revenue chart.

    Labels go from the highest record (rounded up to the next $1K) down to $0,
    in $1K steps. Returns (labels, top_label).
    """
    highest = max((float(r.revenue) for r in revenue), default=0.0)
    top_label = int(-(-highest // 1000) * 1000)

    y_axis_labels = [f"${i // 1000}K" for i in range(top_label, -1, -1000)]
    return y_axis_labels, top_label


# ---- Pagination ----

def generate_pagination(current_page: int, total_pages: int) -> List[Union[int, str]]:
    """
    Page numbers for the pagination bar, with "..." gaps.

    - 7 pages or fewer: show all
    - current page in the first 3: 1, 2, 3, ..., n-1, n
    - current page in the last 3: 1, 2, ..., n-2, n-1, n
    - otherwise: 1, ..., c-1, c, c+1, ..., n
    """
    if total_pages <= 7:
        return list(range(1, total_pages + 1))

    if current_page <= 3:
        return [1, 2, 3, "...", total_pages - 1, total_pages]

    if current_page >= total_pages - 2:
        return [1, 2, "...", total_pages - 2, total_pages - 1, total_pages]

    return [
        1,
        "...",
        current_page - 1,
        current_page,
        current_page + 1,
        "...",
        total_pages,
    ]
