# app/services/seed.py
#
# Seed Data Loader
# Loads the placeholder customers, invoices, monthly revenue and users from
# CSV files into the database. Safe to re-run: rows that already exist are
# skipped, and invoices are only loaded into an empty invoices table.

import logging
from pathlib import Path
from typing import Dict

import pandas as pd
from sqlalchemy.orm import Session

from models import Customer, Invoice, Revenue, User, INVOICE_STATUSES
from app.auth import hash_password

logger = logging.getLogger(__name__)

SEED_DIR = Path(__file__).resolve().parents[2] / "data-migration" / "seed"


def _read(folder: Path, name: str, required: set) -> pd.DataFrame:
    path = folder / f"{name}.csv"
    if not path.exists():
        raise FileNotFoundError(f"Seed file not found: {path.resolve()}")

    df = pd.read_csv(path, dtype=str)

    # normalize headers
    df.columns = df.columns.str.strip().str.lower()

    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"{path.name}: missing required columns: {sorted(missing)}")

    # drop fully empty rows, trim cells
    df = df.dropna(how="all").copy()
    return df.apply(lambda col: col.str.strip())


def _seed_customers(db: Session, df: pd.DataFrame) -> int:
    existing = {row[0] for row in db.query(Customer.id).all()}
    objs = [
        Customer(id=row.id, name=row.name, email=row.email, image_url=row.image_url)
        for row in df.itertuples(index=False)
        if row.id not in existing
    ]
    db.add_all(objs)
    return len(objs)


def _seed_invoices(db: Session, df: pd.DataFrame) -> int:
    if db.query(Invoice.id).first() is not None:
        return 0

    df["amount"] = pd.to_numeric(df["amount"], errors="raise").astype(int)
    df["date"] = pd.to_datetime(df["date"], format="%Y-%m-%d").dt.date

    bad_status = set(df["status"]) - set(INVOICE_STATUSES)
    if bad_status:
        raise ValueError(f"invoices.csv: unknown status values: {sorted(bad_status)}")

    objs = [
        Invoice(customer_id=row.customer_id, amount=int(row.amount), status=row.status, date=row.date)
        for row in df.itertuples(index=False)
    ]
    db.add_all(objs)
    return len(objs)


def _seed_revenue(db: Session, df: pd.DataFrame) -> int:
    existing = {row[0] for row in db.query(Revenue.month).all()}
    df["revenue"] = pd.to_numeric(df["revenue"], errors="raise").astype(int)
    objs = [
        Revenue(month=row.month, revenue=int(row.revenue))
        for row in df.itertuples(index=False)
        if row.month not in existing
    ]
    db.add_all(objs)
    return len(objs)


def _seed_users(db: Session, df: pd.DataFrame) -> int:
    existing = {row[0] for row in db.query(User.email).all()}
    objs = [
        User(id=row.id, name=row.name, email=row.email.lower(), password=hash_password(row.password))
        for row in df.itertuples(index=False)
        if row.email.lower() not in existing
    ]
    db.add_all(objs)
    return len(objs)


def seed_database(db: Session, folder: Path = SEED_DIR) -> Dict[str, int]:
    """
    Load every seed CSV in `folder`. Returns inserted row counts per table.
    Everything is committed together; any error rolls the whole load back.
    """
    folder = Path(folder)

    customers = _read(folder, "customers", {"id", "name", "email", "image_url"})
    invoices = _read(folder, "invoices", {"customer_id", "amount", "status", "date"})
    revenue = _read(folder, "revenue", {"month", "revenue"})
    users = _read(folder, "users", {"id", "name", "email", "password"})

    try:
        counts = {"customers": _seed_customers(db, customers)}
        # customers must exist before their invoices reference them
        db.flush()
        counts["invoices"] = _seed_invoices(db, invoices)
        counts["revenue"] = _seed_revenue(db, revenue)
        counts["users"] = _seed_users(db, users)
        db.commit()
    except Exception:
        db.rollback()
        raise

    for table, n in counts.items():
        logger.info("Seeded %d rows into %s", n, table)
    return counts
