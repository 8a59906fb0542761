"""
This script seeds the dashboard database with placeholder data.

The CSV files under data-migration/seed/ hold customers, invoices (amounts in
cents), monthly revenue and the demo login user (plain password, hashed on
import). Tables are created if missing, and rows that already exist are
skipped, so the script can be re-run safely.

Usage (from the project root):
    python data-migration/script.py [seed_folder]
"""


from __future__ import annotations

import logging
import sys
from pathlib import Path

# allow running as a plain script from the project root
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from db import SessionLocal, init_db  # noqa: E402
from app.services.seed import SEED_DIR, seed_database  # noqa: E402


def main(argv: list[str]) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    folder = Path(argv[0]) if argv else SEED_DIR
    init_db()

    session = SessionLocal()
    try:
        counts = seed_database(session, folder)
    finally:
        session.close()

    print(f"\nDONE. Inserted: {counts}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
