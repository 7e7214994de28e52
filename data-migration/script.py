"""
This script imports transaction records from CSV files into the database.

Each CSV needs the columns username, transactionType, token, amount and date;
status and description are optional. Every row goes through the same
validation as the REST API (TransactionCreate), so a row with an unknown
transaction type, an empty username or a non-numeric amount is reported and
skipped rather than stored.

Usage:
    python data-migration/script.py                 # import data-migration/records/*.csv
    python data-migration/script.py path/to/dir     # import another folder
    python data-migration/script.py --demo          # seed the twelve sample records
"""


from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from db import SessionLocal, engine, Base
from app.errors import ValidationError
from app.schemas import TransactionCreate, validate_payload
from app.services.mutations import create_transaction

logger = logging.getLogger("data_migration")

RECORDS_DIR = Path("data-migration/records")

REQUIRED_COLUMNS = {"username", "transactiontype", "token", "amount", "date"}

# CSV header (lower-cased) -> payload key
COLUMN_NAMES = {
    "username": "username",
    "transactiontype": "transactionType",
    "token": "token",
    "amount": "amount",
    "date": "date",
    "status": "status",
    "description": "description",
}

DEMO_RECORDS = [
    ("john.doe", "Stake", "ETH", "1.5", "2024-01-20"),
    ("jane.smith", "Borrow", "USDC", "500", "2024-01-22"),
    ("john.doe", "Lend", "DAI", "250", "2024-01-25"),
    ("alice.crypto", "Stake", "BTC", "0.25", "2024-01-18"),
    ("bob.blockchain", "Borrow", "ETH", "3.2", "2024-01-15"),
    ("charlie.defi", "Lend", "USDC", "1000", "2024-01-10"),
    ("dave.trader", "Stake", "ETH", "2.75", "2024-01-05"),
    ("eve.investor", "Borrow", "DAI", "750", "2024-01-12"),
    ("frank.hodler", "Lend", "BTC", "0.5", "2024-01-08"),
    ("grace.whale", "Stake", "USDC", "2000", "2024-01-03"),
    ("henry.miner", "Borrow", "ETH", "5.0", "2024-01-01"),
    ("irene.analyst", "Lend", "DAI", "1500", "2024-01-17"),
]


def _none_if_nan(x):
    if pd.isna(x):
        return None
    s = str(x).strip()
    return None if s == "" or s.lower() == "nan" else s


def demo_frame() -> pd.DataFrame:
    return pd.DataFrame(
        DEMO_RECORDS,
        columns=["username", "transactionType", "token", "amount", "date"],
    )


def rows_to_payloads(df: pd.DataFrame, source: str) -> list[dict]:
    """Normalize headers and turn each non-empty row into a payload dict."""
    df = df.copy()
    df.columns = df.columns.str.strip().str.lower()

    missing = REQUIRED_COLUMNS - set(df.columns)
    if missing:
        raise ValueError(f"{source}: missing required columns: {sorted(missing)}")

    # drop fully empty rows
    df = df.dropna(how="all")

    payloads = []
    for row in df.to_dict(orient="records"):
        payload = {}
        for column, key in COLUMN_NAMES.items():
            if column in row:
                value = _none_if_nan(row[column])
                if value is not None:
                    payload[key] = value
        payloads.append(payload)
    return payloads


def import_frame(df: pd.DataFrame, source: str, session_factory=SessionLocal) -> tuple[int, int]:
    """Validate and insert every row of `df`. Returns (inserted, skipped)."""
    payloads = rows_to_payloads(df, source)

    session = session_factory()
    inserted = skipped = 0
    try:
        for i, payload in enumerate(payloads, start=1):
            try:
                data = validate_payload(TransactionCreate, payload)
            except ValidationError as exc:
                skipped += 1
                problems = "; ".join(f"{e['field']}: {e['msg']}" for e in exc.errors)
                logger.warning("%s row %d skipped (%s)", source, i, problems)
                continue
            create_transaction(session, data)
            inserted += 1
    finally:
        session.close()

    logger.info("Imported %d rows from %s (%d skipped)", inserted, source, skipped)
    return inserted, skipped


def import_csvs_to_db(folder: Path = RECORDS_DIR) -> int:
    folder = Path(folder)
    csv_files = sorted(folder.glob("*.csv"))
    if not csv_files:
        raise FileNotFoundError(f"No CSV files found in: {folder.resolve()}")

    Base.metadata.create_all(bind=engine)

    total_inserted = 0
    for f in csv_files:
        inserted, _ = import_frame(pd.read_csv(f, dtype=str), f.name)
        total_inserted += inserted

    logger.info("DONE. Total inserted: %d", total_inserted)
    return total_inserted


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Import transaction records into the database.")
    parser.add_argument("folder", nargs="?", default=str(RECORDS_DIR), help="folder of CSV files")
    parser.add_argument("--demo", action="store_true", help="seed the sample records instead")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    if args.demo:
        Base.metadata.create_all(bind=engine)
        import_frame(demo_frame(), "demo")
        return 0

    import_csvs_to_db(Path(args.folder))
    return 0


if __name__ == "__main__":
    sys.exit(main())
