"""Tests for the CSV import script in data-migration/."""

import importlib.util
from pathlib import Path

import pandas as pd
import pytest

from db import SessionLocal

from conftest import count_records

SCRIPT = Path(__file__).resolve().parent.parent / "data-migration" / "script.py"


@pytest.fixture(scope="module")
def script():
    spec = importlib.util.spec_from_file_location("data_migration_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_demo_records_are_imported(script) -> None:
    inserted, skipped = script.import_frame(script.demo_frame(), "demo", session_factory=SessionLocal)

    assert (inserted, skipped) == (12, 0)
    assert count_records() == 12


def test_invalid_rows_are_skipped(script) -> None:
    df = pd.DataFrame(
        [
            {"Username": "alice", "TransactionType": "Stake", "Token": "ETH", "Amount": "1.5", "Date": "2024-01-20"},
            {"Username": "bob", "TransactionType": "Swap", "Token": "ETH", "Amount": "2", "Date": "2024-01-21"},
            {"Username": "carol", "TransactionType": "Lend", "Token": "DAI", "Amount": "abc", "Date": "2024-01-22"},
            {"Username": None, "TransactionType": None, "Token": None, "Amount": None, "Date": None},
        ]
    )

    inserted, skipped = script.import_frame(df, "mixed.csv", session_factory=SessionLocal)

    assert (inserted, skipped) == (1, 2)
    assert count_records() == 1


def test_missing_columns_fail_fast(script) -> None:
    df = pd.DataFrame([{"username": "alice", "token": "ETH"}])

    with pytest.raises(ValueError, match="missing required columns"):
        script.rows_to_payloads(df, "bad.csv")


def test_import_folder(script, tmp_path) -> None:
    (tmp_path / "january.csv").write_text(
        "username,transactionType,token,amount,date,status,description\n"
        "alice,Stake,ETH,1.5,2024-01-20,successful,first\n"
        "bob,Borrow,USDC,500,2024-01-22,,\n"
    )

    assert script.import_csvs_to_db(tmp_path) == 2
    assert count_records() == 2


def test_empty_folder_raises(script, tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        script.import_csvs_to_db(tmp_path)
