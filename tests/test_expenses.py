from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest

from travel_journal.journal import ExpenseItem, summarize_expenses


def test_trip_summary_totals() -> None:
    summary = summarize_expenses()
    assert summary.total_cad == Decimal("244.50")
    assert summary.total_krw == 244500
    assert summary.largest_item == "반나절권"
    assert summary.largest_share_percent == 38.7
    assert [item.name for item in summary.items][:2] == ["반나절권", "보호장비 렌탈"]


def test_transactions_are_chronological() -> None:
    times = [txn.charged_at for txn in summarize_expenses().transactions]
    assert times == sorted(times)
    assert times[0] == datetime(2025, 8, 30, 12, 15)


def test_custom_items() -> None:
    items = (
        ExpenseItem(name="곤돌라", description="왕복", amount_cad=Decimal("75")),
        ExpenseItem(name="점심", description="", amount_cad=Decimal("25")),
    )
    summary = summarize_expenses(items, ())
    assert summary.total_cad == Decimal("100")
    assert summary.largest_share_percent == 75.0
    assert summary.items[1].amount_krw == 25000
    assert summary.transactions == []


def test_no_items_is_an_error() -> None:
    with pytest.raises(ValueError):
        summarize_expenses(())
