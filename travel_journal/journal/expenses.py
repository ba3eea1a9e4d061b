from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from pydantic import BaseModel, Field, computed_field

KRW_PER_CAD = Decimal("1000")


class ExpenseItem(BaseModel):
    name: str
    description: str
    amount_cad: Decimal

    @computed_field
    @property
    def amount_krw(self) -> int:
        return int(self.amount_cad * KRW_PER_CAD)


class CardTransaction(BaseModel):
    merchant: str
    charged_at: datetime
    amount_cad: Decimal
    memo: str


class ExpenseSummary(BaseModel):
    trip: str
    items: list[ExpenseItem] = Field(default_factory=list)
    total_cad: Decimal
    total_krw: int
    largest_item: str
    largest_share_percent: float
    transactions: list[CardTransaction] = Field(default_factory=list)


TRIP_NAME = "휘슬러 마운틴 바이킹 1일"

EXPENSES: tuple[ExpenseItem, ...] = (
    ExpenseItem(name="반나절권", description="3:30-7:30 시간대 이용권", amount_cad=Decimal("94.50")),
    ExpenseItem(
        name="보호장비 렌탈",
        description="헬멧, 장갑, 무릎, 팔꿈치 보호대",
        amount_cad=Decimal("45.00"),
    ),
    ExpenseItem(name="주차비", description="휘슬러 주차장", amount_cad=Decimal("25.00")),
    ExpenseItem(name="주유비", description="밴쿠버-휘슬러 왕복", amount_cad=Decimal("60.00")),
    ExpenseItem(name="기타 비용", description="음료, 간식 등", amount_cad=Decimal("20.00")),
)

TRANSACTIONS: tuple[CardTransaction, ...] = (
    CardTransaction(
        merchant="휘슬러 블랙콤",
        charged_at=datetime(2025, 8, 30, 15, 30),
        amount_cad=Decimal("139.50"),
        memo="반나절권 + 보호장비",
    ),
    CardTransaction(
        merchant="휘슬러 주차장",
        charged_at=datetime(2025, 8, 30, 14, 45),
        amount_cad=Decimal("25.00"),
        memo="주차비",
    ),
    CardTransaction(
        merchant="쉘 주유소",
        charged_at=datetime(2025, 8, 30, 12, 15),
        amount_cad=Decimal("60.00"),
        memo="주유비",
    ),
    CardTransaction(
        merchant="휘슬러 상점",
        charged_at=datetime(2025, 8, 30, 16, 30),
        amount_cad=Decimal("20.00"),
        memo="음료, 간식",
    ),
)


def summarize_expenses(
    items: tuple[ExpenseItem, ...] = EXPENSES,
    transactions: tuple[CardTransaction, ...] = TRANSACTIONS,
) -> ExpenseSummary:
    """Total the trip costs and find the item taking the largest share."""
    if not items:
        raise ValueError("No expense items")
    total = sum((item.amount_cad for item in items), Decimal("0"))
    largest = max(items, key=lambda item: item.amount_cad)
    share = (largest.amount_cad / total * 100).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return ExpenseSummary(
        trip=TRIP_NAME,
        items=list(items),
        total_cad=total,
        total_krw=int(total * KRW_PER_CAD),
        largest_item=largest.name,
        largest_share_percent=float(share),
        transactions=sorted(transactions, key=lambda txn: txn.charged_at),
    )
