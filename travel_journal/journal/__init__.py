"""Trip journal content: itemised expenses."""

from .expenses import EXPENSES, TRANSACTIONS, ExpenseItem, ExpenseSummary, summarize_expenses

__all__ = ["EXPENSES", "TRANSACTIONS", "ExpenseItem", "ExpenseSummary", "summarize_expenses"]
