from __future__ import annotations

from datetime import datetime
from typing import Hashable, Iterable, Optional

from splitmint.models import Expense
from splitmint.utils.money import Numeric, to_decimal


def _matches_text(expense: Expense, text: str) -> bool:
    needle = text.lower()
    return needle in expense.description.lower() or needle in str(expense.amount)


def filter_expenses(
    expenses: Iterable[Expense],
    *,
    text: Optional[str] = None,
    payer_id: Optional[Hashable] = None,
    date_from: Optional[datetime] = None,
    date_to: Optional[datetime] = None,
    min_amount: Optional[Numeric] = None,
    max_amount: Optional[Numeric] = None,
) -> list[Expense]:
    """Return the expenses matching every given criterion, in input order.

    Bounds are inclusive. Expenses without a date never match a date bound.
    """
    low = to_decimal(min_amount) if min_amount is not None else None
    high = to_decimal(max_amount) if max_amount is not None else None

    result: list[Expense] = []
    for expense in expenses:
        if text and not _matches_text(expense, text):
            continue
        if payer_id is not None and expense.payer_id != payer_id:
            continue
        if date_from is not None or date_to is not None:
            if expense.date is None:
                continue
            if date_from is not None and expense.date < date_from:
                continue
            if date_to is not None and expense.date > date_to:
                continue
        if low is not None and expense.amount < low:
            continue
        if high is not None and expense.amount > high:
            continue
        result.append(expense)
    return result
