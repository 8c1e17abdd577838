from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Hashable, Iterable, Mapping, Optional, Sequence

from splitmint.logging import get_logger
from splitmint.models import Expense, ExpenseSplit, SplitStrategy
from splitmint.services.split import compute_splits
from splitmint.utils.money import Numeric, from_cents, parse_decimal, round_half_away, to_cents, to_decimal

log = get_logger(__name__)


@dataclass(slots=True)
class BalanceReport:
    """Net positions of a group.

    ``flow`` only reflects who paid and who owes, so it sums to zero and is
    what settlements are computed from. ``adjusted`` adds each member's
    initial balance on top and is meant for display.
    """

    flow: dict[Hashable, Decimal]
    adjusted: dict[Hashable, Decimal]

    @property
    def imbalance(self) -> Decimal:
        return sum(self.flow.values(), Decimal("0.00"))


def aggregate_balances(
    expenses: Iterable[Expense],
    participants: Sequence[Hashable],
    initial_balances: Optional[Mapping[Hashable, object]] = None,
) -> BalanceReport:
    flow_cents: dict[Hashable, int] = {participant: 0 for participant in participants}

    for expense in expenses:
        if expense.payer_id in flow_cents:
            flow_cents[expense.payer_id] += to_cents(expense.amount)
        else:
            log.warning(
                "balances.unknown_participant",
                participant_id=str(expense.payer_id),
                role="payer",
                expense_id=expense.expense_id,
            )

        for split in expense.splits:
            if split.participant_id in flow_cents:
                flow_cents[split.participant_id] -= to_cents(split.amount)
            else:
                log.warning(
                    "balances.unknown_participant",
                    participant_id=str(split.participant_id),
                    role="split",
                    expense_id=expense.expense_id,
                )

    initial_balances = initial_balances or {}
    flow = {participant: from_cents(cents) for participant, cents in flow_cents.items()}
    adjusted = {
        participant: from_cents(cents + to_cents(parse_decimal(initial_balances.get(participant))))
        for participant, cents in flow_cents.items()
    }
    return BalanceReport(flow=flow, adjusted=adjusted)


def create_expense(
    amount: Numeric,
    payer_id: Hashable,
    participants: Sequence[Hashable],
    split_type: SplitStrategy | str = SplitStrategy.EQUAL,
    declared: Optional[Mapping[Hashable, object]] = None,
    *,
    description: str = "",
    date: Optional[datetime] = None,
    expense_id: Optional[str] = None,
    penny_correction: Optional[bool] = None,
) -> Expense:
    split_type = SplitStrategy.parse(split_type)
    owed = compute_splits(amount, split_type, participants, declared, penny_correction=penny_correction)

    splits = []
    for participant, share in owed.items():
        percent = None
        if split_type is SplitStrategy.PERCENT:
            percent = parse_decimal((declared or {}).get(participant))
        splits.append(ExpenseSplit(participant_id=participant, amount=share, percent=percent))

    return Expense(
        amount=round_half_away(to_decimal(amount)),
        payer_id=payer_id,
        split_type=split_type,
        splits=splits,
        description=description,
        date=date,
        expense_id=expense_id,
    )
