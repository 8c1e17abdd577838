from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Hashable, Iterable, List, Optional, Sequence

from splitmint.config import get_settings
from splitmint.models import Expense, Group
from splitmint.services.balances import aggregate_balances
from splitmint.services.groups import validate_group
from splitmint.services.settlement import Transfer, simplify_debts
from splitmint.utils.money import ZERO, from_cents, to_cents

GETS = "gets"
PAYS = "pays"
SETTLED = "settled"

CURRENCY_SYMBOLS = {
    "INR": "₹",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


@dataclass(slots=True)
class MemberSummary:
    member_id: Hashable
    name: str
    initial: Decimal
    paid: Decimal
    share: Decimal
    balance: Decimal
    adjusted_balance: Decimal
    remaining: Decimal

    @property
    def status(self) -> str:
        return balance_status(self.balance)


@dataclass(slots=True)
class GroupSummary:
    name: str
    currency: str
    total_spend: Decimal
    members: List[MemberSummary] = field(default_factory=list)
    transfers: List[Transfer] = field(default_factory=list)

    @property
    def is_settled(self) -> bool:
        return not self.transfers


@dataclass(slots=True)
class MemberPosition:
    to_pay: Decimal = ZERO
    to_receive: Decimal = ZERO
    counterparties: dict[Hashable, Decimal] = field(default_factory=dict)


def balance_status(balance: Decimal, epsilon: Optional[Decimal] = None) -> str:
    eps = get_settings().epsilon if epsilon is None else epsilon
    if balance > eps:
        return GETS
    if balance < -eps:
        return PAYS
    return SETTLED


def currency_symbol(currency: str) -> str:
    return CURRENCY_SYMBOLS.get(currency.upper(), f"{currency.upper()} ")


def format_balance(balance: Decimal, currency: Optional[str] = None) -> str:
    symbol = currency_symbol(currency or get_settings().currency)
    status = balance_status(balance)
    if status == GETS:
        return f"Gets {symbol}{abs(balance):.2f}"
    if status == PAYS:
        return f"Pays {symbol}{abs(balance):.2f}"
    return "Settled"


def spending_by_payer(group: Group, expenses: Sequence[Expense]) -> dict[Hashable, Decimal]:
    paid: dict[Hashable, int] = {}
    for member_id in group.member_ids:
        total = sum(to_cents(e.amount) for e in expenses if e.payer_id == member_id)
        if total > 0:
            paid[member_id] = total
    return {member_id: from_cents(cents) for member_id, cents in paid.items()}


def summarize_group(group: Group, expenses: Sequence[Expense], *, break_ties_by_id: bool = False) -> GroupSummary:
    validate_group(group)
    report = aggregate_balances(expenses, group.member_ids, group.initial_balances)
    paid = spending_by_payer(group, expenses)

    members = []
    for member in group.members:
        member_paid = paid.get(member.member_id, ZERO)
        balance = report.flow[member.member_id]
        share = member_paid - balance
        members.append(
            MemberSummary(
                member_id=member.member_id,
                name=member.name,
                initial=member.initial_balance,
                paid=member_paid,
                share=share,
                balance=balance,
                adjusted_balance=report.adjusted[member.member_id],
                remaining=member.initial_balance - share,
            )
        )

    return GroupSummary(
        name=group.name,
        currency=group.currency,
        total_spend=from_cents(sum(to_cents(e.amount) for e in expenses)),
        members=members,
        transfers=simplify_debts(report.flow, break_ties_by_id=break_ties_by_id),
    )


def member_position(expenses: Iterable[Expense], member_id: Hashable) -> MemberPosition:
    """What one member owes and is owed across expenses, and with whom.

    Positive counterparty amounts are owed to ``member_id``, negative ones
    are owed by it.
    """
    to_pay = 0
    to_receive = 0
    counterparties: dict[Hashable, int] = {}

    for expense in expenses:
        if not expense.involves(member_id):
            continue
        my_share = to_cents(expense.owed_by(member_id))

        if expense.payer_id == member_id:
            to_receive += to_cents(expense.amount) - my_share
            for split in expense.splits:
                if split.amount > 0 and split.participant_id != expense.payer_id:
                    counterparties[split.participant_id] = (
                        counterparties.get(split.participant_id, 0) + to_cents(split.amount)
                    )
        else:
            to_pay += my_share
            counterparties[expense.payer_id] = counterparties.get(expense.payer_id, 0) - my_share

    return MemberPosition(
        to_pay=from_cents(to_pay),
        to_receive=from_cents(to_receive),
        counterparties={pid: from_cents(cents) for pid, cents in counterparties.items()},
    )
