from __future__ import annotations

import warnings
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Hashable, Iterable, List, Mapping, Optional

from splitmint.config import get_settings
from splitmint.logging import get_logger
from splitmint.services.errors import BalanceConservationWarning
from splitmint.utils.money import Numeric, from_cents, parse_decimal, to_cents

log = get_logger(__name__)


@dataclass(slots=True)
class Transfer:
    from_id: Hashable
    to_id: Hashable
    amount: Decimal

    def as_dict(self) -> dict[str, Any]:
        return {"from": self.from_id, "to": self.to_id, "amount": self.amount}


@dataclass(slots=True)
class SettlementPlan:
    transfers: List[Transfer]
    imbalance: Decimal
    residual: dict[Hashable, Decimal] = field(default_factory=dict)
    is_conserved: bool = True

    @property
    def total(self) -> Decimal:
        return sum((t.amount for t in self.transfers), Decimal("0.00"))


def plan_settlement(
    balances: Mapping[Hashable, Numeric],
    *,
    break_ties_by_id: bool = False,
    epsilon: Optional[Numeric] = None,
) -> SettlementPlan:
    """Greedily match the largest debts against the largest credits.

    This keeps the number of transfers at most ``n - 1`` but is not a
    minimum-cash-flow search over all possible pairings. Balances within
    ``epsilon`` of zero count as settled; once matching starts, a side is
    only left behind when it reaches exactly zero. Equal balances keep
    their input order unless ``break_ties_by_id`` is set, in which case
    they are ordered by ``str(participant)``.
    """
    return _match(balances, break_ties_by_id, epsilon, stacklevel=3)


def _match(
    balances: Mapping[Hashable, Numeric],
    break_ties_by_id: bool,
    epsilon: Optional[Numeric],
    stacklevel: int,
) -> SettlementPlan:
    eps = get_settings().epsilon_cents if epsilon is None else to_cents(epsilon)
    cents = {participant: to_cents(parse_decimal(balance)) for participant, balance in balances.items()}

    imbalance = sum(cents.values())
    is_conserved = abs(imbalance) <= eps
    if not is_conserved:
        message = f"balances sum to {from_cents(imbalance)} instead of zero; settlement will be incomplete"
        log.warning("settlement.imbalance", imbalance_cents=imbalance, participants=len(cents))
        warnings.warn(BalanceConservationWarning(message), stacklevel=stacklevel)

    debtors: list[tuple[Hashable, int]] = [(p, c) for p, c in cents.items() if c < -eps]
    creditors: list[tuple[Hashable, int]] = [(p, c) for p, c in cents.items() if c > eps]

    if break_ties_by_id:
        debtors.sort(key=lambda x: str(x[0]))
        creditors.sort(key=lambda x: str(x[0]))
    debtors.sort(key=lambda x: x[1])
    creditors.sort(key=lambda x: x[1], reverse=True)

    transfers: list[Transfer] = []
    i, j = 0, 0

    while i < len(debtors) and j < len(creditors):
        debt_id, debt_amount = debtors[i]
        cred_id, cred_amount = creditors[j]

        transfer_amount = min(-debt_amount, cred_amount)
        transfers.append(Transfer(from_id=debt_id, to_id=cred_id, amount=from_cents(transfer_amount)))

        debt_amount += transfer_amount
        cred_amount -= transfer_amount
        debtors[i] = (debt_id, debt_amount)
        creditors[j] = (cred_id, cred_amount)

        if debt_amount == 0:
            i += 1
        if cred_amount == 0:
            j += 1

    residual = {p: from_cents(c) for p, c in debtors[i:] + creditors[j:] if c}
    log.debug("settlement.planned", transfers=len(transfers), residual=len(residual))
    return SettlementPlan(
        transfers=transfers,
        imbalance=from_cents(imbalance),
        residual=residual,
        is_conserved=is_conserved,
    )


def simplify_debts(
    balances: Mapping[Hashable, Numeric],
    *,
    break_ties_by_id: bool = False,
    epsilon: Optional[Numeric] = None,
) -> List[Transfer]:
    return _match(balances, break_ties_by_id, epsilon, stacklevel=3).transfers


def apply_transfers(balances: Mapping[Hashable, Numeric], transfers: Iterable[Transfer]) -> dict[Hashable, Decimal]:
    after = {participant: to_cents(parse_decimal(balance)) for participant, balance in balances.items()}
    for transfer in transfers:
        after[transfer.from_id] = after.get(transfer.from_id, 0) + to_cents(transfer.amount)
        after[transfer.to_id] = after.get(transfer.to_id, 0) - to_cents(transfer.amount)
    return {participant: from_cents(cents) for participant, cents in after.items()}
