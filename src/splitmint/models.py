from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Hashable, Mapping, Optional

from splitmint.services.errors import InvalidArgumentError
from splitmint.utils.money import ZERO, parse_decimal, round_half_away, to_decimal


class SplitStrategy(str, Enum):
    EQUAL = "EQUAL"
    EXACT = "EXACT"
    PERCENT = "PERCENT"

    @classmethod
    def parse(cls, value: SplitStrategy | str) -> SplitStrategy:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError as exc:
            raise InvalidArgumentError(f"unknown split strategy: {value!r}") from exc


@dataclass(slots=True)
class ExpenseSplit:
    participant_id: Hashable
    amount: Decimal
    percent: Optional[Decimal] = None


@dataclass(slots=True)
class Expense:
    amount: Decimal
    payer_id: Hashable
    split_type: SplitStrategy = SplitStrategy.EQUAL
    splits: list[ExpenseSplit] = field(default_factory=list)
    description: str = ""
    date: Optional[datetime] = None
    expense_id: Optional[str] = None

    def owed_by(self, participant_id: Hashable) -> Decimal:
        for split in self.splits:
            if split.participant_id == participant_id:
                return split.amount
        return ZERO

    def involves(self, participant_id: Hashable) -> bool:
        return self.payer_id == participant_id or any(
            split.participant_id == participant_id for split in self.splits
        )

    def as_dict(self) -> dict[str, Any]:
        return {
            "id": self.expense_id,
            "description": self.description,
            "amount": self.amount,
            "payer_id": self.payer_id,
            "split_type": self.split_type.value,
            "date": self.date,
            "splits": [
                {"participant_id": s.participant_id, "amount": s.amount, "percent": s.percent}
                for s in self.splits
            ],
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> Expense:
        """Build an expense from a stored record.

        Accepts both snake_case keys and the camelCase ones used by the
        document store (``payerId``/``payer``, ``splitType``, ``memberId``).
        Split amounts are taken as persisted; they are not recomputed.
        """
        payer_id = _first(record, "payer_id", "payerId", "payer")
        if payer_id is None:
            raise InvalidArgumentError("expense record has no payer")

        amount = _first(record, "amount")
        if amount is None:
            raise InvalidArgumentError("expense record has no amount")

        splits = []
        for raw in record.get("splits") or ():
            participant_id = _first(raw, "participant_id", "participantId", "memberId", "member_id")
            if participant_id is None:
                raise InvalidArgumentError("expense split has no participant")
            percent = raw.get("percent")
            splits.append(
                ExpenseSplit(
                    participant_id=participant_id,
                    amount=round_half_away(parse_decimal(raw.get("amount"))),
                    percent=parse_decimal(percent) if percent is not None else None,
                )
            )

        return cls(
            amount=round_half_away(to_decimal(amount)),
            payer_id=payer_id,
            split_type=SplitStrategy.parse(_first(record, "split_type", "splitType") or SplitStrategy.EQUAL),
            splits=splits,
            description=record.get("description") or "",
            date=record.get("date"),
            expense_id=_first(record, "id", "_id", "expense_id"),
        )


@dataclass(slots=True)
class GroupMember:
    member_id: Hashable
    name: str
    initial_balance: Decimal = ZERO
    email: Optional[str] = None
    user_id: Optional[str] = None


@dataclass(slots=True)
class Group:
    name: str
    members: list[GroupMember] = field(default_factory=list)
    currency: str = "INR"

    @property
    def member_ids(self) -> list[Hashable]:
        return [member.member_id for member in self.members]

    @property
    def initial_balances(self) -> dict[Hashable, Decimal]:
        return {member.member_id: member.initial_balance for member in self.members}

    def find_member(self, member_id: Hashable) -> Optional[GroupMember]:
        for member in self.members:
            if member.member_id == member_id:
                return member
        return None

    def find_by_user(self, user_id: Optional[str] = None, email: Optional[str] = None) -> Optional[GroupMember]:
        for member in self.members:
            if user_id is not None and member.user_id == user_id:
                return member
            if email is not None and member.email == email:
                return member
        return None


def _first(mapping: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = mapping.get(key)
        if value is not None:
            return value
    return None
