from __future__ import annotations

from decimal import Decimal
from typing import Hashable, Mapping, Optional, Sequence, TypeVar

from splitmint.config import get_settings
from splitmint.logging import get_logger
from splitmint.models import SplitStrategy
from splitmint.services.errors import InvalidArgumentError, PercentMismatchError, SplitMismatchError
from splitmint.utils.money import HUNDRED, Numeric, from_cents, parse_decimal, to_cents, to_decimal

P = TypeVar("P", bound=Hashable)

log = get_logger(__name__)


def _check_participants(participants: Sequence[Hashable]) -> None:
    if not participants:
        raise InvalidArgumentError("participants must not be empty")
    if len(set(participants)) != len(participants):
        raise InvalidArgumentError("participants must not contain duplicates")


def distribute_remainder(shares: Mapping[P, int], remainder: int, order: Sequence[P]) -> dict[P, int]:
    """Hand out ``remainder`` cents one at a time, walking ``order`` from the start.

    A negative remainder takes cents back, skipping shares that are already zero.
    """
    result = dict(shares)
    n = len(order)
    idx = 0
    step = 1 if remainder > 0 else -1
    while remainder != 0:
        key = order[idx]
        if step > 0 or result[key] > 0:
            result[key] += step
            remainder -= step
        idx = (idx + 1) % n
    return result


def split_amount(amount_cents: int, participants: Sequence[P]) -> dict[P, int]:
    if amount_cents < 0:
        raise InvalidArgumentError("amount_cents must be non-negative")
    _check_participants(participants)

    base_share, remainder = divmod(amount_cents, len(participants))
    shares = {participant: base_share for participant in participants}
    return distribute_remainder(shares, remainder, participants)


def _declared_values(participants: Sequence[P], declared: Optional[Mapping[P, object]]) -> dict[P, Decimal]:
    declared = declared or {}
    values: dict[P, Decimal] = {}
    for participant in participants:
        value = parse_decimal(declared.get(participant))
        if value < 0:
            raise InvalidArgumentError(f"declared value for {participant!r} must be non-negative")
        values[participant] = value
    return values


def _split_exact(
    total_cents: int,
    participants: Sequence[P],
    declared: Optional[Mapping[P, object]],
    epsilon: Decimal,
) -> dict[P, int]:
    values = _declared_values(participants, declared)
    total = from_cents(total_cents)
    declared_sum = sum(values.values(), Decimal(0))
    if abs(declared_sum - total) > epsilon:
        raise SplitMismatchError(
            f"declared splits ({declared_sum}) must equal expense amount ({total})",
            expected=total,
            actual=declared_sum,
        )

    shares = {participant: to_cents(value) for participant, value in values.items()}
    return distribute_remainder(shares, total_cents - sum(shares.values()), participants)


def _split_percent(
    total_cents: int,
    participants: Sequence[P],
    declared: Optional[Mapping[P, object]],
    epsilon: Decimal,
    penny_correction: bool,
) -> dict[P, int]:
    percents = _declared_values(participants, declared)
    percent_sum = sum(percents.values(), Decimal(0))
    if abs(percent_sum - HUNDRED) > epsilon:
        raise PercentMismatchError(
            f"total percentage ({percent_sum}%) must equal 100%",
            expected=HUNDRED,
            actual=percent_sum,
        )

    total = from_cents(total_cents)
    if not penny_correction:
        shares = {participant: to_cents(total * percent / HUNDRED) for participant, percent in percents.items()}
        drift = total_cents - sum(shares.values())
        if drift:
            log.info("split.percent_drift", drift_cents=drift)
        return shares

    # shares are relative to the declared sum; the leftover is rounding only, under n cents
    base = percent_sum or HUNDRED
    shares = {participant: to_cents(total * percent / base) for participant, percent in percents.items()}
    return distribute_remainder(shares, total_cents - sum(shares.values()), participants)


def compute_splits(
    total: Numeric,
    strategy: SplitStrategy | str,
    participants: Sequence[P],
    declared: Optional[Mapping[P, object]] = None,
    *,
    penny_correction: Optional[bool] = None,
) -> dict[P, Decimal]:
    """Split ``total`` between ``participants`` according to ``strategy``.

    The result is ordered like ``participants`` and sums to ``total`` to the
    cent. Leftover cents from EQUAL splits go to the earliest participants in
    the given order; callers that want a different tie-break sort the list
    first. PERCENT shares are taken relative to the declared percentages'
    sum, rounded half away from zero and then corrected the same way;
    with ``penny_correction`` off they are plain ``total * percent / 100``
    and may drift by a few cents.
    """
    settings = get_settings()
    strategy = SplitStrategy.parse(strategy)
    _check_participants(participants)

    total_cents = to_cents(to_decimal(total))
    if total_cents <= 0:
        raise InvalidArgumentError(f"total must be positive, got {total!r}")

    if strategy is SplitStrategy.EQUAL:
        shares = split_amount(total_cents, participants)
    elif strategy is SplitStrategy.EXACT:
        shares = _split_exact(total_cents, participants, declared, settings.epsilon)
    else:
        if penny_correction is None:
            penny_correction = settings.percent_penny_correction
        shares = _split_percent(total_cents, participants, declared, settings.epsilon, penny_correction)

    log.debug("split.computed", strategy=strategy.value, participants=len(participants), total_cents=total_cents)
    return {participant: from_cents(shares[participant]) for participant in participants}
