from decimal import ROUND_DOWN, Decimal

import pytest

from splitmint.models import SplitStrategy
from splitmint.services.errors import InvalidArgumentError, PercentMismatchError, SplitMismatchError
from splitmint.services.split import compute_splits, distribute_remainder, split_amount


def test_split_amount_even():
    shares = split_amount(1000, ["a", "b", "c", "d"])
    assert shares == {"a": 250, "b": 250, "c": 250, "d": 250}


def test_split_amount_remainder_goes_to_first_participants():
    shares = split_amount(1001, ["a", "b", "c"])
    assert shares == {"a": 334, "b": 334, "c": 333}


def test_distribute_remainder_negative_skips_zero_shares():
    shares = distribute_remainder({"a": 0, "b": 5, "c": 5}, -2, ["a", "b", "c"])
    assert shares == {"a": 0, "b": 4, "c": 4}


def test_equal_extra_cent_to_earliest_listed():
    result = compute_splits(Decimal("100.00"), SplitStrategy.EQUAL, ["A", "B", "C"])
    assert result == {"A": Decimal("33.34"), "B": Decimal("33.33"), "C": Decimal("33.33")}
    assert list(result) == ["A", "B", "C"]


def test_equal_tie_break_follows_input_order():
    result = compute_splits(Decimal("100.00"), SplitStrategy.EQUAL, ["C", "B", "A"])
    assert result["C"] == Decimal("33.34")
    assert result["A"] == Decimal("33.33")


@pytest.mark.parametrize("total", ["0.01", "0.05", "10.00", "99.99", "100.00", "1234.57"])
@pytest.mark.parametrize("count", [1, 2, 3, 4])
def test_equal_conserves_total(total, count):
    participants = ["A", "B", "C", "D"][:count]
    result = compute_splits(Decimal(total), "equal", participants)
    assert sum(result.values()) == Decimal(total)
    assert all(value >= 0 for value in result.values())


def test_exact_uses_declared_values():
    result = compute_splits(Decimal("100.00"), SplitStrategy.EXACT, ["A", "B"], {"A": "60", "B": 40})
    assert result == {"A": Decimal("60.00"), "B": Decimal("40.00")}


def test_exact_rejects_mismatch():
    with pytest.raises(SplitMismatchError) as exc_info:
        compute_splits(Decimal("100.00"), SplitStrategy.EXACT, ["A", "B"], {"A": 60, "B": 39})
    assert exc_info.value.expected == Decimal("100.00")
    assert exc_info.value.actual == Decimal("99")


def test_exact_missing_entry_defaults_to_zero():
    result = compute_splits(Decimal("50.00"), SplitStrategy.EXACT, ["A", "B"], {"A": "50", "B": "abc"})
    assert result == {"A": Decimal("50.00"), "B": Decimal("0.00")}


def test_exact_within_epsilon_still_sums_to_total():
    result = compute_splits(Decimal("100.00"), SplitStrategy.EXACT, ["A", "B"], {"A": "60", "B": "39.99"})
    assert sum(result.values()) == Decimal("100.00")
    assert result["A"] == Decimal("60.01")


def test_percent_computation():
    result = compute_splits(
        Decimal("90.00"),
        SplitStrategy.PERCENT,
        ["A", "B", "C"],
        {"A": 50, "B": 30, "C": 20},
    )
    assert result == {"A": Decimal("45.00"), "B": Decimal("27.00"), "C": Decimal("18.00")}
    assert sum(result.values()) == Decimal("90.00")


def test_percent_rejects_mismatch():
    with pytest.raises(PercentMismatchError):
        compute_splits(Decimal("90.00"), SplitStrategy.PERCENT, ["A", "B"], {"A": 50, "B": 40})


def test_percent_rounds_half_away_from_zero():
    result = compute_splits(
        Decimal("0.10"),
        SplitStrategy.PERCENT,
        ["A", "B"],
        {"A": 25, "B": 75},
        penny_correction=False,
    )
    assert result == {"A": Decimal("0.03"), "B": Decimal("0.08")}


def test_percent_penny_correction():
    declared = {"A": "33.333", "B": "33.333", "C": "33.334"}

    raw = compute_splits(Decimal("10.00"), SplitStrategy.PERCENT, ["A", "B", "C"], declared, penny_correction=False)
    assert sum(raw.values()) == Decimal("9.99")

    corrected = compute_splits(Decimal("10.00"), SplitStrategy.PERCENT, ["A", "B", "C"], declared)
    assert corrected == {"A": Decimal("3.34"), "B": Decimal("3.33"), "C": Decimal("3.33")}


def test_percent_penny_correction_takes_back_overshoot():
    result = compute_splits(Decimal("0.10"), SplitStrategy.PERCENT, ["A", "B"], {"A": 25, "B": 75})
    assert result == {"A": Decimal("0.02"), "B": Decimal("0.08")}


@pytest.mark.parametrize(
    "total, strategy",
    [(Decimal("0"), SplitStrategy.EQUAL), (Decimal("-5.00"), SplitStrategy.EXACT), ("0.001", SplitStrategy.EQUAL)],
)
def test_non_positive_total_rejected(total, strategy):
    with pytest.raises(InvalidArgumentError):
        compute_splits(total, strategy, ["A"], {"A": total})


def test_empty_participants_rejected():
    with pytest.raises(InvalidArgumentError):
        compute_splits(Decimal("10.00"), SplitStrategy.EQUAL, [])


def test_duplicate_participants_rejected():
    with pytest.raises(InvalidArgumentError):
        compute_splits(Decimal("10.00"), SplitStrategy.EQUAL, ["A", "A"])


def test_negative_declared_value_rejected():
    with pytest.raises(InvalidArgumentError):
        compute_splits(Decimal("10.00"), SplitStrategy.EXACT, ["A", "B"], {"A": "15", "B": "-5"})


def test_unknown_strategy_rejected():
    with pytest.raises(InvalidArgumentError):
        compute_splits(Decimal("10.00"), "shares", ["A"])


def _declared_exact(total, count, offset):
    base = (total / count).quantize(Decimal("0.01"), rounding=ROUND_DOWN)
    values = [base] * (count - 1)
    values.append(total - base * (count - 1) + offset)
    return values


@pytest.mark.parametrize("offset", ["-0.01", "0", "0.01"])
@pytest.mark.parametrize("total", ["10.00", "99.99", "100.00", "1234.57"])
@pytest.mark.parametrize("count", [1, 2, 3, 4])
def test_exact_conserves_total(total, count, offset):
    participants = ["A", "B", "C", "D"][:count]
    values = _declared_exact(Decimal(total), count, Decimal(offset))
    declared = dict(zip(participants, values))

    result = compute_splits(Decimal(total), SplitStrategy.EXACT, participants, declared)

    assert sum(result.values()) == Decimal(total)
    assert all(value >= 0 for value in result.values())


def test_exact_sub_cent_declared_values_conserve_total():
    declared = {"A": "33.335", "B": "33.335", "C": "33.335"}

    result = compute_splits(Decimal("100.00"), SplitStrategy.EXACT, ["A", "B", "C"], declared)

    assert result == {"A": Decimal("33.33"), "B": Decimal("33.33"), "C": Decimal("33.34")}


@pytest.mark.parametrize(
    "percents",
    [
        ["100"],
        ["33.333", "66.667"],
        ["12.5", "87.5"],
        ["33.333", "33.333", "33.334"],
        ["12.5", "37.5", "50"],
        ["33.33", "33.33", "33.33"],
        ["12.5", "12.5", "25", "50"],
        ["24.999", "25.001", "25", "25"],
        ["25", "25", "25", "25.01"],
    ],
)
@pytest.mark.parametrize("total", ["0.07", "10.00", "99.99", "1234.57"])
def test_percent_conserves_total(total, percents):
    participants = ["A", "B", "C", "D"][: len(percents)]
    declared = dict(zip(participants, percents))

    result = compute_splits(Decimal(total), SplitStrategy.PERCENT, participants, declared)

    assert sum(result.values()) == Decimal(total)
    assert all(value >= 0 for value in result.values())


def test_percent_within_epsilon_stays_proportional():
    result = compute_splits(
        Decimal("10000.00"),
        SplitStrategy.PERCENT,
        ["A", "B", "C"],
        {"A": "50.01", "B": "25", "C": "25"},
    )

    assert result == {"A": Decimal("5000.50"), "B": Decimal("2499.75"), "C": Decimal("2499.75")}
