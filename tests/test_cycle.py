from datetime import date, datetime
from decimal import Decimal

import pytest

from campus_planner import cycle
from campus_planner.cycle import AllowancePeriod, CycleState
from campus_planner.errors import InvalidAmount, InvalidCategory, MissingField

START = datetime(2025, 1, 1, 8, 0)


def started(amount="5000", expenses=()):
    state = cycle.set_period_amount(CycleState(), amount, START)
    for description, value, category in expenses:
        state, _ = cycle.record_expense(state, description, value, category, START)
    return state


@pytest.mark.parametrize("amount", [0, 1, "2500", 99.5, Decimal("0.01")])
def test_balance_equals_allowance_without_expenses(amount):
    state = cycle.set_period_amount(CycleState(), amount, START)
    assert cycle.remaining_balance(state) == Decimal(str(amount))


def test_first_allowance_starts_the_period():
    state = cycle.set_period_amount(CycleState(), "5000", START)
    assert state.period == AllowancePeriod(Decimal("5000"), date(2025, 1, 1))


def test_changing_amount_mid_week_keeps_start_date():
    state = started()
    state = cycle.set_period_amount(state, "7000", datetime(2025, 1, 4))
    assert state.period.period_start == date(2025, 1, 1)
    assert state.period.amount == Decimal("7000")


@pytest.mark.parametrize("amount", [-1, "abc", "", None, float("nan"), float("inf"), True])
def test_invalid_allowance_rejected(amount):
    with pytest.raises(InvalidAmount):
        cycle.set_period_amount(CycleState(), amount, START)


def test_balance_subtracts_every_expense_and_can_go_negative():
    state = started("1000", [
        ("Lunch", "300", "feeding"),
        ("Bus", 250.5, "transport"),
        ("Handout", 600, "printing"),
    ])
    assert cycle.total_spent(state) == Decimal("1150.5")
    assert cycle.remaining_balance(state) == Decimal("-150.5")


def test_record_expense_rejects_bad_amount():
    with pytest.raises(InvalidAmount):
        cycle.record_expense(started(), "Lunch", -5, "feeding", START)
    with pytest.raises(InvalidAmount):
        cycle.record_expense(started(), "Lunch", 0, "feeding", START)


def test_record_expense_rejects_unknown_category():
    with pytest.raises(InvalidCategory):
        cycle.record_expense(started(), "Lunch", 5, "unknown", START)


def test_record_expense_requires_description():
    with pytest.raises(MissingField):
        cycle.record_expense(started(), "  ", 5, "feeding", START)


def test_category_is_case_insensitive():
    _, expense = cycle.record_expense(started(), "Taxi", 5, " Transport ", START)
    assert expense.category == "transport"


def test_record_expense_does_not_touch_original_state():
    state = started()
    new_state, expense = cycle.record_expense(state, "Lunch", 5, "feeding", START)
    assert state.expenses == ()
    assert new_state.expenses == (expense,)


def test_delete_expense():
    state, expense = cycle.record_expense(started(), "Lunch", 5, "feeding", START)
    assert cycle.delete_expense(state, expense.id).expenses == ()


def test_delete_missing_expense_is_a_no_op():
    state = started(expenses=[("Lunch", 5, "feeding")])
    assert cycle.delete_expense(state, "does-not-exist") is state


def test_reset_fires_exactly_at_seven_days():
    state = started(expenses=[("Lunch", 5, "feeding")])
    result = cycle.evaluate_reset(state, datetime(2025, 1, 8, 0, 0))
    assert result.reset_occurred
    assert result.period.period_start == date(2025, 1, 8)
    assert result.period.amount == Decimal("5000")
    assert result.state.expenses == ()
    assert len(result.cleared) == 1


def test_no_reset_before_seven_days():
    state = started(expenses=[("Lunch", 5, "feeding")])
    result = cycle.evaluate_reset(state, datetime(2025, 1, 6, 23, 59))
    assert not result.reset_occurred
    assert result.state is state


def test_reset_is_idempotent_for_the_same_instant():
    now = datetime(2025, 1, 9, 12, 0)
    first = cycle.evaluate_reset(started(), now)
    second = cycle.evaluate_reset(first.state, now)
    assert first.reset_occurred
    assert not second.reset_occurred
    assert second.period == first.period


def test_reset_accepts_plain_dates():
    result = cycle.evaluate_reset(started(), date(2025, 1, 8))
    assert result.reset_occurred


def test_not_started_period_never_resets():
    state, _ = cycle.record_expense(CycleState(), "Lunch", 5, "feeding", START)
    result = cycle.evaluate_reset(state, datetime(2030, 1, 1))
    assert not result.reset_occurred
    assert cycle.remaining_balance(state) == Decimal("-5")


def test_amounts_are_rounded_to_cents():
    state = cycle.set_period_amount(CycleState(), "10.005", START)
    assert state.period.amount == Decimal("10.01")
    _, expense = cycle.record_expense(state, "Gum", "0.005", "feeding", START)
    assert expense.amount == Decimal("0.01")


@pytest.mark.parametrize("amount", ["0.004", "0.0001", "10000000000", "1e12"])
def test_expense_must_be_storable(amount):
    with pytest.raises(InvalidAmount):
        cycle.record_expense(started(), "Gum", amount, "feeding", START)


def test_web_tracker_labels_are_accepted():
    state, food = cycle.record_expense(started(), "Lunch", 5, "Food", START)
    _, other = cycle.record_expense(state, "Gift", 5, "Other", START)
    assert (food.category, other.category) == ("feeding", "others")


def test_starting_the_week_drops_earlier_expenses():
    state, old = cycle.record_expense(CycleState(), "Snacks", 300, "feeding",
                                      datetime(2024, 12, 30, 18, 0))
    state, today = cycle.record_expense(state, "Bus", 50, "transport", START)
    new_state = cycle.set_period_amount(state, "1000", START)
    assert new_state.expenses == (today,)
    assert cycle.dropped_expenses(state, new_state) == (old,)
    assert cycle.remaining_balance(new_state) == Decimal("950")


def test_changing_amount_keeps_expenses():
    state = started(expenses=[("Lunch", 5, "feeding")])
    new_state = cycle.set_period_amount(state, "10", datetime(2025, 1, 3))
    assert new_state.expenses == state.expenses
    assert cycle.dropped_expenses(state, new_state) == ()
