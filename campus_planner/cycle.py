# cycle.py
"""
Weekly allowance cycle: the budget arithmetic and the reset rule.

Every surface (web dashboard, expense tracker, legacy shell) goes through
these functions so they all agree on the balance. State is never mutated
in place; each operation returns a new CycleState.
"""
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional, Tuple

from campus_planner.errors import InvalidAmount, InvalidCategory, MissingField

RESET_INTERVAL = timedelta(days=7)

CENT = Decimal('0.01')
# Largest value a Numeric(12, 2) column holds
MAX_AMOUNT = Decimal('9999999999.99')

EXPENSE_CATEGORIES = (
    'feeding',
    'transport',
    'printing',
    'internet',
    'utilities',
    'books',
    'entertainment',
    'rent',
    'others',
)

# Labels used by the web tracker's category picker
CATEGORY_ALIASES = {
    'food': 'feeding',
    'other': 'others',
}


@dataclass(frozen=True)
class AllowancePeriod:
    amount: Decimal = Decimal('0')
    period_start: Optional[date] = None

    @property
    def started(self) -> bool:
        return self.period_start is not None


@dataclass(frozen=True)
class Expense:
    id: str
    description: str
    amount: Decimal
    category: str
    created_at: datetime


@dataclass(frozen=True)
class CycleState:
    period: AllowancePeriod = field(default_factory=AllowancePeriod)
    expenses: Tuple[Expense, ...] = ()


@dataclass(frozen=True)
class ResetResult:
    reset_occurred: bool
    state: CycleState
    cleared: Tuple[Expense, ...] = ()

    @property
    def period(self) -> AllowancePeriod:
        return self.state.period


def utcnow() -> datetime:
    """Naive UTC timestamp, the form the database columns store."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _as_date(moment) -> date:
    if isinstance(moment, datetime):
        return moment.date()
    return moment


# --- HELPER: Input validation ---
def parse_amount(value, allow_zero=False) -> Decimal:
    """
    Turns form input (str, int, float or Decimal) into a finite Decimal
    rounded to cents. Zero is only accepted for allowances; expenses must
    still be positive after rounding.
    """
    if value is None or isinstance(value, bool):
        raise InvalidAmount('Please enter a numerical value.')
    if isinstance(value, str):
        value = value.strip()
    try:
        amount = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise InvalidAmount(f'{value!r} is not a number.') from None

    if not amount.is_finite():
        raise InvalidAmount('Amount must be a finite number.')
    if abs(amount) > MAX_AMOUNT:
        raise InvalidAmount('Amount is too large.')
    amount = amount.quantize(CENT, rounding=ROUND_HALF_UP)
    if amount < 0 or (amount == 0 and not allow_zero):
        raise InvalidAmount('Amount must be a positive number of at least 0.01.')
    return amount


def normalize_category(category, categories=EXPENSE_CATEGORIES) -> str:
    label = (category or '').strip().lower()
    label = CATEGORY_ALIASES.get(label, label)
    if label not in categories:
        raise InvalidCategory(f"Invalid category. Please choose from {', '.join(categories)}.")
    return label


# --- OPERATIONS ---
def set_period_amount(state: CycleState, amount, now) -> CycleState:
    """
    Sets the weekly allowance. The first call starts the clock; changing the
    amount mid-week keeps the original start date.

    Starting the clock drops expenses logged on earlier days, since they fall
    outside the new week. Callers can find them with `dropped_expenses`.
    """
    amount = parse_amount(amount, allow_zero=True)
    period = state.period
    if period.started:
        return replace(state, period=replace(period, amount=amount))

    start = _as_date(now)
    expenses = tuple(e for e in state.expenses if _as_date(e.created_at) >= start)
    return CycleState(period=AllowancePeriod(amount=amount, period_start=start), expenses=expenses)


def dropped_expenses(before: CycleState, after: CycleState) -> Tuple[Expense, ...]:
    kept = {e.id for e in after.expenses}
    return tuple(e for e in before.expenses if e.id not in kept)


def record_expense(state: CycleState, description, amount, category, now,
                   expense_id=None, categories=EXPENSE_CATEGORIES):
    description = (description or '').strip()
    if not description:
        raise MissingField('Description is required.')
    amount = parse_amount(amount)
    category = normalize_category(category, categories)

    expense = Expense(
        id=expense_id or uuid.uuid4().hex,
        description=description,
        amount=amount,
        category=category,
        created_at=now,
    )
    return replace(state, expenses=state.expenses + (expense,)), expense


def delete_expense(state: CycleState, expense_id) -> CycleState:
    remaining = tuple(e for e in state.expenses if e.id != expense_id)
    if len(remaining) == len(state.expenses):
        return state
    return replace(state, expenses=remaining)


def evaluate_reset(state: CycleState, now, interval=RESET_INTERVAL) -> ResetResult:
    """
    Starts a new week once `interval` has elapsed since period_start.
    The boundary itself counts: exactly seven days later resets.
    """
    period = state.period
    if not period.started:
        return ResetResult(False, state)

    today = _as_date(now)
    if today - period.period_start < interval:
        return ResetResult(False, state)

    new_state = CycleState(period=replace(period, period_start=today), expenses=())
    return ResetResult(True, new_state, cleared=state.expenses)


def total_spent(state: CycleState) -> Decimal:
    return sum((e.amount for e in state.expenses), Decimal('0'))


def remaining_balance(state: CycleState) -> Decimal:
    # No floor: a negative value is shown as overspend.
    return state.period.amount - total_spent(state)
