# budget.py
import logging

from campus_planner import cycle
from campus_planner.errors import Unauthenticated
from campus_planner.store import ExpenseDiff

logger = logging.getLogger(__name__)


def require_user(user):
    if user is None or not getattr(user, 'is_authenticated', False):
        raise Unauthenticated('Please log in first.')
    return user


def load_cycle(store, user, now=None):
    """
    Loads the user's week and applies the reset rule before anything reads a
    balance. Safe to call from every page load.
    """
    require_user(user)
    now = now or cycle.utcnow()

    # 1. Rebuild state from stored rows
    state = store.load(user)

    # 2. Check whether a week has passed
    result = cycle.evaluate_reset(state, now)
    if result.reset_occurred:
        # Expenses first: if the period write then fails, the next load resets
        # again over an already empty week, which changes nothing.
        store.write_expenses(user, store.reset_diff(result.cleared))
        store.write_period(user, result.period)
        logger.info('New week for user %s: cleared %d expenses, period starts %s',
                    user.id, len(result.cleared), result.period.period_start)
    return result


def set_allowance(store, user, amount, now=None):
    now = now or cycle.utcnow()
    state = load_cycle(store, user, now).state
    new_state = cycle.set_period_amount(state, amount, now)

    # Expenses logged before the first week began are cleared like a reset
    dropped = cycle.dropped_expenses(state, new_state)
    if dropped:
        store.write_expenses(user, store.reset_diff(dropped))
    store.write_period(user, new_state.period)
    return new_state


def add_expense(store, user, description, amount, category, now=None):
    now = now or cycle.utcnow()
    state = load_cycle(store, user, now).state
    new_state, expense = cycle.record_expense(state, description, amount, category, now)
    store.write_expenses(user, ExpenseDiff(added=(expense,)))
    return new_state, expense


def remove_expense(store, user, expense_id, now=None):
    state = load_cycle(store, user, now).state
    new_state = cycle.delete_expense(state, expense_id)
    if new_state is not state:
        store.write_expenses(user, ExpenseDiff(removed=(expense_id,)))
    return new_state


def cycle_summary(state):
    period = state.period
    return {
        'allowance': float(period.amount),
        'period_start': period.period_start.isoformat() if period.started else None,
        'total_spent': float(cycle.total_spent(state)),
        'remaining_balance': float(cycle.remaining_balance(state)),
        'expenses': [
            {
                'id': e.id,
                'description': e.description,
                'amount': float(e.amount),
                'category': e.category,
                'created_at': e.created_at.isoformat(),
            }
            for e in state.expenses
        ],
    }
