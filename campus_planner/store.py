# store.py
"""Reads and writes cycle state through the SQLAlchemy session."""
import logging
from dataclasses import dataclass
from datetime import datetime, time
from typing import Tuple

from sqlalchemy.exc import SQLAlchemyError

from campus_planner.cycle import AllowancePeriod, CycleState, Expense, utcnow
from campus_planner.errors import CollaboratorUnavailable
from campus_planner.models import Allowance, ExpenseRow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExpenseDiff:
    added: Tuple[Expense, ...] = ()
    removed: Tuple[str, ...] = ()
    archived: Tuple[str, ...] = ()

    def __bool__(self):
        return bool(self.added or self.removed or self.archived)


def _to_expense(row):
    return Expense(
        id=row.id,
        description=row.description,
        amount=row.amount,
        category=row.category,
        created_at=row.created_at,
    )


class CycleStore:
    """
    One user's allowance row plus their expense rows. Every write commits on
    its own; there is no transaction spanning the two tables.
    """

    def __init__(self, session, archive_on_reset=False):
        self.session = session
        self.archive_on_reset = archive_on_reset

    def _commit(self, action):
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error('Database error while %s: %s', action, exc)
            raise CollaboratorUnavailable(f'Could not save changes ({action}).') from exc

    def _query(self, action, run):
        try:
            return run()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error('Database error while %s: %s', action, exc)
            raise CollaboratorUnavailable(f'Could not load data ({action}).') from exc

    def read_period(self, user) -> AllowancePeriod:
        row = self._query('reading allowance',
                          lambda: Allowance.query.filter_by(user_id=user.id).first())
        if row is None:
            return AllowancePeriod()
        return AllowancePeriod(amount=row.amount, period_start=row.period_start)

    def write_period(self, user, period: AllowancePeriod):
        try:
            row = Allowance.query.filter_by(user_id=user.id).first()
            if row is None:
                row = Allowance(user_id=user.id)
                self.session.add(row)
            row.amount = period.amount
            row.period_start = period.period_start
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise CollaboratorUnavailable('Could not save allowance.') from exc
        self._commit('writing allowance')

    def read_expenses(self, user, period: AllowancePeriod) -> Tuple[Expense, ...]:
        def run():
            query = ExpenseRow.query.filter_by(user_id=user.id, archived_at=None)
            # Rows older than the current window belong to an earlier week.
            if period.started:
                window_start = datetime.combine(period.period_start, time.min)
                query = query.filter(ExpenseRow.created_at >= window_start)
            return query.order_by(ExpenseRow.created_at).all()

        rows = self._query('reading expenses', run)
        return tuple(_to_expense(row) for row in rows)

    def write_expenses(self, user, diff: ExpenseDiff):
        if not diff:
            return
        try:
            for expense in diff.added:
                self.session.add(ExpenseRow(
                    id=expense.id,
                    user_id=user.id,
                    description=expense.description,
                    amount=expense.amount,
                    category=expense.category,
                    created_at=expense.created_at,
                ))
            if diff.removed:
                ExpenseRow.query.filter(
                    ExpenseRow.user_id == user.id,
                    ExpenseRow.id.in_(diff.removed),
                ).delete(synchronize_session=False)
            if diff.archived:
                ExpenseRow.query.filter(
                    ExpenseRow.user_id == user.id,
                    ExpenseRow.id.in_(diff.archived),
                ).update({'archived_at': utcnow()}, synchronize_session=False)
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise CollaboratorUnavailable('Could not save expenses.') from exc
        self._commit('writing expenses')

    def load(self, user) -> CycleState:
        period = self.read_period(user)
        return CycleState(period=period, expenses=self.read_expenses(user, period))

    def reset_diff(self, cleared) -> ExpenseDiff:
        ids = tuple(e.id for e in cleared)
        if self.archive_on_reset:
            return ExpenseDiff(archived=ids)
        return ExpenseDiff(removed=ids)
