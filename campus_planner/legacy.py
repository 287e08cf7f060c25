# legacy.py
"""
Single-user planner shell that keeps everything in one local JSON file.

Reads the older file layout too (per-category totals, `subject` instead of
`course`), converting it on load.
"""
import cmd
import json
import shlex
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path

from campus_planner import cycle
from campus_planner.errors import DataFileError, PlannerError
from campus_planner.planner import validate_reminder
from campus_planner.reports import spending_by_category

DATA_FILE = Path("campus_planner_data.json")
FILE_VERSION = 2


# ===== STORAGE =====
def _expense_to_dict(e):
    return {
        "id": e.id,
        "description": e.description,
        "amount": str(e.amount),
        "category": e.category,
        "created_at": e.created_at.isoformat(),
    }


def _migrate_v1(data, now):
    """Old files only kept a running total per category."""
    started = data.get("last_allowance_update")
    period = cycle.AllowancePeriod(
        amount=Decimal(str(data.get("total_allowance") or 0)),
        period_start=date.fromisoformat(started) if started else None,
    )
    created_at = datetime.combine(period.period_start, datetime.min.time()) if started else now
    expenses = []
    for category, total in (data.get("expenses") or {}).items():
        if total and category in cycle.EXPENSE_CATEGORIES:
            expenses.append(cycle.Expense(
                id=f"legacy-{category}",
                description=f"{category.capitalize()} (carried over)",
                amount=Decimal(str(total)),
                category=category,
                created_at=created_at,
            ))
    return cycle.CycleState(period=period, expenses=tuple(expenses))


def _migrate_schedule(items):
    schedule = []
    for item in items or []:
        course = item.get("course") or item.get("subject") or "Unknown Course"
        schedule.append({
            "course": course,
            "weekday": item.get("weekday") or "Monday",
            "time": item.get("time", ""),
        })
    return schedule


def load_state(path=DATA_FILE, now=None):
    """
    Returns (CycleState, study_schedule). A missing file gives an empty
    planner; a damaged one raises DataFileError and is left untouched.
    """
    path = Path(path)
    if not path.exists():
        return cycle.CycleState(), []

    try:
        return _parse(json.loads(path.read_text()), now)
    except (ValueError, KeyError, TypeError, AttributeError, InvalidOperation) as e:
        raise DataFileError(f"{path} is damaged and could not be read ({e}).") from e


def _parse(data, now):
    if not isinstance(data, dict):
        raise ValueError("expected a JSON object")
    schedule = _migrate_schedule(data.get("study_schedule"))
    if data.get("version", 1) < FILE_VERSION:
        return _migrate_v1(data, now or cycle.utcnow()), schedule

    allowance = data.get("allowance") or {}
    started = allowance.get("period_start")
    period = cycle.AllowancePeriod(
        amount=Decimal(allowance.get("amount", "0")),
        period_start=date.fromisoformat(started) if started else None,
    )
    expenses = tuple(
        cycle.Expense(
            id=e["id"],
            description=e["description"],
            amount=Decimal(e["amount"]),
            category=e["category"],
            created_at=datetime.fromisoformat(e["created_at"]),
        )
        for e in data.get("expenses", [])
    )
    return cycle.CycleState(period=period, expenses=expenses), schedule


def save_state(state, schedule, path=DATA_FILE):
    period = state.period
    data = {
        "version": FILE_VERSION,
        "allowance": {
            "amount": str(period.amount),
            "period_start": period.period_start.isoformat() if period.started else None,
        },
        "expenses": [_expense_to_dict(e) for e in state.expenses],
        "study_schedule": schedule,
    }
    # Write next to the target, then swap, so a crash never leaves half a file
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(json.dumps(data, indent=2))
    tmp.replace(path)


# ===== SHELL =====
class PlannerShell(cmd.Cmd):
    prompt = "(planner) "

    def __init__(self, path=DATA_FILE, clock=cycle.utcnow, stdout=None):
        super().__init__(stdout=stdout)
        self.intro = "Welcome to the Campus Planner. Type 'help' for commands."
        self.path = Path(path)
        self.clock = clock
        self.state, self.schedule = load_state(self.path, now=clock())
        self.check_weekly_reset()
        self.save()

    def say(self, message):
        print(message, file=self.stdout)

    def save(self):
        save_state(self.state, self.schedule, self.path)

    def check_weekly_reset(self):
        result = cycle.evaluate_reset(self.state, self.clock())
        if result.reset_occurred:
            self.say("A new week has started! Resetting expenses.")
            self.state = result.state
        return result.reset_occurred

    # ===== BUDGET COMMANDS =====
    def do_allowance(self, arg):
        """Set your weekly allowance: allowance <amount>"""
        try:
            self.state = cycle.set_period_amount(self.state, arg, self.clock())
        except PlannerError as e:
            self.say(f"Invalid input: {e}")
            return
        self.save()
        self.say(f"Weekly allowance set to: CFA{self.state.period.amount:.2f}")

    def do_expense(self, arg):
        """Log an expense: expense <category> <amount> [description]"""
        args = shlex.split(arg)
        if len(args) < 2:
            self.say(f"Usage: expense <category> <amount> [description]  "
                     f"(categories: {', '.join(cycle.EXPENSE_CATEGORIES)})")
            return
        category, amount = args[0], args[1]
        description = " ".join(args[2:]) or category.capitalize()
        try:
            self.state, expense = cycle.record_expense(
                self.state, description, amount, category, self.clock())
        except PlannerError as e:
            self.say(f"Invalid input: {e}")
            return
        self.save()
        self.say(f"Logged CFA{expense.amount:.2f} under {expense.category} [{expense.id[:8]}].")

    def do_delete(self, arg):
        """Delete an expense: delete <id or id prefix>"""
        key = arg.strip()
        if not key:
            self.say("Usage: delete <id>")
            return
        matches = [e.id for e in self.state.expenses if e.id.startswith(key)]
        if len(matches) > 1:
            self.say("Ambiguous id, type more characters.")
            return
        # Unknown ids fall through as a no-op
        self.state = cycle.delete_expense(self.state, matches[0] if matches else key)
        self.save()
        self.say("✓ Deleted" if matches else "No such expense, nothing changed.")

    def do_report(self, arg):
        """View the expense report for this week"""
        totals = spending_by_category(self.state.expenses)
        self.say(f"\n{' Expense Report ':-^40}")
        for category, amount in totals.items():
            self.say(f"  {category.capitalize():<15} {amount:>12.2f}")
        self.say(f"  {'Total Spent':<15} {cycle.total_spent(self.state):>12.2f}")
        self.say(f"  {'Remaining':<15} {cycle.remaining_balance(self.state):>12.2f}")
        if self.state.expenses:
            self.say("\nThis week:")
            for e in self.state.expenses:
                self.say(f"  [{e.id[:8]}] {e.description}: CFA{e.amount:.2f} ({e.category})")

    # ===== STUDY COMMANDS =====
    def do_remind(self, arg):
        """Add a study reminder: remind "<course>" <weekday> <time>"""
        args = shlex.split(arg)
        if len(args) < 3:
            self.say('Usage: remind "<course>" <weekday> <time>')
            return
        try:
            course, weekday, time = validate_reminder(" ".join(args[:-2]), args[-2], args[-1])
        except PlannerError as e:
            self.say(f"Invalid input: {e}")
            return
        self.schedule.append({"course": course, "weekday": weekday, "time": time})
        self.save()
        self.say(f"Study reminder added for {course} on {weekday} at {time}.")

    def do_schedule(self, arg):
        """View your study schedule"""
        if not self.schedule:
            self.say("Your schedule is empty.")
            return
        self.say(f"\n{' Study Schedule ':-^40}")
        for item in self.schedule:
            self.say(f"  {item['course']:<20} {item['weekday']:<10} {item['time']}")

    # ===== UTILITIES =====
    def do_quit(self, arg):
        """Exit the planner"""
        self.say("Goodbye!")
        return True

    do_exit = do_quit


def main(path=DATA_FILE):
    try:
        shell = PlannerShell(path)
    except DataFileError as e:
        print(f"Error loading data: {e}")
        return 1
    shell.cmdloop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
