# reports.py
import pandas as pd

from campus_planner.cycle import EXPENSE_CATEGORIES


def spending_by_category(expenses, categories=EXPENSE_CATEGORIES):
    """Total spent per category for the week, every category listed (0.0 if unused)."""
    df = pd.DataFrame(
        {'category': [e.category for e in expenses],
         'amount': [float(e.amount) for e in expenses]},
        columns=['category', 'amount'],
    )
    totals = df.groupby('category')['amount'].sum()
    totals = totals.reindex(list(categories), fill_value=0.0)
    return {cat: round(float(value), 2) for cat, value in totals.items()}
