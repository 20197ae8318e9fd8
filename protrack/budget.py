"""Monthly budget evaluation.

A user has a single budget amount which is compared against the spend of
each calendar month.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from .aggregation import filter_by_month, total_amount
from .common.formatting import format_currency
from .records import Expense

WARNING_THRESHOLD = 85.0
OVER_LIMIT_THRESHOLD = 100.0


class BudgetStatus(str, Enum):
    NO_BUDGET = 'NoBudget'
    OK = 'Ok'
    WARNING = 'Warning'
    OVER_LIMIT = 'OverLimit'


@dataclass(frozen=True)
class BudgetState:
    budget: float
    spent: float
    balance: float
    percentage: float
    status: BudgetStatus

    @property
    def progress_width(self) -> float:
        """Width of a progress bar in percent; the bar caps at 100."""
        if self.status is BudgetStatus.NO_BUDGET:
            return 0.0
        return min(self.percentage, 100.0)


def classify(budget_amount: float, percentage: float) -> BudgetStatus:
    if budget_amount == 0:
        return BudgetStatus.NO_BUDGET
    if percentage >= OVER_LIMIT_THRESHOLD:
        return BudgetStatus.OVER_LIMIT
    if percentage >= WARNING_THRESHOLD:
        return BudgetStatus.WARNING
    return BudgetStatus.OK


def evaluate(budget_amount: float, monthly_spend: float) -> BudgetState:
    """Compare a month's spend with the budget.

    ``balance`` goes negative once the budget is exceeded and
    ``percentage`` is reported unclamped (e.g. 142.0), with 0 when no
    budget is set.

    Example:
        >>> state = evaluate(120, 150)
        >>> state.balance, state.percentage, state.status.value
        (-30.0, 125.0, 'OverLimit')
    """
    budget_amount = float(budget_amount or 0)
    monthly_spend = float(monthly_spend or 0)
    balance = budget_amount - monthly_spend
    percentage = monthly_spend / budget_amount * 100 if budget_amount > 0 else 0.0
    return BudgetState(
        budget=budget_amount,
        spent=monthly_spend,
        balance=balance,
        percentage=percentage,
        status=classify(budget_amount, percentage),
    )


def monthly_budget_state(
    budget_amount: float,
    expenses: Iterable[Expense],
    month: int,
    year: int,
) -> BudgetState:
    """Evaluate the budget against the expenses of one calendar month."""
    return evaluate(budget_amount, total_amount(filter_by_month(expenses, month, year)))


def budget_message(state: BudgetState) -> str:
    """User-facing sentence describing the budget state."""
    if state.status is BudgetStatus.NO_BUDGET:
        return 'Set a budget to track your monthly spending limit.'
    if state.status is BudgetStatus.OVER_LIMIT:
        return f"You have exceeded your budget by {format_currency(abs(state.balance))}!"
    if state.status is BudgetStatus.WARNING:
        return 'You are approaching your budget limit.'
    return f"You have {format_currency(state.balance)} remaining for this month."
