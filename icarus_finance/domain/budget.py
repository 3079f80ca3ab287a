"""Budget vs. actual comparison per spending category"""

from collections import defaultdict
from typing import Dict, Optional, Sequence

from icarus_finance.domain.models import (
    AnalysisThresholds,
    BudgetCategory,
    BudgetComparison,
    BudgetItem,
    BudgetSummary,
    FinancialAccount,
)


def _variance_percent(variance: float, base: float) -> float:
    return variance / base * 100 if base > 0 else 0.0


def classify_budget_status(variance: float, variance_percent: float, tolerance: float) -> str:
    if abs(variance_percent) <= tolerance:
        return "on_track"
    if variance > 0:
        return "over"
    return "under"


def compare_budget(
    accounts: Sequence[FinancialAccount],
    budget: Sequence[BudgetItem],
    start_date: str,
    end_date: str,
    thresholds: Optional[AnalysisThresholds] = None,
) -> BudgetComparison:
    """
    Compare paid payables in [start_date, end_date] against the budget.

    The account date is payment_date, falling back to due_date. Bounds are
    inclusive and compared as ISO-8601 strings.
    """
    thresholds = thresholds or AnalysisThresholds()

    period_accounts = [
        a for a in accounts if start_date <= (a.payment_date or a.due_date) <= end_date
    ]

    actual_by_category: Dict[str, float] = defaultdict(float)
    for account in period_accounts:
        if account.type == "payable" and account.status == "paid":
            actual_by_category[account.category] += account.final_amount

    categories = []
    for item in budget:
        actual = actual_by_category.get(item.category, 0.0)
        variance = actual - item.amount
        variance_percent = _variance_percent(variance, item.amount)
        categories.append(
            BudgetCategory(
                category=item.category,
                budgeted=item.amount,
                actual=actual,
                variance=variance,
                variance_percent=variance_percent,
                status=classify_budget_status(
                    variance, variance_percent, thresholds.budget_tolerance_percent
                ),
            )
        )

    total_budgeted = sum(item.amount for item in budget)
    total_actual = sum(c.actual for c in categories)
    total_variance = total_actual - total_budgeted

    return BudgetComparison(
        period_start=start_date,
        period_end=end_date,
        categories=categories,
        summary=BudgetSummary(
            total_budgeted=total_budgeted,
            total_actual=total_actual,
            total_variance=total_variance,
            variance_percent=_variance_percent(total_variance, total_budgeted),
            categories_on_track=sum(1 for c in categories if c.status == "on_track"),
            categories_over=sum(1 for c in categories if c.status == "over"),
            categories_under=sum(1 for c in categories if c.status == "under"),
        ),
    )
