"""Unit tests for budget comparison"""

from datetime import date

import pytest

from fakes import make_account
from icarus_finance.domain.budget import classify_budget_status, compare_budget
from icarus_finance.domain.models import AnalysisThresholds, BudgetItem, FinancialAccount


def paid_payable(category: str, amount: float, day: int = 15, id: str = "p") -> FinancialAccount:
    return make_account(
        id=id,
        type="payable",
        status="paid",
        category=category,
        final_amount=amount,
        due_date=date(2024, 3, day),
        payment_date=date(2024, 3, day),
    )


def test_within_tolerance_is_on_track():
    result = compare_budget(
        [paid_payable("marketing", 1050)],
        [BudgetItem(category="marketing", amount=1000)],
        "2024-03-01",
        "2024-03-31",
    )

    category = result.categories[0]
    assert category.status == "on_track"
    assert category.variance == 50
    assert category.variance_percent == pytest.approx(5.0)


def test_overspend_reports_variance():
    result = compare_budget(
        [paid_payable("marketing", 1200)],
        [BudgetItem(category="marketing", amount=1000)],
        "2024-03-01",
        "2024-03-31",
    )

    category = result.categories[0]
    assert category.status == "over"
    assert category.variance == 200
    assert category.variance_percent == pytest.approx(20.0)
    assert result.summary.categories_over == 1


def test_unspent_category_is_under():
    result = compare_budget([], [BudgetItem(category="viagens", amount=500)], "2024-03-01", "2024-03-31")

    category = result.categories[0]
    assert category.actual == 0
    assert category.variance == -500
    assert category.status == "under"


def test_only_paid_payables_inside_period_count():
    accounts = [
        paid_payable("ti", 300, day=1, id="a"),
        paid_payable("ti", 300, day=31, id="b"),
        make_account(id="c", type="payable", status="pending", category="ti", final_amount=999,
                     due_date=date(2024, 3, 10)),
        make_account(id="d", type="receivable", status="paid", category="ti", final_amount=999,
                     due_date=date(2024, 3, 10), payment_date=date(2024, 3, 10)),
        make_account(id="e", type="payable", status="paid", category="ti", final_amount=999,
                     due_date=date(2024, 4, 1), payment_date=date(2024, 4, 1)),
    ]
    result = compare_budget(accounts, [BudgetItem(category="ti", amount=600)], "2024-03-01", "2024-03-31")

    assert result.categories[0].actual == 600
    assert result.categories[0].status == "on_track"


def test_payment_date_takes_precedence_over_due_date():
    account = make_account(
        type="payable",
        status="paid",
        category="aluguel",
        final_amount=2000,
        due_date=date(2024, 2, 28),
        payment_date=date(2024, 3, 2),
    )
    result = compare_budget([account], [BudgetItem(category="aluguel", amount=2000)], "2024-03-01", "2024-03-31")

    assert result.categories[0].actual == 2000


def test_summary_totals():
    result = compare_budget(
        [paid_payable("a", 1200, id="1"), paid_payable("b", 100, id="2")],
        [BudgetItem(category="a", amount=1000), BudgetItem(category="b", amount=1000)],
        "2024-03-01",
        "2024-03-31",
    )

    summary = result.summary
    assert summary.total_budgeted == 2000
    assert summary.total_actual == 1300
    assert summary.total_variance == -700
    assert summary.variance_percent == pytest.approx(-35.0)
    assert (summary.categories_on_track, summary.categories_over, summary.categories_under) == (0, 1, 1)
    assert result.period_start == "2024-03-01"
    assert result.period_end == "2024-03-31"


def test_zero_budget_has_zero_percent():
    result = compare_budget([paid_payable("x", 50)], [BudgetItem(category="x", amount=0)], "2024-03-01", "2024-03-31")

    assert result.categories[0].variance_percent == 0.0
    assert result.categories[0].status == "on_track"


def test_custom_tolerance():
    assert classify_budget_status(150, 15.0, 10.0) == "over"
    relaxed = AnalysisThresholds(budget_tolerance_percent=20)
    assert classify_budget_status(150, 15.0, relaxed.budget_tolerance_percent) == "on_track"
