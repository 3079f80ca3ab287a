"""Unit tests for the forecast engine"""

from datetime import date

import pytest

from icarus_finance.domain.forecasting import (
    analyze_profitability,
    calculate_accuracy,
    classify_trend,
    detect_seasonality,
    generate_forecast,
    predict_periods,
    seasonality_factor,
)
from icarus_finance.domain.models import AnalysisThresholds, MonthlyFinancialData, Seasonality

TODAY = date(2024, 4, 15)


def month(key: str, income: float, expense: float) -> MonthlyFinancialData:
    return MonthlyFinancialData(month=key, income=income, expense=expense, net_flow=income - expense)


def test_classify_trend_thresholds():
    assert classify_trend(1500) == "growing"
    assert classify_trend(-1500) == "declining"
    assert classify_trend(1000) == "stable"
    assert classify_trend(-1000) == "stable"


def test_profitability_needs_two_months():
    assert analyze_profitability([month("2024-01", 100, 50)]) == "stable"


def test_profitability_declining_when_net_flow_drops():
    history = [month(f"2024-0{i + 1}", 10000, 5000 + i * 1000) for i in range(4)]
    assert analyze_profitability(history) == "declining"


def test_seasonality_detects_income_peak():
    incomes = [100, 100, 100, 100, 100, 500]
    history = [month(f"2024-0{i + 1}", income, 50) for i, income in enumerate(incomes)]

    seasonality = detect_seasonality(history)

    assert seasonality.detected is True
    assert seasonality.pattern == "monthly"
    assert seasonality.peaks == ["2024-06"]


def test_seasonality_needs_six_months(flat_months):
    seasonality = detect_seasonality(flat_months)
    assert seasonality == Seasonality(detected=False, pattern=None, peaks=[])


def test_constant_income_is_never_seasonal():
    history = [month(f"2024-{i:02d}", 25000, 18000) for i in range(1, 9)]

    assert detect_seasonality(history) == Seasonality(detected=False, pattern=None, peaks=[])


def test_seasonality_factor_neutral_when_not_detected():
    assert seasonality_factor(3, Seasonality(detected=False, pattern=None)) == 1.0
    assert seasonality_factor(3, Seasonality(detected=True, pattern="monthly")) == pytest.approx(1.2)


def test_flat_history_yields_one_period_per_30_days(flat_months):
    periods = predict_periods(flat_months, 90, Seasonality(detected=False, pattern=None), today=TODAY)

    assert [p.date for p in periods] == ["2024-05-01", "2024-06-01", "2024-07-01"]
    first = periods[0]
    assert first.revenue.predicted == 10000.0
    assert first.expenses.predicted == 8000.0
    assert first.cash_flow.predicted == 2000.0
    assert first.revenue.confidence == 90
    assert first.revenue.lower == pytest.approx(7500.0)
    assert first.revenue.upper == pytest.approx(12500.0)


def test_partial_month_rounds_up():
    history = [month("2024-01", 1000, 500)]
    assert len(predict_periods(history, 31, Seasonality(detected=False, pattern=None), today=TODAY)) == 2


def test_confidence_floors_at_fifty(flat_months):
    periods = predict_periods(flat_months, 365, Seasonality(detected=False, pattern=None), today=TODAY)

    assert len(periods) == 13
    assert periods[-1].revenue.confidence == 50
    assert all(50 <= p.revenue.confidence <= 95 for p in periods)


def test_confidence_never_increases_with_horizon(twelve_months):
    seasonality = Seasonality(detected=True, pattern="monthly")
    periods = predict_periods(twelve_months, 540, seasonality, today=TODAY)

    for series in ("revenue", "expenses", "cash_flow"):
        confidences = [getattr(p, series).confidence for p in periods]
        assert all(a >= b for a, b in zip(confidences, confidences[1:]))


def test_negative_cash_flow_is_not_floored():
    history = [month(f"2024-0{i}", 5000, 8000) for i in range(1, 4)]
    periods = predict_periods(history, 30, Seasonality(detected=False, pattern=None), today=TODAY)

    cash = periods[0].cash_flow
    assert cash.predicted == -3000.0
    assert cash.lower < cash.predicted < cash.upper
    assert periods[0].revenue.lower >= 0


def test_declining_revenue_never_goes_negative():
    history = [month(f"2024-0{i + 1}", 10000 - i * 4000, 100) for i in range(3)]
    periods = predict_periods(history, 180, Seasonality(detected=False, pattern=None), today=TODAY)

    assert all(p.revenue.predicted >= 0 and p.revenue.lower >= 0 for p in periods)


def test_accuracy_defaults_with_short_history():
    accuracy = calculate_accuracy([month("2024-01", 1, 1)])
    assert (accuracy.revenue, accuracy.expenses, accuracy.overall) == (70.0, 70.0, 70.0)


def test_accuracy_grows_with_stable_history(twelve_months):
    accuracy = calculate_accuracy(twelve_months)

    assert accuracy.overall > 85
    assert accuracy.overall <= 95


def test_empty_history_has_no_periods():
    forecast = generate_forecast([], [], 90, today=TODAY)

    assert forecast.periods == []
    assert forecast.trends.revenue == "stable"
    assert forecast.accuracy.overall == 70.0


def test_custom_thresholds_change_trend_classification():
    history = [month(f"2024-0{i + 1}", 10000 + i * 600, 5000) for i in range(3)]

    assert generate_forecast([], history, today=TODAY).trends.revenue == "stable"
    sensitive = AnalysisThresholds(trend_slope=100)
    assert generate_forecast([], history, thresholds=sensitive, today=TODAY).trends.revenue == "growing"
