"""Forecast engine - trend, seasonality and period projections"""

import math
from datetime import date
from typing import List, Optional, Sequence

from icarus_finance.domain.models import (
    AnalysisThresholds,
    FinancialAccount,
    ForecastAccuracy,
    ForecastData,
    ForecastPeriod,
    MonthlyFinancialData,
    PredictionRange,
    Seasonality,
    TrendSummary,
)
from icarus_finance.domain.statistics import calculate_trend, coefficient_of_variation, mean, std_dev
from icarus_finance.utils.date_utils import first_day_of_month_offset

DEFAULT_THRESHOLDS = AnalysisThresholds()

MIN_MONTHS_FOR_SEASONALITY = 6
MIN_MONTHS_FOR_ACCURACY = 3
BASELINE_WINDOW = 3
DAYS_PER_PERIOD = 30


def classify_trend(slope: float, threshold: float = DEFAULT_THRESHOLDS.trend_slope) -> str:
    """Map a regression slope to growing / stable / declining"""
    if slope > threshold:
        return "growing"
    if slope < -threshold:
        return "declining"
    return "stable"


def analyze_profitability(
    monthly_data: Sequence[MonthlyFinancialData],
    threshold: float = DEFAULT_THRESHOLDS.profitability_slope,
) -> str:
    if len(monthly_data) < 2:
        return "stable"

    trend = calculate_trend([m.net_flow for m in monthly_data])
    if trend > threshold:
        return "improving"
    if trend < -threshold:
        return "declining"
    return "stable"


def detect_seasonality(
    monthly_data: Sequence[MonthlyFinancialData],
    cv_threshold: float = DEFAULT_THRESHOLDS.seasonality_cv,
) -> Seasonality:
    """
    Flag a seasonal pattern when monthly income varies a lot.

    Requires at least 6 months. High coefficient of variation is taken as a
    seasonal signal; peaks are months with income above mean + 1 std dev.
    """
    if len(monthly_data) < MIN_MONTHS_FOR_SEASONALITY:
        return Seasonality(detected=False, pattern=None, peaks=[])

    revenues = [m.income for m in monthly_data]
    avg = mean(revenues)
    deviation = std_dev(revenues)

    detected = coefficient_of_variation(revenues) > cv_threshold
    peaks = [m.month for m in monthly_data if m.income > avg + deviation]

    return Seasonality(detected=detected, pattern="monthly" if detected else None, peaks=peaks)


def seasonality_factor(period_index: int, seasonality: Seasonality) -> float:
    """Sinusoidal multiplier over a 12-month cycle, +/-20% amplitude"""
    if not seasonality.detected:
        return 1.0
    cycle = 12
    amplitude = 0.2
    return 1 + amplitude * math.sin((2 * math.pi * period_index) / cycle)


def _range(predicted: float, margin: float, confidence: float, floor: bool) -> PredictionRange:
    if floor:
        return PredictionRange(
            predicted=max(0.0, predicted),
            lower=max(0.0, predicted - margin),
            upper=predicted + margin,
            confidence=confidence,
        )
    return PredictionRange(
        predicted=predicted,
        lower=predicted - margin,
        upper=predicted + margin,
        confidence=confidence,
    )


def predict_periods(
    monthly_data: Sequence[MonthlyFinancialData],
    days: int,
    seasonality: Seasonality,
    today: Optional[date] = None,
) -> List[ForecastPeriod]:
    """
    Project monthly periods covering the next `days` days.

    Baseline is the trailing 3-month average, shifted by the full-history
    regression slope and scaled by the seasonality factor. Confidence drops
    5 points per period (floor 50) and the interval widens 5% per period.
    """
    if not monthly_data:
        return []

    today = today or date.today()

    recent = monthly_data[-BASELINE_WINDOW:]
    avg_revenue = mean([m.income for m in recent])
    avg_expenses = mean([m.expense for m in recent])

    revenue_trend = calculate_trend([m.income for m in monthly_data])
    expense_trend = calculate_trend([m.expense for m in monthly_data])

    num_periods = math.ceil(days / DAYS_PER_PERIOD)
    periods = []

    for i in range(1, num_periods + 1):
        forecast_date = first_day_of_month_offset(today, i)
        factor = seasonality_factor(i, seasonality)

        revenue_predicted = (avg_revenue + revenue_trend * i) * factor
        expense_predicted = (avg_expenses + expense_trend * i) * factor
        # Not floored: negative cash flow drives alerting
        cash_flow_predicted = revenue_predicted - expense_predicted

        confidence = max(50, 95 - i * 5)
        spread = 0.2 + i * 0.05

        periods.append(
            ForecastPeriod(
                date=forecast_date.isoformat(),
                revenue=_range(revenue_predicted, revenue_predicted * spread, confidence, floor=True),
                expenses=_range(expense_predicted, expense_predicted * spread, confidence, floor=True),
                cash_flow=_range(
                    cash_flow_predicted, abs(cash_flow_predicted) * spread, confidence, floor=False
                ),
            )
        )

    return periods


def variance_score(values: Sequence[float]) -> float:
    """Accuracy penalty for volatile series, capped at 30"""
    if len(values) < 2:
        return 0.0
    return min(30.0, coefficient_of_variation(values) / 2)


def calculate_accuracy(monthly_data: Sequence[MonthlyFinancialData]) -> ForecastAccuracy:
    if len(monthly_data) < MIN_MONTHS_FOR_ACCURACY:
        return ForecastAccuracy(revenue=70.0, expenses=70.0, overall=70.0)

    # More history means more trust, up to 95%
    base_accuracy = min(95.0, 60.0 + len(monthly_data) * 3)

    revenue_penalty = variance_score([m.income for m in monthly_data])
    expense_penalty = variance_score([m.expense for m in monthly_data])

    return ForecastAccuracy(
        revenue=max(50.0, base_accuracy - revenue_penalty),
        expenses=max(50.0, base_accuracy - expense_penalty),
        overall=max(50.0, base_accuracy - (revenue_penalty + expense_penalty) / 2),
    )


def generate_forecast(
    accounts: Sequence[FinancialAccount],
    monthly_data: Sequence[MonthlyFinancialData],
    days: int = 90,
    thresholds: Optional[AnalysisThresholds] = None,
    today: Optional[date] = None,
) -> ForecastData:
    """
    Main entry point: build the full forecast for the next `days` days.

    `accounts` is accepted for interface parity with the other analysis
    functions; projections depend on the monthly history only.
    """
    thresholds = thresholds or DEFAULT_THRESHOLDS

    revenue_trend = calculate_trend([m.income for m in monthly_data])
    expense_trend = calculate_trend([m.expense for m in monthly_data])

    seasonality = detect_seasonality(monthly_data, thresholds.seasonality_cv)

    return ForecastData(
        periods=predict_periods(monthly_data, days, seasonality, today=today),
        accuracy=calculate_accuracy(monthly_data),
        trends=TrendSummary(
            revenue=classify_trend(revenue_trend, thresholds.trend_slope),
            expenses=classify_trend(expense_trend, thresholds.trend_slope),
            profitability=analyze_profitability(monthly_data, thresholds.profitability_slope),
        ),
        seasonality=seasonality,
    )
