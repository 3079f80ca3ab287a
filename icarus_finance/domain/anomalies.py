"""Z-score anomaly detection over recent months"""

from typing import List, Optional, Sequence

from icarus_finance.domain.models import AnalysisThresholds, AnomalyDetection, FinancialAccount, MonthlyFinancialData
from icarus_finance.domain.statistics import mean, std_dev, z_score

MIN_MONTHS = 3
RECENT_WINDOW = 3

SERIES_LABELS = {"revenue": "Receita", "expense": "Despesas"}


def classify_severity(z: float, thresholds: AnalysisThresholds) -> str:
    if z > thresholds.anomaly_high_z:
        return "high"
    if z > thresholds.anomaly_medium_z:
        return "medium"
    return "low"


def _describe(kind: str, deviation: float) -> str:
    direction = "acima" if deviation > 0 else "abaixo"
    return f"{SERIES_LABELS[kind]} {abs(deviation):.1f}% {direction} da média"


def detect_anomalies(
    accounts: Sequence[FinancialAccount],
    monthly_data: Sequence[MonthlyFinancialData],
    thresholds: Optional[AnalysisThresholds] = None,
) -> List[AnomalyDetection]:
    """
    Flag recent months whose income or expense sits more than 2 standard
    deviations away from the full-history mean.

    Statistics use the whole history; only the last 3 months are checked.
    Series with zero spread are skipped.
    """
    thresholds = thresholds or AnalysisThresholds()
    anomalies: List[AnomalyDetection] = []

    if len(monthly_data) < MIN_MONTHS:
        return anomalies

    series = {
        "revenue": [m.income for m in monthly_data],
        "expense": [m.expense for m in monthly_data],
    }
    stats = {kind: (mean(values), std_dev(values)) for kind, values in series.items()}

    for month in monthly_data[-RECENT_WINDOW:]:
        for kind, actual in (("revenue", month.income), ("expense", month.expense)):
            avg, deviation = stats[kind]
            if deviation <= 0:
                continue

            z = abs(z_score(actual, avg, deviation))
            if z <= thresholds.anomaly_z:
                continue

            deviation_pct = (actual - avg) / avg * 100 if avg != 0 else 0.0
            anomalies.append(
                AnomalyDetection(
                    date=month.month,
                    type=kind,
                    expected=avg,
                    actual=actual,
                    deviation=deviation_pct,
                    severity=classify_severity(z, thresholds),
                    description=_describe(kind, deviation_pct),
                )
            )

    return anomalies
