"""Domain models - pure Python dataclasses representing finance entities"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class MonthlyFinancialData:
    """Aggregated cash movement for one calendar month"""

    month: str  # "YYYY-MM"
    income: float
    expense: float
    net_flow: float
    receivables: float = 0.0
    payables: float = 0.0


@dataclass
class FinancialAccount:
    """Receivable or payable ledger row"""

    id: str
    type: str  # "receivable" or "payable"
    status: str  # pending | paid | overdue | cancelled | partial
    category: str
    final_amount: float
    due_date: str
    payment_date: Optional[str] = None
    amount: float = 0.0
    description: str = ""
    issue_date: Optional[str] = None


@dataclass
class AnalysisThresholds:
    """Fixed cut-offs used by trend, anomaly, alert and budget rules"""

    trend_slope: float = 1000.0
    profitability_slope: float = 500.0
    seasonality_cv: float = 30.0
    anomaly_z: float = 2.0
    anomaly_medium_z: float = 2.5
    anomaly_high_z: float = 3.0
    overdue_receivables_high_total: float = 50000.0
    upcoming_payables_days: int = 7
    budget_tolerance_percent: float = 10.0
    accuracy_alert: float = 85.0


@dataclass
class PredictionRange:
    predicted: float
    lower: float
    upper: float
    confidence: float


@dataclass
class ForecastPeriod:
    """Projection for one future month"""

    date: str
    revenue: PredictionRange
    expenses: PredictionRange
    cash_flow: PredictionRange


@dataclass
class TrendSummary:
    revenue: str  # growing | stable | declining
    expenses: str  # growing | stable | declining
    profitability: str  # improving | stable | declining


@dataclass
class Seasonality:
    detected: bool
    pattern: Optional[str]
    peaks: List[str] = field(default_factory=list)


@dataclass
class ForecastAccuracy:
    revenue: float
    expenses: float
    overall: float


@dataclass
class ForecastData:
    periods: List[ForecastPeriod]
    accuracy: ForecastAccuracy
    trends: TrendSummary
    seasonality: Seasonality


@dataclass
class AnomalyDetection:
    """Month whose revenue or expense deviates from the historical mean"""

    date: str
    type: str  # "revenue" or "expense"
    expected: float
    actual: float
    deviation: float  # percent
    severity: str  # low | medium | high
    description: str


@dataclass
class SmartAlert:
    id: str
    type: str  # info | warning | danger | success
    severity: str  # low | medium | high | critical
    title: str
    message: str
    category: str
    date: str
    metadata: Optional[Dict[str, Any]] = None


@dataclass
class BudgetItem:
    category: str
    amount: float


@dataclass
class BudgetCategory:
    category: str
    budgeted: float
    actual: float
    variance: float
    variance_percent: float
    status: str  # under | on_track | over


@dataclass
class BudgetSummary:
    total_budgeted: float
    total_actual: float
    total_variance: float
    variance_percent: float
    categories_on_track: int
    categories_over: int
    categories_under: int


@dataclass
class BudgetComparison:
    period_start: str
    period_end: str
    categories: List[BudgetCategory]
    summary: BudgetSummary
