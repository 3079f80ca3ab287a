"""Rule-based smart alerts from forecast, ledger state and anomalies"""

from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Sequence

from icarus_finance.domain.models import (
    AnalysisThresholds,
    AnomalyDetection,
    FinancialAccount,
    ForecastData,
    SmartAlert,
)
from icarus_finance.utils.currency import format_brl
from icarus_finance.utils.date_utils import parse_iso_date

SEVERITY_ORDER = {"critical": 0, "high": 1, "medium": 2, "low": 3}


class _AlertBuilder:
    """Collects alerts with call-local sequential ids"""

    def __init__(self, now: datetime):
        self.now = now
        self.alerts: List[SmartAlert] = []

    def add(
        self,
        type: str,
        severity: str,
        title: str,
        message: str,
        category: str,
        date: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.alerts.append(
            SmartAlert(
                id=f"alert-{len(self.alerts) + 1}",
                type=type,
                severity=severity,
                title=title,
                message=message,
                category=category,
                date=date or self.now.isoformat(),
                metadata=metadata,
            )
        )


def generate_smart_alerts(
    accounts: Sequence[FinancialAccount],
    forecast: ForecastData,
    anomalies: Sequence[AnomalyDetection],
    thresholds: Optional[AnalysisThresholds] = None,
    now: Optional[datetime] = None,
) -> List[SmartAlert]:
    """
    Evaluate every alert rule and return the alerts ordered by severity.

    Rules are independent: any combination may fire. Only high-severity
    anomalies are turned into alerts.
    """
    thresholds = thresholds or AnalysisThresholds()
    now = now or datetime.now(timezone.utc)
    builder = _AlertBuilder(now)

    if forecast.trends.revenue == "declining":
        builder.add(
            "warning",
            "high",
            "Tendência de Queda na Receita",
            "Previsão indica declínio na receita nos próximos meses. Revise estratégia comercial.",
            "revenue",
        )

    if forecast.trends.expenses == "growing":
        builder.add(
            "warning",
            "medium",
            "Despesas em Crescimento",
            "Despesas apresentam tendência de crescimento. Considere medidas de controle de custos.",
            "expenses",
        )

    if forecast.trends.profitability == "declining":
        builder.add(
            "danger",
            "critical",
            "Rentabilidade em Queda",
            "Margem de lucro apresenta tendência de declínio. Ação imediata recomendada.",
            "cash_flow",
        )

    if forecast.periods and forecast.periods[0].cash_flow.predicted < 0:
        predicted = forecast.periods[0].cash_flow.predicted
        builder.add(
            "danger",
            "critical",
            "Previsão de Fluxo de Caixa Negativo",
            f"Próximo mês prevê fluxo negativo de {format_brl(abs(predicted))}",
            "cash_flow",
            metadata={"amount": predicted},
        )

    overdue = [a for a in accounts if a.type == "receivable" and a.status == "overdue"]
    if overdue:
        total_overdue = sum(a.final_amount for a in overdue)
        builder.add(
            "warning",
            "high" if total_overdue > thresholds.overdue_receivables_high_total else "medium",
            "Recebíveis Vencidos",
            f"{len(overdue)} contas a receber vencidas, total de {format_brl(total_overdue)}",
            "receivables",
            metadata={"count": len(overdue), "total": total_overdue},
        )

    today = now.date()
    window_end = today + timedelta(days=thresholds.upcoming_payables_days)
    upcoming = [
        a
        for a in accounts
        if a.type == "payable"
        and a.status == "pending"
        and today <= parse_iso_date(a.due_date) <= window_end
    ]
    if upcoming:
        total_upcoming = sum(a.final_amount for a in upcoming)
        builder.add(
            "info",
            "medium",
            "Contas a Pagar Próximas",
            f"{len(upcoming)} contas vencem nos próximos {thresholds.upcoming_payables_days} dias, "
            f"total de {format_brl(total_upcoming)}",
            "payables",
            metadata={"count": len(upcoming), "total": total_upcoming},
        )

    for anomaly in anomalies:
        if anomaly.severity == "high":
            builder.add(
                "warning",
                "high",
                "Anomalia Detectada",
                anomaly.description,
                "anomaly",
                date=anomaly.date,
                metadata=asdict(anomaly),
            )

    if forecast.accuracy.overall > thresholds.accuracy_alert:
        builder.add(
            "success",
            "low",
            "Alta Confiabilidade nas Previsões",
            f"Modelo de IA alcançou {forecast.accuracy.overall:.1f}% de precisão. Previsões confiáveis.",
            "cash_flow",
            metadata={"accuracy": forecast.accuracy.overall},
        )

    # sorted() is stable, rule order is kept within a severity
    return sorted(builder.alerts, key=lambda alert: SEVERITY_ORDER[alert.severity])
