"""Cash-flow forecast endpoints"""

import logging
from dataclasses import asdict
from typing import List, Sequence

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from icarus_finance.api.dependencies import get_request_id, get_thresholds
from icarus_finance.api.v1.schemas import ForecastRequest, ForecastResponse
from icarus_finance.domain.aggregation import aggregate_monthly
from icarus_finance.domain.alerts import generate_smart_alerts
from icarus_finance.domain.anomalies import detect_anomalies
from icarus_finance.domain.forecasting import generate_forecast
from icarus_finance.domain.models import AnalysisThresholds, FinancialAccount, MonthlyFinancialData
from icarus_finance.infrastructure.database.repositories import AccountRepository
from icarus_finance.infrastructure.database.session import get_db
from icarus_finance.infrastructure.observability.metrics import forecast_counter, record_alerts

router = APIRouter()


def build_report(
    accounts: Sequence[FinancialAccount],
    monthly_data: List[MonthlyFinancialData],
    days: int,
    thresholds: AnalysisThresholds,
) -> ForecastResponse:
    """Forecast, anomalies and alerts over one monthly history"""
    forecast = generate_forecast(accounts, monthly_data, days, thresholds)
    anomalies = detect_anomalies(accounts, monthly_data, thresholds)
    alerts = generate_smart_alerts(accounts, forecast, anomalies, thresholds)
    record_alerts(alert.severity for alert in alerts)

    return ForecastResponse(
        forecast=asdict(forecast),
        anomalies=[asdict(a) for a in anomalies],
        alerts=[asdict(a) for a in alerts],
    )


@router.post("/forecast", response_model=ForecastResponse)
def create_forecast(
    request_body: ForecastRequest,
    thresholds: AnalysisThresholds = Depends(get_thresholds),
):
    """Forecast from a client-supplied monthly history"""
    forecast_counter.labels(source="payload").inc()
    return build_report(
        [a.to_domain() for a in request_body.accounts],
        [m.to_domain() for m in request_body.monthly_data],
        request_body.days,
        thresholds,
    )


@router.get("/empresas/{empresa_id}/forecast", response_model=ForecastResponse)
def company_forecast(
    empresa_id: str,
    request: Request,
    days: int = Query(90, ge=1, le=730),
    months: int = Query(12, ge=1, le=60),
    db: Session = Depends(get_db),
    thresholds: AnalysisThresholds = Depends(get_thresholds),
):
    """
    Forecast from the company's stored receivables and payables.

    The last `months` months of accounts are aggregated into monthly
    history before running the same analysis as POST /forecast.
    """
    request_id = get_request_id(request)
    try:
        accounts = AccountRepository(db).list_for_company(empresa_id)
    except SQLAlchemyError as e:
        logging.error(f"Database error loading accounts: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Database unavailable")

    forecast_counter.labels(source="database").inc()
    monthly_data = aggregate_monthly(accounts, months)
    return build_report(accounts, monthly_data, days, thresholds)
