"""POST /v1/budget/compare - budget vs. actual spending"""

from dataclasses import asdict

from fastapi import APIRouter, Depends, HTTPException

from icarus_finance.api.dependencies import get_thresholds
from icarus_finance.api.v1.schemas import BudgetCompareRequest, BudgetCompareResponse
from icarus_finance.domain.budget import compare_budget
from icarus_finance.domain.models import AnalysisThresholds

router = APIRouter()


@router.post("/budget/compare", response_model=BudgetCompareResponse)
def budget_compare(
    request_body: BudgetCompareRequest,
    thresholds: AnalysisThresholds = Depends(get_thresholds),
):
    if request_body.end_date < request_body.start_date:
        raise HTTPException(status_code=422, detail="end_date must not be before start_date")

    comparison = compare_budget(
        [a.to_domain() for a in request_body.accounts],
        [item.to_domain() for item in request_body.budget],
        request_body.start_date.isoformat(),
        request_body.end_date.isoformat(),
        thresholds,
    )
    return asdict(comparison)
