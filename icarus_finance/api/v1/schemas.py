"""Pydantic schemas for API request/response validation"""

from datetime import date
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from icarus_finance.domain.models import BudgetItem, FinancialAccount, MonthlyFinancialData


class FinancialAccountSchema(BaseModel):
    """Receivable or payable as sent by the client"""

    id: str
    type: Literal["receivable", "payable"]
    status: str
    category: str = ""
    final_amount: float
    due_date: date
    payment_date: Optional[date] = None
    amount: float = 0.0
    description: str = ""
    issue_date: Optional[date] = None

    def to_domain(self) -> FinancialAccount:
        return FinancialAccount(
            id=self.id,
            type=self.type,
            status=self.status,
            category=self.category,
            final_amount=self.final_amount,
            due_date=self.due_date.isoformat(),
            payment_date=self.payment_date.isoformat() if self.payment_date else None,
            amount=self.amount,
            description=self.description,
            issue_date=self.issue_date.isoformat() if self.issue_date else None,
        )


class MonthlyDataSchema(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$", description="Calendar month as YYYY-MM")
    income: float
    expense: float
    net_flow: float
    receivables: float = 0.0
    payables: float = 0.0

    def to_domain(self) -> MonthlyFinancialData:
        return MonthlyFinancialData(**self.model_dump())


class ForecastRequest(BaseModel):
    """Request body for POST /v1/forecast"""

    accounts: List[FinancialAccountSchema] = Field(default_factory=list)
    monthly_data: List[MonthlyDataSchema] = Field(default_factory=list)
    days: int = Field(90, ge=1, le=730, description="Forecast horizon in days")


class PredictionRangeSchema(BaseModel):
    predicted: float
    lower: float
    upper: float
    confidence: float


class ForecastPeriodSchema(BaseModel):
    date: str
    revenue: PredictionRangeSchema
    expenses: PredictionRangeSchema
    cash_flow: PredictionRangeSchema


class ForecastDataSchema(BaseModel):
    periods: List[ForecastPeriodSchema]
    accuracy: Dict[str, float]
    trends: Dict[str, str]
    seasonality: Dict[str, Any]


class AnomalySchema(BaseModel):
    date: str
    type: str
    expected: float
    actual: float
    deviation: float
    severity: str
    description: str


class SmartAlertSchema(BaseModel):
    id: str
    type: str
    severity: str
    title: str
    message: str
    category: str
    date: str
    metadata: Optional[Dict[str, Any]] = None


class ForecastResponse(BaseModel):
    """Response for the forecast endpoints"""

    forecast: ForecastDataSchema
    anomalies: List[AnomalySchema]
    alerts: List[SmartAlertSchema]


class BudgetItemSchema(BaseModel):
    category: str = Field(..., min_length=1)
    amount: float = Field(..., ge=0, description="Budgeted amount for the period")

    def to_domain(self) -> BudgetItem:
        return BudgetItem(category=self.category, amount=self.amount)


class BudgetCompareRequest(BaseModel):
    """Request body for POST /v1/budget/compare"""

    accounts: List[FinancialAccountSchema] = Field(default_factory=list)
    budget: List[BudgetItemSchema]
    start_date: date
    end_date: date


class BudgetCategorySchema(BaseModel):
    category: str
    budgeted: float
    actual: float
    variance: float
    variance_percent: float
    status: str


class BudgetSummarySchema(BaseModel):
    total_budgeted: float
    total_actual: float
    total_variance: float
    variance_percent: float
    categories_on_track: int
    categories_over: int
    categories_under: int


class BudgetCompareResponse(BaseModel):
    period_start: str
    period_end: str
    categories: List[BudgetCategorySchema]
    summary: BudgetSummarySchema


class FinanceAgentRequest(BaseModel):
    """Request body for POST /v1/finance-agent"""

    task: str = Field(..., min_length=1)
    context: Dict[str, Any] = Field(default_factory=dict)
    empresa_id: str = Field(..., min_length=1, description="Company identifier")
    user_id: str = Field(..., min_length=1)


class FinanceAgentResponse(BaseModel):
    action: str  # respond | need_info | parse_failure
    data: Dict[str, Any]
    confidence: float
    tools_used: List[str] = Field(default_factory=list)


class AssistantRequest(BaseModel):
    """Request body for POST /v1/assistant"""

    mensagem: str = ""
    usuario_id: Optional[str] = None
    contexto: Optional[Dict[str, Any]] = None


class AssistantResponse(BaseModel):
    success: bool = True
    resposta: str
    ferramentas_usadas: List[str]
    dados_estruturados: Dict[str, Any]
