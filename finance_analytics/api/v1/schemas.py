"""Pydantic schemas for API request/response validation

Response models read straight from the domain dataclasses (from_attributes).
Money fields are integer minor units throughout.
"""

import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ResponseModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Forecast


class CategoryForecastSchema(ResponseModel):
    category: str
    category_id: str
    predicted: int
    historical_avg: int
    trend: str
    confidence: int
    reasoning: str


class ForecastResponse(ResponseModel):
    """Response for GET /v1/forecast"""

    total_predicted: int
    total_income_predicted: int
    categories: List[CategoryForecastSchema]
    seasonality_factor: float
    seasonality_label: str
    trend_direction: str
    confidence: int
    advice: List[str]


# Comparison


class DateRangeSchema(BaseModel):
    """Inclusive date range"""

    start: datetime.date
    end: datetime.date

    @model_validator(mode="after")
    def check_order(self):
        if self.end < self.start:
            raise ValueError("end must not be before start")
        return self


class CustomComparisonRequest(BaseModel):
    """Request body for POST /v1/comparison/custom"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    current: DateRangeSchema
    previous: DateRangeSchema


class PeriodSchema(ResponseModel):
    start: datetime.date
    end: datetime.date
    label: str


class ComparisonMetricSchema(ResponseModel):
    current: float
    previous: float
    change: float
    change_percentage: float
    trend: str
    higher_is_better: bool
    sentiment: str


class ComparisonMetricsSchema(ResponseModel):
    total_income: ComparisonMetricSchema
    total_expense: ComparisonMetricSchema
    net_balance: ComparisonMetricSchema
    savings_rate: ComparisonMetricSchema


class CategoryComparisonSchema(ResponseModel):
    category: str
    current: int
    previous: int
    change: int
    change_percentage: float
    trend: str


class TimelinePointSchema(ResponseModel):
    date: datetime.date
    label: str
    income: int
    expense: int
    balance: int


class ComparisonResponse(ResponseModel):
    """Response for GET /v1/comparison and POST /v1/comparison/custom"""

    period_type: str
    current_period: PeriodSchema
    previous_period: PeriodSchema
    metrics: ComparisonMetricsSchema
    by_category: List[CategoryComparisonSchema]
    timeline: List[TimelinePointSchema]
    advice: List[str]


# Financial health


class HealthScoreRequest(BaseModel):
    """Request body for POST /v1/health/score"""

    monthly_income: int = Field(..., ge=0, description="Average monthly income, minor units")
    monthly_expense: int = Field(..., ge=0, description="Average monthly expense, minor units")
    monthly_savings: int = Field(..., description="Average monthly savings, minor units")
    emergency_fund: int = Field(0, ge=0)
    total_debt: int = Field(0, ge=0)
    budget_compliance_rate: float = Field(..., ge=0, le=100)
    expense_variance: float = Field(0.0, ge=0, description="Coefficient of variation, as a fraction")
    category_expenses: Dict[str, int] = Field(default_factory=dict, description="Monthly expense per category")
    benchmarks: Optional[Dict[str, float]] = Field(None, description="Category -> max percent of income")
    needs_pct: Optional[float] = Field(None, ge=0, le=100)
    wants_pct: Optional[float] = Field(None, ge=0, le=100)


class HealthAssessRequest(BaseModel):
    """Request body for POST /v1/health/assess"""

    user_id: str = Field(..., min_length=1, description="User identifier")
    emergency_fund: int = Field(0, ge=0)
    total_debt: int = Field(0, ge=0)
    budget_compliance_rate: float = Field(..., ge=0, le=100)
    benchmarks: Optional[Dict[str, float]] = None


class HealthBreakdownSchema(ResponseModel):
    savings_rate: int
    expense_stability: int
    budget_adherence: int
    debt_management: int
    emergency_fund: int


class HealthScoreSchema(ResponseModel):
    overall_score: int
    breakdown: HealthBreakdownSchema
    grade: str


class MoneyLeakSchema(ResponseModel):
    category: str
    amount: int
    percentage_of_income: float
    potential_savings: int
    recommendation: str


class BudgetSplitSchema(ResponseModel):
    needs: float
    wants: float
    savings: float


class IdealBudgetSchema(ResponseModel):
    needs: float
    wants: float
    savings: float
    user_actual: BudgetSplitSchema
    recommendations: List[str]


class HealthReportResponse(ResponseModel):
    """Response for POST /v1/health/score"""

    score: HealthScoreSchema
    money_leaks: List[MoneyLeakSchema]
    ideal_budget: Optional[IdealBudgetSchema] = None
    advice: List[str]


class HealthInputsSchema(ResponseModel):
    monthly_income: int
    monthly_expense: int
    monthly_savings: int
    emergency_fund: int
    total_debt: int
    budget_compliance_rate: float
    expense_variance: float


class HealthAssessResponse(HealthReportResponse):
    """Response for POST /v1/health/assess; includes the derived inputs"""

    inputs: HealthInputsSchema


# Trends and seasonality


class TrendResultSchema(ResponseModel):
    direction: str
    change_percentage: float
    velocity: str


class MonthlyCategoryStatsSchema(ResponseModel):
    month: str
    average: int
    count: int
    total: int


class CategoryTrendSchema(ResponseModel):
    category: str
    average_transaction: int
    transaction_count: int
    total_amount: int
    trend: TrendResultSchema
    history: List[MonthlyCategoryStatsSchema]


class OverallTrendSchema(ResponseModel):
    average_spending_per_transaction: int
    total_transactions: int
    trend_direction: str
    change_percentage: float


class TrendAlertSchema(ResponseModel):
    type: str
    category: str
    message: str
    severity: str


class TrendsResponse(ResponseModel):
    """Response for GET /v1/trends"""

    categories: List[CategoryTrendSchema]
    overall_trend: OverallTrendSchema
    alerts: List[TrendAlertSchema]


class CategoryAmountSchema(ResponseModel):
    category: str
    amount: int


class MonthPatternSchema(ResponseModel):
    month: int
    month_name: str
    average_spending: int
    transaction_count: int
    compared_to_average: float
    level: str
    top_categories: List[CategoryAmountSchema]


class SeasonPatternSchema(ResponseModel):
    season: str
    months: List[int]
    average_spending: int
    transaction_count: int
    compared_to_average: float


class WeekdayPatternSchema(ResponseModel):
    weekday: int
    weekday_name: str
    average_spending: int
    transaction_count: int
    compared_to_average: float


class SeasonalityResultSchema(ResponseModel):
    factor: float
    label: str


class SeasonalityResponse(ResponseModel):
    """Response for GET /v1/seasonality"""

    by_month: List[MonthPatternSchema]
    by_season: List[SeasonPatternSchema]
    by_weekday: List[WeekdayPatternSchema]
    current: SeasonalityResultSchema
