"""Domain models - pure Python dataclasses representing analytics inputs and results"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

INCOME = "income"
EXPENSE = "expense"
TRANSFER = "transfer"
DIRECTIONS = (INCOME, EXPENSE, TRANSFER)

UNCATEGORIZED = "Uncategorized"


@dataclass(frozen=True)
class Transaction:
    """Read-only money movement from the transaction store"""

    id: str
    occurred_at: date
    amount: int  # minor units, never negative; sign carried by direction
    direction: str  # "income", "expense" or "transfer"
    category_id: Optional[str]
    category_name: str


@dataclass(frozen=True)
class DateRange:
    """Inclusive calendar date range"""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass
class MonthlyBucket:
    """Per-month aggregate; also used for quarter ("YYYY-Qn") and year ("YYYY") keys"""

    month: str
    income: int = 0
    expense: int = 0
    categories: Dict[str, int] = field(default_factory=dict)


@dataclass
class TrendResult:
    """Direction and velocity of a series"""

    direction: str  # "up", "down" or "stable"
    change_percentage: float
    velocity: str  # "fast", "moderate" or "slow"


@dataclass
class SeasonalityResult:
    """Multiplicative adjustment for the current calendar month"""

    factor: float
    label: str  # "high season", "low season", "normal" or "insufficient data"


@dataclass
class CategoryForecast:
    """Next-period prediction for one expense category"""

    category: str
    category_id: str
    predicted: int
    historical_avg: int
    trend: str
    confidence: int
    reasoning: str


@dataclass
class ForecastResult:
    """Aggregate and per-category expense forecast"""

    total_predicted: int
    total_income_predicted: int
    categories: List[CategoryForecast]
    seasonality_factor: float
    seasonality_label: str
    trend_direction: str
    confidence: int
    advice: List[str] = field(default_factory=list)


@dataclass
class PeriodTotals:
    """Income/expense totals for one period"""

    income: int
    expense: int
    balance: int
    savings_rate: float


@dataclass
class ComparisonMetric:
    """Current vs previous value of one metric"""

    current: float
    previous: float
    change: float
    change_percentage: float
    trend: str
    higher_is_better: bool = False
    sentiment: str = "neutral"  # "positive", "negative" or "neutral"


@dataclass
class CategoryComparison:
    """Expense movement of one category between two periods"""

    category: str
    current: int
    previous: int
    change: int
    change_percentage: float
    trend: str


@dataclass
class TimelinePoint:
    """One calendar month of the trailing timeline"""

    date: date
    label: str
    income: int
    expense: int
    balance: int


@dataclass
class PeriodDescriptor:
    """Bounds and display label of a compared period"""

    start: date
    end: date
    label: str

    @property
    def date_range(self) -> DateRange:
        return DateRange(self.start, self.end)


@dataclass
class ComparisonMetrics:
    total_income: ComparisonMetric
    total_expense: ComparisonMetric
    net_balance: ComparisonMetric
    savings_rate: ComparisonMetric


@dataclass
class PeriodComparison:
    """Period-over-period comparison result"""

    period_type: str  # "month", "quarter", "year" or "custom"
    current_period: PeriodDescriptor
    previous_period: PeriodDescriptor
    metrics: ComparisonMetrics
    by_category: List[CategoryComparison]
    timeline: List[TimelinePoint]
    advice: List[str] = field(default_factory=list)


@dataclass
class HealthInputs:
    """Snapshot of aggregate figures the health score is computed from"""

    monthly_income: int
    monthly_expense: int
    monthly_savings: int
    emergency_fund: int
    total_debt: int
    budget_compliance_rate: float  # 0-100
    expense_variance: float  # coefficient of variation, as a fraction


@dataclass
class HealthBreakdown:
    savings_rate: int
    expense_stability: int
    budget_adherence: int
    debt_management: int
    emergency_fund: int


@dataclass
class FinancialHealthScore:
    """Weighted 0-100 score with letter grade"""

    overall_score: int
    breakdown: HealthBreakdown
    grade: str  # "Excellent", "Good", "Fair", "Poor" or "Critical"


@dataclass
class MoneyLeak:
    """Category whose share of income exceeds its benchmark"""

    category: str
    amount: int
    percentage_of_income: float
    potential_savings: int
    recommendation: str


@dataclass
class BudgetSplit:
    needs: float
    wants: float
    savings: float


@dataclass
class IdealBudget:
    """50/30/20 rule compared with the user's actual split"""

    needs: float
    wants: float
    savings: float
    user_actual: BudgetSplit
    recommendations: List[str]


@dataclass
class HealthReport:
    score: FinancialHealthScore
    money_leaks: List[MoneyLeak]
    ideal_budget: Optional[IdealBudget] = None
    advice: List[str] = field(default_factory=list)


@dataclass
class MonthlyCategoryStats:
    month: str
    average: int
    count: int
    total: int


@dataclass
class CategoryTrend:
    """Average-ticket trend for one category"""

    category: str
    average_transaction: int
    transaction_count: int
    total_amount: int
    trend: TrendResult
    history: List[MonthlyCategoryStats]


@dataclass
class OverallTrend:
    average_spending_per_transaction: int
    total_transactions: int
    trend_direction: str
    change_percentage: float


@dataclass
class TrendAlert:
    type: str  # "rapid_growth" or "volatility"
    category: str
    message: str
    severity: str  # "high", "medium" or "low"


@dataclass
class TrendsReport:
    categories: List[CategoryTrend]
    overall_trend: OverallTrend
    alerts: List[TrendAlert]


@dataclass
class CategoryAmount:
    category: str
    amount: int


@dataclass
class MonthPattern:
    month: int  # 1-12
    month_name: str
    average_spending: int
    transaction_count: int
    compared_to_average: float
    level: str  # "high", "normal" or "low"
    top_categories: List[CategoryAmount]


@dataclass
class SeasonPattern:
    season: str
    months: List[int]
    average_spending: int
    transaction_count: int
    compared_to_average: float


@dataclass
class WeekdayPattern:
    weekday: int  # 0=Monday
    weekday_name: str
    average_spending: int
    transaction_count: int
    compared_to_average: float


@dataclass
class SeasonalityReport:
    by_month: List[MonthPattern]
    by_season: List[SeasonPattern]
    by_weekday: List[WeekdayPattern]
    current: SeasonalityResult
