"""Analytics service - fetches transaction slices and runs the pure analytics engine"""

import asyncio
from datetime import date
from typing import Dict, List, Mapping, Optional, Protocol

from finance_analytics.config import settings
from finance_analytics.domain.aggregation import aggregate_by_month, category_totals
from finance_analytics.domain.comparison import build_comparison, calendar_periods, timeline_point
from finance_analytics.domain.forecasting import build_forecast
from finance_analytics.domain.health import (
    calculate_financial_health,
    compare_with_ideal_budget,
    detect_money_leaks,
    expense_variance,
)
from finance_analytics.domain.models import (
    EXPENSE,
    DateRange,
    ForecastResult,
    HealthInputs,
    HealthReport,
    PeriodComparison,
    SeasonalityReport,
    TimelinePoint,
    Transaction,
    TrendsReport,
)
from finance_analytics.domain.seasonality import analyze_seasonality_patterns
from finance_analytics.domain.summaries import summarize_comparison, summarize_forecast, summarize_health
from finance_analytics.domain.trends import analyze_spending_trends
from finance_analytics.infrastructure.clients.advice import AdviceClient
from finance_analytics.utils.date_utils import lookback_range, trailing_months
from finance_analytics.utils.money import mean, round_half_up, safe_ratio


class TransactionSource(Protocol):
    """Read interface over the transaction store"""

    async def fetch_transactions(
        self,
        user_id: str,
        date_range: DateRange,
        direction: Optional[str] = None,
    ) -> List[Transaction]: ...

    async def fetch_category_ids(self, user_id: str) -> Dict[str, str]: ...


class AnalyticsService:
    """
    Request-scoped entry points for forecasts, comparisons and health reports.

    Holds no state between calls beyond its injected collaborators.
    Cancelling the awaiting task aborts in-flight reads and the advice call;
    nothing is written, so there is nothing to roll back.
    """

    def __init__(self, source: TransactionSource, advice_client: AdviceClient):
        self.source = source
        self.advice_client = advice_client

    async def forecast(
        self,
        user_id: str,
        months: int | None = None,
        today: date | None = None,
        with_advice: bool = True,
    ) -> ForecastResult:
        """
        Next-month expense forecast from the last `months` months of history.

        Flow:
        1. Fetch transactions and expense category ids
        2. Aggregate into monthly buckets
        3. Build category and total forecasts
        4. Ask the advice collaborator (fallback on failure)
        """
        today = today or date.today()
        window = lookback_range(today, months or settings.forecast_history_months)

        transactions, category_ids = await asyncio.gather(
            self.source.fetch_transactions(user_id, window),
            self.source.fetch_category_ids(user_id),
        )

        history = aggregate_by_month(transactions)
        result = build_forecast(history, category_ids, today.month - 1)

        if history and with_advice:
            result.advice = await self.advice_client.generate_advice(summarize_forecast(result))
        return result

    async def build_timeline(self, user_id: str, reference: date, months: int | None = None) -> List[TimelinePoint]:
        """
        One point per calendar month ending with the reference month.

        Months are fetched independently and concurrently; gather keeps the
        output chronological.
        """
        ranges = trailing_months(reference, months or settings.timeline_months)
        slices = await asyncio.gather(*(self.source.fetch_transactions(user_id, month) for month in ranges))
        return [timeline_point(month, txns) for month, txns in zip(ranges, slices)]

    async def compare(
        self,
        user_id: str,
        current: DateRange,
        previous: DateRange,
        period_type: str = "custom",
        today: date | None = None,
        with_advice: bool = True,
    ) -> PeriodComparison:
        """Compare two date ranges; the timeline trails the month of `today`"""
        today = today or date.today()

        current_txns, previous_txns, timeline = await asyncio.gather(
            self.source.fetch_transactions(user_id, current),
            self.source.fetch_transactions(user_id, previous),
            self.build_timeline(user_id, today),
        )

        comparison = build_comparison(period_type, current, previous, current_txns, previous_txns, timeline)

        if with_advice and (current_txns or previous_txns):
            comparison.advice = await self.advice_client.generate_advice(summarize_comparison(comparison))
        return comparison

    async def compare_period(
        self,
        user_id: str,
        period_type: str,
        reference: date | None = None,
        with_advice: bool = True,
    ) -> PeriodComparison:
        """Month-over-month, quarter-over-quarter or year-over-year around reference"""
        reference = reference or date.today()
        current, previous = calendar_periods(period_type, reference)
        return await self.compare(user_id, current, previous, period_type, today=reference, with_advice=with_advice)

    async def score_health(
        self,
        inputs: HealthInputs,
        category_expenses: Optional[Mapping[str, int]] = None,
        benchmarks: Optional[Mapping[str, float]] = None,
        needs_pct: float | None = None,
        wants_pct: float | None = None,
        with_advice: bool = True,
    ) -> HealthReport:
        """
        Health score and money leaks from already-derived inputs.

        When the needs and wants shares of income are given, the report also
        carries a 50/30/20 comparison using the savings share from inputs.
        """
        score = calculate_financial_health(inputs)
        leaks = detect_money_leaks(category_expenses or {}, inputs.monthly_income, benchmarks)
        report = HealthReport(score=score, money_leaks=leaks)

        if needs_pct is not None and wants_pct is not None:
            savings_pct = safe_ratio(inputs.monthly_savings, inputs.monthly_income) * 100
            report.ideal_budget = compare_with_ideal_budget(needs_pct, wants_pct, savings_pct)

        if with_advice:
            report.advice = await self.advice_client.generate_advice(summarize_health(report, inputs))
        return report

    async def derive_health_inputs(
        self,
        user_id: str,
        emergency_fund: int,
        total_debt: int,
        budget_compliance_rate: float,
        today: date | None = None,
        months: int | None = None,
    ) -> tuple[HealthInputs, Dict[str, int]]:
        """
        Monthly averages over the lookback window plus per-category monthly averages.

        Averages divide by the number of months with activity, matching the
        aggregator's no-synthesized-months contract.
        """
        today = today or date.today()
        window = lookback_range(today, months or settings.health_lookback_months)
        transactions = await self.source.fetch_transactions(user_id, window)

        history = aggregate_by_month(transactions)
        bucket_count = max(len(history), 1)
        monthly_income = round_half_up(mean(b.income for b in history))
        monthly_expense = round_half_up(mean(b.expense for b in history))

        inputs = HealthInputs(
            monthly_income=monthly_income,
            monthly_expense=monthly_expense,
            monthly_savings=max(monthly_income - monthly_expense, 0),
            emergency_fund=emergency_fund,
            total_debt=total_debt,
            budget_compliance_rate=budget_compliance_rate,
            expense_variance=expense_variance([b.expense for b in history]),
        )
        monthly_categories = {
            name: round_half_up(total / bucket_count) for name, total in category_totals(transactions).items()
        }
        return inputs, monthly_categories

    async def assess_health(
        self,
        user_id: str,
        emergency_fund: int,
        total_debt: int,
        budget_compliance_rate: float,
        benchmarks: Optional[Mapping[str, float]] = None,
        today: date | None = None,
        with_advice: bool = True,
    ) -> tuple[HealthInputs, HealthReport]:
        inputs, monthly_categories = await self.derive_health_inputs(
            user_id, emergency_fund, total_debt, budget_compliance_rate, today=today
        )
        report = await self.score_health(inputs, monthly_categories, benchmarks, with_advice=with_advice)
        return inputs, report

    async def trends(self, user_id: str, months: int | None = None, today: date | None = None) -> TrendsReport:
        today = today or date.today()
        window = lookback_range(today, months or settings.trends_history_months)
        transactions = await self.source.fetch_transactions(user_id, window, EXPENSE)
        return analyze_spending_trends(transactions)

    async def seasonality(
        self,
        user_id: str,
        months: int | None = None,
        today: date | None = None,
    ) -> SeasonalityReport:
        today = today or date.today()
        window = lookback_range(today, months or settings.seasonality_history_months)
        transactions = await self.source.fetch_transactions(user_id, window, EXPENSE)
        return analyze_seasonality_patterns(transactions, today.month - 1)
