"""Period-over-period comparison of income, expense, balance and categories"""

from datetime import date
from typing import Dict, Iterable, List, Sequence

from finance_analytics.domain.models import (
    EXPENSE,
    INCOME,
    CategoryComparison,
    ComparisonMetric,
    ComparisonMetrics,
    DateRange,
    PeriodComparison,
    PeriodDescriptor,
    PeriodTotals,
    TimelinePoint,
    Transaction,
)
from finance_analytics.utils.date_utils import (
    MONTH_ABBREVIATIONS,
    MONTH_NAMES,
    add_months,
    month_range,
    quarter_range,
    year_range,
)
from finance_analytics.utils.money import round_percentage, safe_ratio

STABLE_RELATIVE_CHANGE = 0.05
PERIOD_TYPES = ("month", "quarter", "year", "custom")


def period_totals(transactions: Iterable[Transaction]) -> PeriodTotals:
    """Sum income and expense; transfers are ignored"""
    income = 0
    expense = 0
    for txn in transactions:
        if txn.direction == INCOME:
            income += txn.amount
        elif txn.direction == EXPENSE:
            expense += abs(txn.amount)

    balance = income - expense
    savings_rate = balance / income * 100 if income > 0 else 0.0
    return PeriodTotals(income=income, expense=expense, balance=balance, savings_rate=savings_rate)


def metric_trend(current: float, previous: float) -> str:
    """Stable within 5% relative change; relative change is 0 when previous is 0"""
    relative = abs(safe_ratio(current - previous, previous))
    if relative < STABLE_RELATIVE_CHANGE:
        return "stable"
    return "up" if current > previous else "down"


def _sentiment(trend: str, higher_is_better: bool) -> str:
    if trend == "stable":
        return "neutral"
    improving = (trend == "up") == higher_is_better
    return "positive" if improving else "negative"


def build_metric(current: float, previous: float, higher_is_better: bool = False) -> ComparisonMetric:
    """
    Shared current-vs-previous metric.

    change_percentage is change / |previous| * 100, rounded to one decimal,
    and 0 by convention when previous is 0. higher_is_better only affects
    sentiment, never the trend direction.
    """
    change = current - previous
    change_percentage = safe_ratio(change, abs(previous)) * 100
    trend = metric_trend(current, previous)
    return ComparisonMetric(
        current=current,
        previous=previous,
        change=change,
        change_percentage=round_percentage(change_percentage),
        trend=trend,
        higher_is_better=higher_is_better,
        sentiment=_sentiment(trend, higher_is_better),
    )


def compare_totals(current: PeriodTotals, previous: PeriodTotals) -> ComparisonMetrics:
    return ComparisonMetrics(
        total_income=build_metric(current.income, previous.income, higher_is_better=True),
        total_expense=build_metric(current.expense, previous.expense),
        net_balance=build_metric(current.balance, previous.balance, higher_is_better=True),
        savings_rate=build_metric(current.savings_rate, previous.savings_rate, higher_is_better=True),
    )


def _expense_by_category(transactions: Iterable[Transaction]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for txn in transactions:
        if txn.direction == EXPENSE:
            totals[txn.category_name] = totals.get(txn.category_name, 0) + abs(txn.amount)
    return totals


def compare_categories(
    current_transactions: Iterable[Transaction],
    previous_transactions: Iterable[Transaction],
) -> List[CategoryComparison]:
    """
    Expense movement per category across both periods.

    A category missing from one period counts as 0 there. New categories
    report +100%. Sorted by absolute change, largest movers first.
    """
    current = _expense_by_category(current_transactions)
    previous = _expense_by_category(previous_transactions)

    result = []
    for category in set(current) | set(previous):
        now = current.get(category, 0)
        before = previous.get(category, 0)
        change = now - before
        if before != 0:
            change_percentage = change / before * 100
        else:
            change_percentage = 100.0 if now > 0 else 0.0

        result.append(
            CategoryComparison(
                category=category,
                current=now,
                previous=before,
                change=change,
                change_percentage=round_percentage(change_percentage),
                trend=metric_trend(now, before),
            )
        )

    # Name as tie-breaker keeps output deterministic
    result.sort(key=lambda c: (-abs(c.change), c.category))
    return result


def timeline_point(month: DateRange, transactions: Iterable[Transaction]) -> TimelinePoint:
    totals = period_totals(transactions)
    return TimelinePoint(
        date=month.start,
        label=f"{MONTH_ABBREVIATIONS[month.start.month - 1]} {month.start.year}",
        income=totals.income,
        expense=totals.expense,
        balance=totals.balance,
    )


def period_label(start: date, period_type: str) -> str:
    if period_type == "month":
        return f"{MONTH_NAMES[start.month - 1]} {start.year}"
    if period_type == "quarter":
        return f"Q{(start.month - 1) // 3 + 1} {start.year}"
    if period_type == "year":
        return f"{start.year}"
    return start.isoformat()


def describe_period(date_range: DateRange, period_type: str) -> PeriodDescriptor:
    return PeriodDescriptor(
        start=date_range.start,
        end=date_range.end,
        label=period_label(date_range.start, period_type),
    )


def calendar_periods(period_type: str, reference: date) -> tuple[DateRange, DateRange]:
    """
    (current, previous) calendar periods for month-over-month,
    quarter-over-quarter or year-over-year comparison.

    Raises:
        ValueError: period_type is not month, quarter or year
    """
    if period_type == "month":
        current = month_range(reference)
        previous = month_range(add_months(current.start, -1))
    elif period_type == "quarter":
        current = quarter_range(reference)
        previous = quarter_range(add_months(current.start, -3))
    elif period_type == "year":
        current = year_range(reference)
        previous = year_range(date(reference.year - 1, 1, 1))
    else:
        raise ValueError(f"Unsupported calendar period: {period_type}")
    return current, previous


def build_comparison(
    period_type: str,
    current_range: DateRange,
    previous_range: DateRange,
    current_transactions: Sequence[Transaction],
    previous_transactions: Sequence[Transaction],
    timeline: List[TimelinePoint],
) -> PeriodComparison:
    """Assemble a PeriodComparison from already-fetched transaction slices"""
    return PeriodComparison(
        period_type=period_type,
        current_period=describe_period(current_range, period_type),
        previous_period=describe_period(previous_range, period_type),
        metrics=compare_totals(period_totals(current_transactions), period_totals(previous_transactions)),
        by_category=compare_categories(current_transactions, previous_transactions),
        timeline=timeline,
    )
