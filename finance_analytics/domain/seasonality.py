"""Seasonality estimation - month-of-year adjustment factor and spending patterns"""

from typing import Dict, List, Sequence, Set

from finance_analytics.domain.aggregation import aggregate_by_month
from finance_analytics.domain.models import (
    EXPENSE,
    CategoryAmount,
    MonthlyBucket,
    MonthPattern,
    SeasonalityReport,
    SeasonalityResult,
    SeasonPattern,
    Transaction,
    WeekdayPattern,
)
from finance_analytics.utils.date_utils import MONTH_NAMES, month_index
from finance_analytics.utils.money import mean, round_half_up, round_percentage, safe_ratio

MIN_BUCKETS = 3
HIGH_SEASON_FACTOR = 1.2
LOW_SEASON_FACTOR = 0.8
PATTERN_DEVIATION_PCT = 15.0

SEASONS = [
    ("winter", [12, 1, 2]),
    ("spring", [3, 4, 5]),
    ("summer", [6, 7, 8]),
    ("autumn", [9, 10, 11]),
]
WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def estimate_seasonality(buckets: Sequence[MonthlyBucket], current_month_index: int) -> SeasonalityResult:
    """
    Ratio of this calendar month's historical expense to the overall average.

    Args:
        buckets: Monthly buckets, any order
        current_month_index: Month of year, 0 (January) to 11 (December)

    Returns:
        factor 1.0 labelled "insufficient data" with fewer than 3 buckets or
        when no bucket falls on the current month; otherwise >1.2 is "high
        season", <0.8 "low season", anything else "normal"
    """
    if len(buckets) < MIN_BUCKETS:
        return SeasonalityResult(factor=1.0, label="insufficient data")

    global_avg = mean(b.expense for b in buckets)
    same_month = [b.expense for b in buckets if month_index(b.month) == current_month_index]
    if not same_month:
        return SeasonalityResult(factor=1.0, label="insufficient data")

    factor = mean(same_month) / global_avg if global_avg > 0 else 1.0

    if factor > HIGH_SEASON_FACTOR:
        label = "high season"
    elif factor < LOW_SEASON_FACTOR:
        label = "low season"
    else:
        label = "normal"
    return SeasonalityResult(factor=factor, label=label)


def _compared(value: float, average: float) -> float:
    return round_percentage(safe_ratio(value - average, average) * 100)


def _month_patterns(expenses: List[Transaction]) -> List[MonthPattern]:
    totals: Dict[int, int] = {}
    counts: Dict[int, int] = {}
    years: Dict[int, Set[int]] = {}
    categories: Dict[int, Dict[str, int]] = {}

    for txn in expenses:
        month = txn.occurred_at.month
        totals[month] = totals.get(month, 0) + txn.amount
        counts[month] = counts.get(month, 0) + 1
        years.setdefault(month, set()).add(txn.occurred_at.year)
        per_category = categories.setdefault(month, {})
        per_category[txn.category_name] = per_category.get(txn.category_name, 0) + txn.amount

    # Average per occurrence of the month, so two Januaries count once each
    averages = {month: totals[month] / len(years[month]) for month in totals}
    overall = mean(averages.values())

    patterns = []
    for month in sorted(averages):
        compared = _compared(averages[month], overall)
        if compared > PATTERN_DEVIATION_PCT:
            level = "high"
        elif compared < -PATTERN_DEVIATION_PCT:
            level = "low"
        else:
            level = "normal"
        top = sorted(categories[month].items(), key=lambda item: item[1], reverse=True)[:3]
        patterns.append(
            MonthPattern(
                month=month,
                month_name=MONTH_NAMES[month - 1],
                average_spending=round_half_up(averages[month]),
                transaction_count=counts[month],
                compared_to_average=compared,
                level=level,
                top_categories=[CategoryAmount(category=name, amount=amount) for name, amount in top],
            )
        )
    return patterns


def _season_patterns(expenses: List[Transaction]) -> List[SeasonPattern]:
    rows = []
    for season, months in SEASONS:
        amounts = [t.amount for t in expenses if t.occurred_at.month in months]
        rows.append((season, months, round_half_up(mean(amounts)), len(amounts)))

    # Empty seasons count as zero in the baseline
    overall = mean(row[2] for row in rows)
    return [
        SeasonPattern(
            season=season,
            months=months,
            average_spending=average,
            transaction_count=count,
            compared_to_average=_compared(average, overall),
        )
        for season, months, average, count in rows
    ]


def _weekday_patterns(expenses: List[Transaction]) -> List[WeekdayPattern]:
    amounts: Dict[int, List[int]] = {}
    for txn in expenses:
        amounts.setdefault(txn.occurred_at.weekday(), []).append(txn.amount)

    averages = {weekday: mean(values) for weekday, values in amounts.items()}
    overall = mean(averages.values())
    return [
        WeekdayPattern(
            weekday=weekday,
            weekday_name=WEEKDAY_NAMES[weekday],
            average_spending=round_half_up(averages[weekday]),
            transaction_count=len(amounts[weekday]),
            compared_to_average=_compared(averages[weekday], overall),
        )
        for weekday in sorted(averages)
    ]


def analyze_seasonality_patterns(transactions: List[Transaction], current_month_index: int) -> SeasonalityReport:
    """Spending patterns by month of year, season and weekday, plus the current-month factor"""
    expenses = [t for t in transactions if t.direction == EXPENSE]
    current = estimate_seasonality(aggregate_by_month(expenses), current_month_index)

    if not expenses:
        return SeasonalityReport(by_month=[], by_season=[], by_weekday=[], current=current)

    return SeasonalityReport(
        by_month=_month_patterns(expenses),
        by_season=_season_patterns(expenses),
        by_weekday=_weekday_patterns(expenses),
        current=current,
    )
