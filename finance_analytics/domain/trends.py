"""Trend detection over ordered per-bucket aggregates"""

import math
from typing import Dict, List, Sequence

from finance_analytics.domain.models import (
    EXPENSE,
    CategoryTrend,
    MonthlyCategoryStats,
    OverallTrend,
    Transaction,
    TrendAlert,
    TrendResult,
    TrendsReport,
)
from finance_analytics.utils.date_utils import month_key
from finance_analytics.utils.money import mean, round_half_up, round_percentage

STABLE_THRESHOLD_PCT = 5.0
FAST_VELOCITY_PCT = 30.0
MODERATE_VELOCITY_PCT = 15.0
HIGH_SEVERITY_GROWTH_PCT = 50.0
VOLATILITY_CV_PCT = 50.0

_SEVERITY_ORDER = {"high": 0, "medium": 1, "low": 2}


def classify_velocity(change_percentage: float) -> str:
    magnitude = abs(change_percentage)
    if magnitude > FAST_VELOCITY_PCT:
        return "fast"
    if magnitude > MODERATE_VELOCITY_PCT:
        return "moderate"
    return "slow"


def detect_trend(values: Sequence[float], threshold: float = STABLE_THRESHOLD_PCT) -> TrendResult:
    """
    Classify a chronological series by comparing split-half averages.

    The series is split at n // 2; an odd middle point belongs to the
    second half. Fewer than 2 points yields a stable, zero-change result.

    Example:
        [100, 100, 130, 130] -> first avg 100, second avg 130 -> up, +30%, moderate
    """
    if len(values) < 2:
        return TrendResult(direction="stable", change_percentage=0.0, velocity="slow")

    midpoint = len(values) // 2
    first_avg = mean(values[:midpoint])
    second_avg = mean(values[midpoint:])

    change_percentage = (second_avg - first_avg) / first_avg * 100 if first_avg != 0 else 0.0

    if abs(change_percentage) < threshold:
        direction = "stable"
    else:
        direction = "up" if change_percentage > 0 else "down"

    return TrendResult(
        direction=direction,
        change_percentage=round_percentage(change_percentage),
        velocity=classify_velocity(change_percentage),
    )


def coefficient_of_variation(values: Sequence[float]) -> float:
    """Population standard deviation over mean, as a percentage (0 when undefined)"""
    if len(values) < 2:
        return 0.0
    avg = mean(values)
    if avg == 0:
        return 0.0
    variance = sum((v - avg) ** 2 for v in values) / len(values)
    return math.sqrt(variance) / avg * 100


def _monthly_stats(transactions: List[Transaction]) -> List[MonthlyCategoryStats]:
    amounts_by_month: Dict[str, List[int]] = {}
    for txn in transactions:
        amounts_by_month.setdefault(month_key(txn.occurred_at), []).append(txn.amount)

    stats = []
    for month in sorted(amounts_by_month):
        amounts = amounts_by_month[month]
        total = sum(amounts)
        stats.append(
            MonthlyCategoryStats(
                month=month,
                average=round_half_up(total / len(amounts)),
                count=len(amounts),
                total=total,
            )
        )
    return stats


def _category_trend(category: str, transactions: List[Transaction]) -> CategoryTrend:
    history = _monthly_stats(transactions)
    total = sum(t.amount for t in transactions)
    return CategoryTrend(
        category=category,
        average_transaction=round_half_up(total / len(transactions)),
        transaction_count=len(transactions),
        total_amount=total,
        trend=detect_trend([m.average for m in history]),
        history=history,
    )


def _alerts_for(trend: CategoryTrend) -> List[TrendAlert]:
    alerts = []
    if trend.trend.direction == "up" and trend.trend.velocity == "fast":
        alerts.append(
            TrendAlert(
                type="rapid_growth",
                category=trend.category,
                message=f'Spending in "{trend.category}" grew {abs(trend.trend.change_percentage):.1f}%',
                severity="high" if trend.trend.change_percentage > HIGH_SEVERITY_GROWTH_PCT else "medium",
            )
        )

    if len(trend.history) >= 3:
        cv = coefficient_of_variation([m.average for m in trend.history])
        if cv > VOLATILITY_CV_PCT:
            alerts.append(
                TrendAlert(
                    type="volatility",
                    category=trend.category,
                    message=f'Spending in "{trend.category}" swings strongly month to month',
                    severity="medium",
                )
            )
    return alerts


def analyze_spending_trends(transactions: List[Transaction]) -> TrendsReport:
    """
    Average-ticket trends per category and overall.

    Only expense transactions are considered. Trends are detected over the
    monthly average ticket, not the monthly total.
    """
    expenses = sorted((t for t in transactions if t.direction == EXPENSE), key=lambda t: t.occurred_at)
    if not expenses:
        return TrendsReport(
            categories=[],
            overall_trend=OverallTrend(
                average_spending_per_transaction=0,
                total_transactions=0,
                trend_direction="stable",
                change_percentage=0.0,
            ),
            alerts=[],
        )

    by_category: Dict[str, List[Transaction]] = {}
    for txn in expenses:
        by_category.setdefault(txn.category_name, []).append(txn)

    categories = [_category_trend(name, txns) for name, txns in by_category.items()]
    categories.sort(key=lambda c: c.total_amount, reverse=True)

    overall_history = _monthly_stats(expenses)
    overall = detect_trend([m.average for m in overall_history])
    total = sum(t.amount for t in expenses)

    alerts = [alert for trend in categories for alert in _alerts_for(trend)]
    alerts.sort(key=lambda a: _SEVERITY_ORDER[a.severity])

    return TrendsReport(
        categories=categories,
        overall_trend=OverallTrend(
            average_spending_per_transaction=round_half_up(total / len(expenses)),
            total_transactions=len(expenses),
            trend_direction=overall.direction,
            change_percentage=overall.change_percentage,
        ),
        alerts=alerts,
    )
