"""Expense forecasting - per-category and aggregate next-month predictions"""

from typing import Dict, List, Mapping, Sequence

from finance_analytics.domain.models import (
    CategoryForecast,
    ForecastResult,
    MonthlyBucket,
    SeasonalityResult,
    TrendResult,
)
from finance_analytics.domain.seasonality import estimate_seasonality
from finance_analytics.domain.trends import detect_trend
from finance_analytics.utils.money import mean, round_half_up

RECENT_BUCKETS = 2
TREND_UP_RATIO = 1.15
TREND_DOWN_RATIO = 0.85
CATEGORY_ADJUSTMENT = {"up": 1.1, "down": 0.9, "stable": 1.0}
TOTAL_ADJUSTMENT = {"up": 1.05, "down": 0.95, "stable": 1.0}
TOTAL_WINDOW = 3

INSUFFICIENT_DATA_ADVICE = ["insufficient data"]


def category_confidence(months_observed: int) -> int:
    """50 plus 10 per observed month, capped at 95"""
    return min(95, 50 + 10 * months_observed)


def aggregate_confidence(bucket_count: int) -> int:
    """40 plus 8 per bucket of history, capped at 90"""
    return min(90, 40 + 8 * bucket_count)


def _category_trend(history: Sequence[MonthlyBucket], category: str) -> str:
    """
    Last 2 buckets against all earlier ones.

    Deliberately not the split-half rule of detect_trend: recency weighs more
    for category signal. With no earlier buckets the older average is 0.
    """
    recent = history[-RECENT_BUCKETS:]
    older = history[:-RECENT_BUCKETS]

    recent_avg = sum(b.categories.get(category, 0) for b in recent) / max(len(recent), 1)
    older_avg = sum(b.categories.get(category, 0) for b in older) / max(len(older), 1)

    if recent_avg > older_avg * TREND_UP_RATIO:
        return "up"
    if recent_avg < older_avg * TREND_DOWN_RATIO:
        return "down"
    return "stable"


def _reasoning(trend: str, months: int, confidence: int) -> str:
    trend_text = {"up": "Spending is rising", "down": "Spending is falling"}.get(trend, "Spending is stable")
    if months >= 6:
        history_text = "Long history"
    elif months >= 3:
        history_text = "Medium history"
    else:
        history_text = "Short history"
    return f"{trend_text}. {history_text} ({months} mo). Confidence {confidence}%"


def forecast_categories(
    history: Sequence[MonthlyBucket],
    category_ids: Mapping[str, str],
) -> List[CategoryForecast]:
    """
    Predict next-month spend for each category observed in history.

    historical_avg is the category total divided by the number of buckets
    that contain the category (not by all buckets).

    Example:
        Groceries 10000, 10000, 15000 -> avg 11666.67; recent 12500 > older
        10000 * 1.15 -> up -> predicted round(11666.67 * 1.1) = 12833
    """
    totals: Dict[str, int] = {}
    months: Dict[str, int] = {}
    for bucket in history:
        for category, amount in bucket.categories.items():
            totals[category] = totals.get(category, 0) + amount
            months[category] = months.get(category, 0) + 1

    forecasts = []
    for category, total in totals.items():
        average = total / months[category]
        trend = _category_trend(history, category)
        confidence = category_confidence(months[category])
        forecasts.append(
            CategoryForecast(
                category=category,
                category_id=category_ids.get(category, ""),
                predicted=round_half_up(average * CATEGORY_ADJUSTMENT[trend]),
                historical_avg=round_half_up(average),
                trend=trend,
                confidence=confidence,
                reasoning=_reasoning(trend, months[category], confidence),
            )
        )

    forecasts.sort(key=lambda f: f.predicted, reverse=True)
    return forecasts


def forecast_total(
    history: Sequence[MonthlyBucket],
    seasonality: SeasonalityResult,
    trend: TrendResult,
) -> int:
    """
    Aggregate next-month expense: last-3-bucket average, seasonality, then +/-5% by trend.

    Independent of forecast_categories; the two are not meant to reconcile.
    """
    recent = history[-TOTAL_WINDOW:]
    predicted = mean(b.expense for b in recent) * seasonality.factor * TOTAL_ADJUSTMENT[trend.direction]
    return round_half_up(predicted)


def build_forecast(
    history: Sequence[MonthlyBucket],
    category_ids: Mapping[str, str],
    current_month_index: int,
) -> ForecastResult:
    """
    Assemble the full forecast from monthly buckets.

    Advice is left empty for the caller to fill, except when there is no
    history at all.
    """
    if not history:
        return ForecastResult(
            total_predicted=0,
            total_income_predicted=0,
            categories=[],
            seasonality_factor=1.0,
            seasonality_label="insufficient data",
            trend_direction="stable",
            confidence=0,
            advice=list(INSUFFICIENT_DATA_ADVICE),
        )

    seasonality = estimate_seasonality(history, current_month_index)
    trend = detect_trend([b.expense for b in history])
    recent = history[-TOTAL_WINDOW:]

    return ForecastResult(
        total_predicted=forecast_total(history, seasonality, trend),
        total_income_predicted=round_half_up(mean(b.income for b in recent)),
        categories=forecast_categories(history, category_ids),
        seasonality_factor=seasonality.factor,
        seasonality_label=seasonality.label,
        trend_direction=trend.direction,
        confidence=aggregate_confidence(len(history)),
    )
