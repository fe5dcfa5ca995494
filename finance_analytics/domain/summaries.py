"""Structured summaries handed to the advice collaborator

Money leaves the engine here as whole major-unit strings; nothing in this
module feeds back into calculations.
"""

from typing import Any, Dict

from finance_analytics.domain.models import ForecastResult, HealthInputs, HealthReport, PeriodComparison
from finance_analytics.utils.money import format_major_units, safe_ratio

TOP_ITEMS = 5


def summarize_forecast(forecast: ForecastResult) -> Dict[str, Any]:
    return {
        "kind": "expense_forecast",
        "predicted_expense": format_major_units(forecast.total_predicted),
        "predicted_income": format_major_units(forecast.total_income_predicted),
        "trend": forecast.trend_direction,
        "seasonality": forecast.seasonality_label,
        "confidence_pct": forecast.confidence,
        "top_categories": [
            {
                "category": c.category,
                "predicted": format_major_units(c.predicted),
                "trend": c.trend,
            }
            for c in forecast.categories[:TOP_ITEMS]
        ],
    }


def summarize_comparison(comparison: PeriodComparison) -> Dict[str, Any]:
    metrics = comparison.metrics

    def money(metric):
        return {
            "current": format_major_units(int(metric.current)),
            "previous": format_major_units(int(metric.previous)),
            "change_pct": metric.change_percentage,
            "trend": metric.trend,
        }

    return {
        "kind": "period_comparison",
        "current_period": comparison.current_period.label,
        "previous_period": comparison.previous_period.label,
        "income": money(metrics.total_income),
        "expense": money(metrics.total_expense),
        "net_balance": money(metrics.net_balance),
        "savings_rate_pct": {
            "current": round(metrics.savings_rate.current, 1),
            "previous": round(metrics.savings_rate.previous, 1),
        },
        "largest_category_moves": [
            {
                "category": c.category,
                "change": format_major_units(c.change),
                "change_pct": c.change_percentage,
            }
            for c in comparison.by_category[:TOP_ITEMS]
        ],
    }


def summarize_health(report: HealthReport, inputs: HealthInputs) -> Dict[str, Any]:
    score = report.score
    return {
        "kind": "financial_health",
        "overall_score": score.overall_score,
        "grade": score.grade,
        "breakdown": {
            "savings_rate": score.breakdown.savings_rate,
            "expense_stability": score.breakdown.expense_stability,
            "budget_adherence": score.breakdown.budget_adherence,
            "debt_management": score.breakdown.debt_management,
            "emergency_fund": score.breakdown.emergency_fund,
        },
        "monthly_income": format_major_units(inputs.monthly_income),
        "monthly_expense": format_major_units(inputs.monthly_expense),
        "savings_rate_pct": round(safe_ratio(inputs.monthly_savings, inputs.monthly_income) * 100, 1),
        "money_leaks": [
            {
                "category": leak.category,
                "amount": format_major_units(leak.amount),
                "share_of_income_pct": round(leak.percentage_of_income, 1),
                "potential_savings": format_major_units(leak.potential_savings),
            }
            for leak in report.money_leaks[:TOP_ITEMS]
        ],
    }
