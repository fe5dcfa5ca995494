"""Financial health scoring and money-leak detection"""

import math
from typing import Dict, List, Mapping, Optional, Sequence

from finance_analytics.domain.models import (
    BudgetSplit,
    FinancialHealthScore,
    HealthBreakdown,
    HealthInputs,
    IdealBudget,
    MoneyLeak,
)
from finance_analytics.utils.money import mean, round_half_up, safe_ratio

WEIGHTS = {
    "savings_rate": 0.20,
    "expense_stability": 0.15,
    "budget_adherence": 0.20,
    "debt_management": 0.25,
    "emergency_fund": 0.20,
}

# Max healthy share of monthly income per category, in percent.
# Keys are lower-case; categories without an entry are never flagged.
DEFAULT_BENCHMARKS: Dict[str, float] = {
    "housing": 30.0,
    "rent": 30.0,
    "groceries": 15.0,
    "restaurants": 7.0,
    "cafes": 5.0,
    "transport": 10.0,
    "utilities": 8.0,
    "entertainment": 5.0,
    "shopping": 10.0,
    "subscriptions": 3.0,
    "clothing": 5.0,
}

IDEAL_NEEDS_PCT = 50.0
IDEAL_WANTS_PCT = 30.0
IDEAL_SAVINGS_PCT = 20.0


def score_savings_rate(monthly_savings: int, monthly_income: int) -> int:
    rate = safe_ratio(monthly_savings, monthly_income) * 100
    if rate >= 30:
        return 100
    if rate >= 20:
        return 80
    if rate >= 10:
        return 60
    if rate >= 5:
        return 40
    return 20


def score_expense_stability(expense_variance: float) -> float:
    """Lower variance is better; clamped to 0-100"""
    return max(0.0, min(100.0, 100 - expense_variance * 100))


def score_budget_adherence(budget_compliance_rate: float) -> float:
    return max(0.0, min(100.0, budget_compliance_rate))


def score_debt(total_debt: int, monthly_income: int) -> int:
    """Breakpoints on debt as a multiple of monthly income: 1, 3, 5, 10"""
    ratio = safe_ratio(total_debt, monthly_income)
    if ratio > 10:
        return 20
    if ratio > 5:
        return 40
    if ratio > 3:
        return 60
    if ratio > 1:
        return 80
    return 100


def score_emergency_fund(emergency_fund: int, monthly_expense: int) -> int:
    """Breakpoints on months of runway: 1, 3, 6"""
    months = safe_ratio(emergency_fund, monthly_expense)
    if months >= 6:
        return 100
    if months >= 3:
        return 70
    if months >= 1:
        return 40
    return 20


def grade_for(score: int) -> str:
    if score >= 85:
        return "Excellent"
    if score >= 70:
        return "Good"
    if score >= 50:
        return "Fair"
    if score >= 30:
        return "Poor"
    return "Critical"


def calculate_financial_health(inputs: HealthInputs) -> FinancialHealthScore:
    """
    Weighted 0-100 health score.

    Weights:
    - 20%: Savings rate (savings / income)
    - 15%: Expense stability (100 - variance * 100)
    - 20%: Budget adherence (compliance rate as given)
    - 25%: Debt management (debt / monthly income)
    - 20%: Emergency fund (months of expenses covered)

    Every ratio substitutes 0 for a zero denominator, so all-zero inputs
    still produce a score.
    """
    sub_scores = {
        "savings_rate": score_savings_rate(inputs.monthly_savings, inputs.monthly_income),
        "expense_stability": score_expense_stability(inputs.expense_variance),
        "budget_adherence": score_budget_adherence(inputs.budget_compliance_rate),
        "debt_management": score_debt(inputs.total_debt, inputs.monthly_income),
        "emergency_fund": score_emergency_fund(inputs.emergency_fund, inputs.monthly_expense),
    }

    overall = round_half_up(sum(WEIGHTS[name] * value for name, value in sub_scores.items()))

    return FinancialHealthScore(
        overall_score=overall,
        breakdown=HealthBreakdown(**{name: round_half_up(value) for name, value in sub_scores.items()}),
        grade=grade_for(overall),
    )


def expense_variance(monthly_expenses: Sequence[int]) -> float:
    """Population coefficient of variation as a fraction; 0 for < 2 values or zero mean"""
    if len(monthly_expenses) < 2:
        return 0.0
    avg = mean(monthly_expenses)
    if avg == 0:
        return 0.0
    variance = sum((value - avg) ** 2 for value in monthly_expenses) / len(monthly_expenses)
    return math.sqrt(variance) / avg


def _leak_recommendation(category: str, actual: float, benchmark: float) -> str:
    return (
        f"{actual:.1f}% of income goes to {category}, {actual - benchmark:.1f} points above "
        f"the recommended {benchmark:.0f}%. Consider trimming this category."
    )


def detect_money_leaks(
    category_totals: Mapping[str, int],
    monthly_income: int,
    benchmarks: Optional[Mapping[str, float]] = None,
) -> List[MoneyLeak]:
    """
    Flag categories whose share of income exceeds their benchmark.

    Benchmark lookup is case-insensitive. A missing benchmark means no
    opinion, so the category is never flagged. With zero income nothing is
    flagged.

    Returns:
        Leaks sorted by potential_savings, largest first
    """
    if benchmarks is None:
        benchmarks = DEFAULT_BENCHMARKS
    lookup = {name.lower(): value for name, value in benchmarks.items()}

    leaks = []
    for category, amount in category_totals.items():
        benchmark = lookup.get(category.lower())
        if benchmark is None:
            continue

        percentage = safe_ratio(amount, monthly_income) * 100
        if monthly_income <= 0 or percentage <= benchmark:
            continue

        leaks.append(
            MoneyLeak(
                category=category,
                amount=amount,
                percentage_of_income=percentage,
                potential_savings=round_half_up(amount - monthly_income * benchmark / 100),
                recommendation=_leak_recommendation(category, percentage, benchmark),
            )
        )

    leaks.sort(key=lambda leak: leak.potential_savings, reverse=True)
    return leaks


def compare_with_ideal_budget(needs: float, wants: float, savings: float) -> IdealBudget:
    """Compare the user's needs/wants/savings split (percent of income) with 50/30/20"""
    recommendations = []

    if needs > IDEAL_NEEDS_PCT:
        recommendations.append(
            f"Needs take {needs:.0f}% of income (ideal {IDEAL_NEEDS_PCT:.0f}%). "
            "Review housing and utility costs."
        )
    if wants > IDEAL_WANTS_PCT:
        recommendations.append(
            f"Wants take {wants:.0f}% of income (ideal {IDEAL_WANTS_PCT:.0f}%). "
            "Entertainment, subscriptions and dining out have room to shrink."
        )
    if savings < IDEAL_SAVINGS_PCT:
        recommendations.append(
            f"Savings are only {savings:.0f}% of income (ideal {IDEAL_SAVINGS_PCT:.0f}%). "
            "Raise the savings rate for stability."
        )
    if not recommendations:
        recommendations.append("Your budget is close to the 50/30/20 ideal.")

    return IdealBudget(
        needs=IDEAL_NEEDS_PCT,
        wants=IDEAL_WANTS_PCT,
        savings=IDEAL_SAVINGS_PCT,
        user_actual=BudgetSplit(needs=needs, wants=wants, savings=savings),
        recommendations=recommendations,
    )
