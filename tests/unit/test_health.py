"""Unit tests for financial health scoring, money leaks and the 50/30/20 comparison"""

import pytest
from finance_analytics.domain.health import (
    WEIGHTS,
    calculate_financial_health,
    compare_with_ideal_budget,
    detect_money_leaks,
    expense_variance,
    grade_for,
    score_budget_adherence,
    score_debt,
    score_emergency_fund,
    score_expense_stability,
    score_savings_rate,
)
from finance_analytics.domain.models import HealthInputs


def _inputs(**overrides) -> HealthInputs:
    values = dict(
        monthly_income=500000,
        monthly_expense=300000,
        monthly_savings=200000,
        emergency_fund=1800000,
        total_debt=0,
        budget_compliance_rate=80.0,
        expense_variance=0.2,
    )
    values.update(overrides)
    return HealthInputs(**values)


def test_weights_sum_to_one():
    assert sum(WEIGHTS.values()) == pytest.approx(1.0)


def test_healthy_profile_scores_excellent():
    """
    savings 40% -> 100, stability 80, budget 80, no debt -> 100, 6 months fund -> 100
    0.2*100 + 0.15*80 + 0.2*80 + 0.25*100 + 0.2*100 = 93
    """
    score = calculate_financial_health(_inputs())

    assert score.breakdown.savings_rate == 100
    assert score.breakdown.expense_stability == 80
    assert score.breakdown.budget_adherence == 80
    assert score.breakdown.debt_management == 100
    assert score.breakdown.emergency_fund == 100
    assert score.overall_score == 93
    assert score.grade == "Excellent"


def test_overall_score_independent_of_summation_order():
    """100, 63, 63, 100, 100 weighted to 87.05 whichever way the terms are added"""
    score = calculate_financial_health(_inputs(budget_compliance_rate=63.0, expense_variance=0.37))
    sub_scores = {
        "savings_rate": score_savings_rate(200000, 500000),
        "expense_stability": score_expense_stability(0.37),
        "budget_adherence": score_budget_adherence(63.0),
        "debt_management": score_debt(0, 500000),
        "emergency_fund": score_emergency_fund(1800000, 300000),
    }

    for names in (list(WEIGHTS), list(reversed(WEIGHTS)), sorted(WEIGHTS)):
        total = sum(WEIGHTS[name] * sub_scores[name] for name in names)
        assert round(total) == score.overall_score


def test_zero_income_does_not_divide_by_zero():
    """All-zero inputs still score: 0.2*20 + 0.15*100 + 0 + 0.25*100 + 0.2*20 = 48"""
    score = calculate_financial_health(
        _inputs(
            monthly_income=0,
            monthly_expense=0,
            monthly_savings=0,
            emergency_fund=0,
            budget_compliance_rate=0.0,
            expense_variance=0.0,
        )
    )

    assert score.breakdown.savings_rate == 20
    assert score.breakdown.debt_management == 100
    assert score.breakdown.emergency_fund == 20
    assert score.overall_score == 48
    assert score.grade == "Poor"


@pytest.mark.parametrize(
    "savings,expected",
    [(150000, 100), (100000, 80), (50000, 60), (25000, 40), (24999, 20), (0, 20)],
)
def test_savings_rate_breakpoints(savings, expected):
    assert score_savings_rate(savings, 500000) == expected


@pytest.mark.parametrize(
    "debt,expected",
    [(0, 100), (500000, 100), (1000000, 80), (2000000, 60), (3000000, 40), (5500000, 20)],
)
def test_debt_breakpoints(debt, expected):
    """Debt as a multiple of monthly income 500000"""
    assert score_debt(debt, 500000) == expected


@pytest.mark.parametrize(
    "fund,expected",
    [(600000, 100), (300000, 70), (100000, 40), (99999, 20)],
)
def test_emergency_fund_breakpoints(fund, expected):
    """Months of runway against monthly expense 100000"""
    assert score_emergency_fund(fund, 100000) == expected


def test_expense_stability_is_clamped():
    assert score_expense_stability(0.0) == 100
    assert score_expense_stability(0.35) == pytest.approx(65)
    assert score_expense_stability(2.5) == 0


@pytest.mark.parametrize(
    "score,grade",
    [(100, "Excellent"), (85, "Excellent"), (84, "Good"), (70, "Good"), (69, "Fair"),
     (50, "Fair"), (49, "Poor"), (30, "Poor"), (29, "Critical"), (0, "Critical")],
)
def test_grade_boundaries(score, grade):
    assert grade_for(score) == grade


def test_expense_variance():
    assert expense_variance([]) == 0.0
    assert expense_variance([100000]) == 0.0
    assert expense_variance([100, 100]) == 0.0
    assert expense_variance([50, 150]) == pytest.approx(0.5)
    assert expense_variance([0, 0, 0]) == 0.0


def test_money_leaks_sorted_by_potential_savings():
    """Restaurants 10% vs 7% and Groceries 20% vs 15% of income 500000"""
    leaks = detect_money_leaks({"Restaurants": 50000, "Groceries": 100000, "Rent": 100000}, 500000)

    assert [leak.category for leak in leaks] == ["Groceries", "Restaurants"]
    groceries, restaurants = leaks
    assert groceries.potential_savings == 25000
    assert groceries.percentage_of_income == pytest.approx(20.0)
    assert restaurants.potential_savings == 15000
    assert "Restaurants" in restaurants.recommendation


def test_category_without_benchmark_is_never_a_leak():
    """An unknown category at 90% of income is not flagged"""
    assert detect_money_leaks({"Gadgets": 450000}, 500000) == []


def test_money_leaks_zero_income():
    assert detect_money_leaks({"Restaurants": 50000}, 0) == []


def test_money_leaks_custom_benchmarks_case_insensitive():
    leaks = detect_money_leaks({"Gadgets": 100000, "Restaurants": 50000}, 500000, {"GADGETS": 10.0})

    assert [leak.category for leak in leaks] == ["Gadgets"]
    assert leaks[0].potential_savings == 50000


def test_ideal_budget_recommendations():
    over = compare_with_ideal_budget(60.0, 25.0, 15.0)

    assert over.needs == 50.0
    assert over.user_actual.needs == 60.0
    assert len(over.recommendations) == 2

    balanced = compare_with_ideal_budget(50.0, 30.0, 20.0)
    assert balanced.recommendations == ["Your budget is close to the 50/30/20 ideal."]
