"""Unit tests for row normalization and period aggregation"""

import pytest
from datetime import date, datetime, timezone
from finance_analytics.domain.aggregation import (
    aggregate_by_month,
    aggregate_by_quarter,
    aggregate_by_year,
    category_totals,
    normalize_transaction,
)
from finance_analytics.domain.exceptions import InvalidTransactionDataError
from finance_analytics.domain.models import UNCATEGORIZED


def _row(**overrides):
    row = {
        "id": "t1",
        "amount": 12500,
        "direction": "expense",
        "occurred_at": "2025-03-14T10:00:00+00:00",
        "category_id": "c1",
        "categories": {"id": "c1", "name": "Groceries"},
    }
    row.update(overrides)
    return row


def test_normalize_rest_row_with_joined_object():
    """Joined category as a plain object"""
    txn = normalize_transaction(_row())

    assert txn.id == "t1"
    assert txn.amount == 12500
    assert txn.occurred_at == date(2025, 3, 14)
    assert txn.category_name == "Groceries"
    assert txn.category_id == "c1"


def test_normalize_joined_category_as_array_of_one():
    txn = normalize_transaction(_row(categories=[{"id": "c2", "name": "Rent"}], category_id=None))

    assert txn.category_name == "Rent"
    assert txn.category_id == "c2"


@pytest.mark.parametrize("joined", [None, []])
def test_normalize_missing_category_is_uncategorized(joined):
    txn = normalize_transaction(_row(categories=joined, category_id=None))

    assert txn.category_name == UNCATEGORIZED
    assert txn.category_id is None


def test_normalize_orm_row():
    """Flat repository rows carry amount_minor and category_name"""
    row = {
        "id": "t9",
        "amount_minor": 4000,
        "direction": "income",
        "occurred_at": datetime(2025, 1, 31, 23, 0, tzinfo=timezone.utc),
        "category_id": None,
        "category_name": "Salary",
    }
    txn = normalize_transaction(row)

    assert txn.amount == 4000
    assert txn.occurred_at == date(2025, 1, 31)
    assert txn.category_name == "Salary"


def test_normalize_zulu_timestamp():
    assert normalize_transaction(_row(occurred_at="2025-12-01T00:00:00Z")).occurred_at == date(2025, 12, 1)


@pytest.mark.parametrize(
    "overrides",
    [
        {"direction": "refund"},
        {"amount": -100},
        {"amount": 10.5},
        {"amount": True},
        {"occurred_at": "not-a-date"},
        {"occurred_at": None},
    ],
)
def test_normalize_rejects_malformed_rows(overrides):
    """Unknown direction, negative or non-integer amount and bad dates are boundary errors"""
    with pytest.raises(InvalidTransactionDataError):
        normalize_transaction(_row(**overrides))


def test_normalize_rejects_missing_field():
    row = _row()
    del row["direction"]

    with pytest.raises(InvalidTransactionDataError):
        normalize_transaction(row)


def test_aggregate_by_month_sorted_without_gaps(sample_transactions, make_txn):
    """Only months with activity appear, oldest first"""
    transactions = sample_transactions + [make_txn("late", date(2025, 6, 2), 700, category="Cafes")]

    buckets = aggregate_by_month(reversed(transactions))

    assert [b.month for b in buckets] == ["2025-01", "2025-02", "2025-03", "2025-06"]
    assert buckets[2].income == 300000
    assert buckets[2].expense == 15000
    assert buckets[2].categories == {"Groceries": 15000}


def test_transfers_are_not_income_or_expense(make_txn):
    """A transfer opens its bucket but contributes nothing"""
    buckets = aggregate_by_month([make_txn("m", date(2025, 4, 5), 99999, "transfer", "Savings")])

    assert len(buckets) == 1
    assert buckets[0].month == "2025-04"
    assert buckets[0].income == 0
    assert buckets[0].expense == 0
    assert buckets[0].categories == {}


def test_aggregate_by_quarter_and_year(sample_transactions, make_txn):
    transactions = sample_transactions + [make_txn("q2", date(2025, 4, 1), 5000)]

    quarters = aggregate_by_quarter(transactions)
    years = aggregate_by_year(transactions)

    assert [q.month for q in quarters] == ["2025-Q1", "2025-Q2"]
    assert quarters[0].expense == 35000
    assert quarters[0].income == 900000
    assert [y.month for y in years] == ["2025"]
    assert years[0].expense == 40000


def test_category_totals_expense_only(sample_transactions, make_txn):
    transactions = sample_transactions + [make_txn("r", date(2025, 2, 20), 2500, category="Restaurants")]

    assert category_totals(transactions) == {"Groceries": 35000, "Restaurants": 2500}


def test_empty_input_yields_no_buckets():
    assert aggregate_by_month([]) == []
    assert category_totals([]) == {}


def _mixed_snapshot(make_txn):
    return [
        make_txn("salary_jan", date(2025, 1, 1), 300000, "income", "Salary"),
        make_txn("groc_jan", date(2025, 1, 9), 42000),
        make_txn("misc_jan", date(2025, 1, 12), 1500, category=UNCATEGORIZED),
        make_txn("move_jan", date(2025, 1, 20), 80000, "transfer", "Savings"),
        make_txn("salary_feb", date(2025, 2, 1), 300000, "income", "Salary"),
        make_txn("rest_feb", date(2025, 2, 14), 6500, category="Restaurants"),
        make_txn("move_mar", date(2025, 3, 3), 25000, "transfer", "Savings"),
        make_txn("misc_apr", date(2025, 4, 30), 900, category=UNCATEGORIZED),
    ]


def test_aggregate_by_month_is_idempotent(make_txn):
    """Same snapshot, same buckets"""
    snapshot = _mixed_snapshot(make_txn)

    assert aggregate_by_month(snapshot) == aggregate_by_month(snapshot)


def test_category_breakdown_never_exceeds_expense(make_txn):
    buckets = aggregate_by_month(_mixed_snapshot(make_txn))

    assert [b.month for b in buckets] == ["2025-01", "2025-02", "2025-03", "2025-04"]
    for bucket in buckets:
        assert sum(bucket.categories.values()) <= bucket.expense
    assert buckets[0].categories == {"Groceries": 42000, UNCATEGORIZED: 1500}
    assert buckets[2].expense == 0
