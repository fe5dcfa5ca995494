"""Period aggregation - groups transactions into calendar and category buckets"""

from datetime import date, datetime
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from finance_analytics.domain.exceptions import InvalidTransactionDataError
from finance_analytics.domain.models import (
    DIRECTIONS,
    EXPENSE,
    INCOME,
    MonthlyBucket,
    Transaction,
    UNCATEGORIZED,
)
from finance_analytics.utils.date_utils import month_key, quarter_key, year_key


def _resolve_category(joined: Any) -> Optional[Mapping[str, Any]]:
    """The joined category arrives as an object, an array of one, an empty array or null"""
    if isinstance(joined, (list, tuple)):
        return joined[0] if joined else None
    return joined


def _parse_date(value: Any) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        # "2025-01-31", "2025-01-31T10:00:00+00:00" and "2025-01-31T10:00:00Z"
        return date.fromisoformat(value[:10])
    raise TypeError(f"unsupported date value {value!r}")


def normalize_transaction(row: Mapping[str, Any]) -> Transaction:
    """
    Convert a raw data-layer row into a strict Transaction.

    Accepts both the REST join shape (`categories` as object or list) and
    flat ORM mappings carrying `category_name`. Amount may be named `amount`
    or `amount_minor`.

    Raises:
        InvalidTransactionDataError: unknown direction, negative or
            non-integer amount, missing fields or unparseable date
    """
    try:
        direction = row["direction"]
        amount = row["amount"] if "amount" in row else row["amount_minor"]
        occurred_at = _parse_date(row["occurred_at"])
        transaction_id = str(row["id"])
    except (KeyError, TypeError, ValueError) as e:
        raise InvalidTransactionDataError(f"Malformed transaction row: {e}") from e

    if direction not in DIRECTIONS:
        raise InvalidTransactionDataError(f"Unknown direction {direction!r} on transaction {transaction_id}")
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidTransactionDataError(f"Amount must be integer minor units on transaction {transaction_id}")
    if amount < 0:
        raise InvalidTransactionDataError(f"Negative amount on transaction {transaction_id}")

    category = _resolve_category(row.get("categories"))
    category_name = (category or {}).get("name") or row.get("category_name") or UNCATEGORIZED
    category_id = row.get("category_id")
    if category_id is None and category:
        category_id = category.get("id")

    return Transaction(
        id=transaction_id,
        occurred_at=occurred_at,
        amount=amount,
        direction=direction,
        category_id=str(category_id) if category_id is not None else None,
        category_name=category_name,
    )


def normalize_transactions(rows: Iterable[Mapping[str, Any]]) -> List[Transaction]:
    return [normalize_transaction(row) for row in rows]


def _aggregate(transactions: Iterable[Transaction], key_fn: Callable[[date], str]) -> List[MonthlyBucket]:
    buckets: Dict[str, MonthlyBucket] = {}

    for txn in transactions:
        key = key_fn(txn.occurred_at)
        bucket = buckets.get(key)
        if bucket is None:
            bucket = buckets[key] = MonthlyBucket(month=key)

        if txn.direction == INCOME:
            bucket.income += txn.amount
        elif txn.direction == EXPENSE:
            bucket.expense += txn.amount
            bucket.categories[txn.category_name] = bucket.categories.get(txn.category_name, 0) + txn.amount
        # Transfers open a bucket but are not economic activity

    return [buckets[key] for key in sorted(buckets)]


def aggregate_by_month(transactions: Iterable[Transaction]) -> List[MonthlyBucket]:
    """
    Group transactions into calendar-month buckets.

    Only months with at least one transaction are returned, oldest first;
    callers must not assume contiguous months.
    """
    return _aggregate(transactions, month_key)


def aggregate_by_quarter(transactions: Iterable[Transaction]) -> List[MonthlyBucket]:
    return _aggregate(transactions, quarter_key)


def aggregate_by_year(transactions: Iterable[Transaction]) -> List[MonthlyBucket]:
    return _aggregate(transactions, year_key)


def category_totals(transactions: Iterable[Transaction]) -> Dict[str, int]:
    """Expense totals per category name over a flat period"""
    totals: Dict[str, int] = {}
    for txn in transactions:
        if txn.direction == EXPENSE:
            totals[txn.category_name] = totals.get(txn.category_name, 0) + txn.amount
    return totals
