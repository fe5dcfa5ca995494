"""Data access layer for transactions and categories"""

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from finance_analytics.domain.aggregation import normalize_transactions
from finance_analytics.domain.exceptions import TransactionStoreError
from finance_analytics.domain.models import DateRange, Transaction
from finance_analytics.infrastructure.database.models import Category, TransactionRecord
from finance_analytics.infrastructure.observability.metrics import store_fetch_failures_counter


class TransactionRepository:
    """Read-only repository for transactions"""

    def __init__(self, db: Session):
        self.db = db

    def get_transaction_rows(
        self,
        user_id: str,
        date_range: DateRange,
        direction: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Fetch raw rows in the inclusive date range, oldest first"""
        start = datetime.combine(date_range.start, time.min)
        end = datetime.combine(date_range.end + timedelta(days=1), time.min)

        query = (
            self.db.query(TransactionRecord, Category.name)
            .outerjoin(Category, TransactionRecord.category_id == Category.id)
            .filter(TransactionRecord.user_id == user_id)
            .filter(TransactionRecord.occurred_at >= start)
            .filter(TransactionRecord.occurred_at < end)
        )
        if direction:
            query = query.filter(TransactionRecord.direction == direction)

        return [
            {
                "id": record.id,
                "occurred_at": record.occurred_at,
                "amount_minor": record.amount_minor,
                "direction": record.direction,
                "category_id": record.category_id,
                "category_name": category_name,
            }
            for record, category_name in query.order_by(TransactionRecord.occurred_at.asc(), TransactionRecord.id)
        ]

    def get_category_ids(self, user_id: str, kind: str = "expense") -> Dict[str, str]:
        """Map category name to id for one user"""
        rows = (
            self.db.query(Category.name, Category.id)
            .filter(Category.user_id == user_id)
            .filter(Category.kind == kind)
            .all()
        )
        return {name: category_id for name, category_id in rows}


class DatabaseTransactionSource:
    """
    Async transaction reads over the relational store.

    Each read opens its own session in a worker thread, so concurrent reads
    (e.g. timeline months) never share a session.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def _fetch_rows(self, user_id: str, date_range: DateRange, direction: Optional[str]) -> List[Dict[str, Any]]:
        with self.session_factory() as db:
            return TransactionRepository(db).get_transaction_rows(user_id, date_range, direction)

    def _fetch_category_ids(self, user_id: str) -> Dict[str, str]:
        with self.session_factory() as db:
            return TransactionRepository(db).get_category_ids(user_id)

    async def fetch_transactions(
        self,
        user_id: str,
        date_range: DateRange,
        direction: Optional[str] = None,
    ) -> List[Transaction]:
        """
        Raises:
            TransactionStoreError: database unavailable or query failed
            InvalidTransactionDataError: a stored row violates the transaction contract
        """
        try:
            rows = await asyncio.to_thread(self._fetch_rows, user_id, date_range, direction)
        except SQLAlchemyError as e:
            store_fetch_failures_counter.inc()
            logging.error(f"Transaction query failed: {e}", extra={"user_id": user_id})
            raise TransactionStoreError("Transaction database unavailable") from e
        return normalize_transactions(rows)

    async def fetch_category_ids(self, user_id: str) -> Dict[str, str]:
        try:
            return await asyncio.to_thread(self._fetch_category_ids, user_id)
        except SQLAlchemyError as e:
            store_fetch_failures_counter.inc()
            raise TransactionStoreError("Transaction database unavailable") from e
