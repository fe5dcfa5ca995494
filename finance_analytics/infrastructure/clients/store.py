"""Hosted transaction store HTTP client (PostgREST-style REST API)"""

import httpx
from typing import Dict, List, Optional
from finance_analytics.domain.aggregation import normalize_transactions
from finance_analytics.domain.exceptions import TransactionStoreError
from finance_analytics.domain.models import DateRange, Transaction
from finance_analytics.infrastructure.observability.metrics import store_fetch_failures_counter
from finance_analytics.config import settings

TRANSACTION_COLUMNS = "id,amount,direction,occurred_at,category_id,categories(id,name)"


class StoreClient:
    """Client for the hosted transaction store REST API"""

    def __init__(self, base_url: str | None = None, api_key: str | None = None, timeout: float | None = None):
        self.base_url = base_url or settings.store_api_base
        self.api_key = api_key if api_key is not None else settings.store_api_key
        self.timeout = timeout or settings.http_timeout_seconds

    def _headers(self) -> Dict[str, str]:
        if not self.api_key:
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    async def _get(self, path: str, params: List[tuple]) -> list:
        async with httpx.AsyncClient(timeout=self.timeout, headers=self._headers()) as client:
            try:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
                data = response.json()
                if not isinstance(data, list):
                    raise TypeError(f"expected a JSON array, got {type(data).__name__}")
                return data

            except httpx.TimeoutException as e:
                store_fetch_failures_counter.inc()
                raise TransactionStoreError(f"Transaction store timeout after {self.timeout}s") from e
            except httpx.HTTPStatusError as e:
                store_fetch_failures_counter.inc()
                raise TransactionStoreError(f"Transaction store error: {e.response.status_code}") from e
            except httpx.RequestError as e:
                store_fetch_failures_counter.inc()
                raise TransactionStoreError(f"Transaction store unreachable: {e}") from e
            except (ValueError, TypeError) as e:
                store_fetch_failures_counter.inc()
                raise TransactionStoreError(f"Invalid response from transaction store: {e}") from e

    async def fetch_transactions(
        self,
        user_id: str,
        date_range: DateRange,
        direction: Optional[str] = None,
    ) -> List[Transaction]:
        """
        Fetch a user's transactions in an inclusive date range, oldest first.

        Raises:
            TransactionStoreError: On timeout, HTTP errors, or invalid response
            InvalidTransactionDataError: A row violates the transaction contract
        """
        params = [
            ("select", TRANSACTION_COLUMNS),
            ("user_id", f"eq.{user_id}"),
            ("occurred_at", f"gte.{date_range.start.isoformat()}"),
            ("occurred_at", f"lte.{date_range.end.isoformat()}T23:59:59"),
            ("order", "occurred_at.asc"),
        ]
        if direction:
            params.append(("direction", f"eq.{direction}"))

        rows = await self._get("/rest/v1/transactions", params)
        return normalize_transactions(rows)

    async def fetch_category_ids(self, user_id: str) -> Dict[str, str]:
        """Map expense category name to id"""
        rows = await self._get(
            "/rest/v1/categories",
            [("select", "id,name"), ("user_id", f"eq.{user_id}"), ("kind", "eq.expense")],
        )
        try:
            return {row["name"]: str(row["id"]) for row in rows}
        except (KeyError, TypeError) as e:
            raise TransactionStoreError(f"Invalid category data from transaction store: {e}") from e
