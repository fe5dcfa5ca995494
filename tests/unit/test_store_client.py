"""Unit tests for the hosted transaction store client"""

import httpx
import pytest
from datetime import date
from unittest.mock import AsyncMock, patch
from finance_analytics.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from finance_analytics.domain.models import DateRange
from finance_analytics.infrastructure.clients.store import StoreClient

WINDOW = DateRange(date(2025, 1, 1), date(2025, 3, 31))


def _response(status_code: int, payload) -> httpx.Response:
    return httpx.Response(status_code, json=payload, request=httpx.Request("GET", "http://store.test/rest/v1/x"))


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
async def test_fetch_transactions_normalizes_rows(mock_get: AsyncMock):
    mock_get.return_value = _response(
        200,
        [
            {
                "id": 1,
                "amount": 12000,
                "direction": "expense",
                "occurred_at": "2025-02-03T08:00:00+00:00",
                "category_id": 7,
                "categories": [{"id": 7, "name": "Groceries"}],
            }
        ],
    )
    client = StoreClient("http://store.test", "key")

    transactions = await client.fetch_transactions("user_1", WINDOW, "expense")

    assert len(transactions) == 1
    assert transactions[0].id == "1"
    assert transactions[0].category_name == "Groceries"
    assert transactions[0].category_id == "7"

    params = mock_get.call_args.kwargs["params"]
    assert ("user_id", "eq.user_1") in params
    assert ("occurred_at", "gte.2025-01-01") in params
    assert ("occurred_at", "lte.2025-03-31T23:59:59") in params
    assert ("direction", "eq.expense") in params


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
async def test_fetch_transactions_rejects_malformed_rows(mock_get: AsyncMock):
    mock_get.return_value = _response(
        200, [{"id": 1, "amount": -5, "direction": "expense", "occurred_at": "2025-02-03"}]
    )

    with pytest.raises(InvalidTransactionDataError):
        await StoreClient("http://store.test").fetch_transactions("user_1", WINDOW)


@pytest.mark.parametrize(
    "side_effect",
    [
        httpx.ConnectTimeout("timed out"),
        httpx.ConnectError("refused"),
    ],
)
async def test_transport_failures_raise_store_error(side_effect):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, side_effect=side_effect):
        with pytest.raises(TransactionStoreError):
            await StoreClient("http://store.test").fetch_transactions("user_1", WINDOW)


@pytest.mark.parametrize("response", [_response(500, {"message": "boom"}), _response(200, {"not": "a list"})])
async def test_bad_responses_raise_store_error(response):
    with patch("httpx.AsyncClient.get", new_callable=AsyncMock, return_value=response):
        with pytest.raises(TransactionStoreError):
            await StoreClient("http://store.test").fetch_transactions("user_1", WINDOW)


@patch("httpx.AsyncClient.get", new_callable=AsyncMock)
async def test_fetch_category_ids(mock_get: AsyncMock):
    mock_get.return_value = _response(200, [{"id": 3, "name": "Rent"}, {"id": 4, "name": "Cafes"}])

    assert await StoreClient("http://store.test").fetch_category_ids("user_1") == {"Rent": "3", "Cafes": "4"}
    assert ("kind", "eq.expense") in mock_get.call_args.kwargs["params"]
