"""Period-over-period comparison endpoints

GET  /v1/comparison         - calendar month, quarter or year vs the one before
POST /v1/comparison/custom  - two arbitrary date ranges
"""

import logging
import time
from datetime import date
from typing import Literal

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from finance_analytics.api.dependencies import get_analytics_service, get_request_id
from finance_analytics.api.v1.schemas import ComparisonResponse, CustomComparisonRequest
from finance_analytics.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from finance_analytics.domain.models import DateRange, PeriodComparison
from finance_analytics.infrastructure.observability.logging import log_analytics
from finance_analytics.infrastructure.observability.metrics import record_analytics
from finance_analytics.services.analytics import AnalyticsService

router = APIRouter()


def _completed(request_id: str, user_id: str, comparison: PeriodComparison, start_time: float) -> ComparisonResponse:
    duration_ms = (time.time() - start_time) * 1000
    record_analytics("comparison")
    log_analytics(
        request_id,
        user_id,
        "comparison",
        duration_ms,
        period_type=comparison.period_type,
        current_period=comparison.current_period.label,
        category_count=len(comparison.by_category),
    )
    return ComparisonResponse.model_validate(comparison)


@router.get("/comparison", response_model=ComparisonResponse)
async def get_period_comparison(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    period: Literal["month", "quarter", "year"] = Query("month", description="Calendar period granularity"),
    reference: date | None = Query(None, description="Any day inside the current period (default today)"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Compare the calendar period containing `reference` with the one before it.

    Returns:
        Income, expense, balance and savings-rate metrics, per-category
        movement, a 12-month timeline and advice
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        comparison = await service.compare_period(user_id, period, reference)

    except TransactionStoreError as e:
        logging.error(f"Transaction store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    except InvalidTransactionDataError as e:
        logging.warning(f"Invalid transaction data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return _completed(request_id, user_id, comparison, start_time)


@router.post("/comparison/custom", response_model=ComparisonResponse)
async def create_custom_comparison(
    request_body: CustomComparisonRequest,
    request: Request,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Compare two caller-chosen date ranges (period_type "custom")"""
    start_time = time.time()
    request_id = get_request_id(request)

    current = DateRange(request_body.current.start, request_body.current.end)
    previous = DateRange(request_body.previous.start, request_body.previous.end)

    try:
        comparison = await service.compare(request_body.user_id, current, previous)

    except TransactionStoreError as e:
        logging.error(f"Transaction store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    except InvalidTransactionDataError as e:
        logging.warning(f"Invalid transaction data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    return _completed(request_id, request_body.user_id, comparison, start_time)
