"""GET /v1/trends and GET /v1/seasonality - spending pattern reports"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from finance_analytics.api.dependencies import get_analytics_service, get_request_id
from finance_analytics.api.v1.schemas import SeasonalityResponse, TrendsResponse
from finance_analytics.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from finance_analytics.infrastructure.observability.logging import log_analytics
from finance_analytics.infrastructure.observability.metrics import record_analytics
from finance_analytics.services.analytics import AnalyticsService

router = APIRouter()


@router.get("/trends", response_model=TrendsResponse)
async def get_spending_trends(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    months: int | None = Query(None, ge=1, le=36, description="Months of history"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Average-ticket trends per category and overall, with growth and volatility alerts.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        report = await service.trends(user_id, months=months)

    except TransactionStoreError as e:
        logging.error(f"Transaction store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    except InvalidTransactionDataError as e:
        logging.warning(f"Invalid transaction data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_analytics("trends")
    log_analytics(
        request_id,
        user_id,
        "trends",
        duration_ms,
        category_count=len(report.categories),
        alert_count=len(report.alerts),
    )

    return TrendsResponse.model_validate(report)


@router.get("/seasonality", response_model=SeasonalityResponse)
async def get_seasonality(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    months: int | None = Query(None, ge=1, le=60, description="Months of history"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """Spending by month of year, season and weekday, plus this month's factor"""
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        report = await service.seasonality(user_id, months=months)

    except TransactionStoreError as e:
        logging.error(f"Transaction store error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=503, detail="Transaction store unavailable")

    except InvalidTransactionDataError as e:
        logging.warning(f"Invalid transaction data: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=422, detail=str(e))

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_analytics("seasonality")
    log_analytics(
        request_id,
        user_id,
        "seasonality",
        duration_ms,
        seasonality_label=report.current.label,
        seasonality_factor=report.current.factor,
    )

    return SeasonalityResponse.model_validate(report)
