"""GET /v1/forecast - Next-month expense forecast"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from finance_analytics.api.dependencies import get_analytics_service, get_request_id
from finance_analytics.api.v1.schemas import ForecastResponse
from finance_analytics.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from finance_analytics.infrastructure.observability.logging import log_analytics
from finance_analytics.infrastructure.observability.metrics import record_forecast
from finance_analytics.services.analytics import AnalyticsService

router = APIRouter()


@router.get("/forecast", response_model=ForecastResponse)
async def get_forecast(
    request: Request,
    user_id: str = Query(..., min_length=1, description="User identifier"),
    months: int | None = Query(None, ge=1, le=36, description="Months of history to learn from"),
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Forecast next month's expenses per category and in total.

    Returns:
        Category and aggregate predictions with seasonality, trend,
        confidence and advice
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        result = await service.forecast(user_id, months=months)

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
    record_forecast(result.confidence)
    log_analytics(
        request_id,
        user_id,
        "forecast",
        duration_ms,
        total_predicted=result.total_predicted,
        confidence=result.confidence,
        category_count=len(result.categories),
    )

    return ForecastResponse.model_validate(result)
