"""Financial health endpoints

POST /v1/health/score   - score caller-supplied aggregates
POST /v1/health/assess  - derive aggregates from recent transactions, then score
"""

import logging
import time

from fastapi import APIRouter, Depends, HTTPException, Request

from finance_analytics.api.dependencies import get_analytics_service, get_request_id
from finance_analytics.api.v1.schemas import (
    HealthAssessRequest,
    HealthAssessResponse,
    HealthReportResponse,
    HealthScoreRequest,
)
from finance_analytics.domain.exceptions import InvalidTransactionDataError, TransactionStoreError
from finance_analytics.domain.models import HealthInputs
from finance_analytics.infrastructure.observability.logging import log_analytics
from finance_analytics.infrastructure.observability.metrics import record_health
from finance_analytics.services.analytics import AnalyticsService

router = APIRouter()


@router.post("/health/score", response_model=HealthReportResponse)
async def score_health(
    request_body: HealthScoreRequest,
    request: Request,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Weighted 0-100 health score with grade, money leaks and advice.

    No store access; every figure comes from the request body.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    inputs = HealthInputs(
        monthly_income=request_body.monthly_income,
        monthly_expense=request_body.monthly_expense,
        monthly_savings=request_body.monthly_savings,
        emergency_fund=request_body.emergency_fund,
        total_debt=request_body.total_debt,
        budget_compliance_rate=request_body.budget_compliance_rate,
        expense_variance=request_body.expense_variance,
    )

    try:
        report = await service.score_health(
            inputs,
            request_body.category_expenses,
            request_body.benchmarks,
            needs_pct=request_body.needs_pct,
            wants_pct=request_body.wants_pct,
        )
    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    record_health(report.score.grade)
    log_analytics(
        request_id,
        "anonymous",
        "health_score",
        duration_ms,
        overall_score=report.score.overall_score,
        grade=report.score.grade,
        leak_count=len(report.money_leaks),
    )

    return HealthReportResponse.model_validate(report)


@router.post("/health/assess", response_model=HealthAssessResponse)
async def assess_health(
    request_body: HealthAssessRequest,
    request: Request,
    service: AnalyticsService = Depends(get_analytics_service),
):
    """
    Health report for a user, with income, expense, variance and category
    spend derived from the last few months of transactions.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        inputs, report = await service.assess_health(
            request_body.user_id,
            request_body.emergency_fund,
            request_body.total_debt,
            request_body.budget_compliance_rate,
            benchmarks=request_body.benchmarks,
        )

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
    record_health(report.score.grade)
    log_analytics(
        request_id,
        request_body.user_id,
        "health_assess",
        duration_ms,
        overall_score=report.score.overall_score,
        grade=report.score.grade,
        leak_count=len(report.money_leaks),
    )

    return HealthAssessResponse(
        score=report.score,
        money_leaks=report.money_leaks,
        ideal_budget=report.ideal_budget,
        advice=report.advice,
        inputs=inputs,
    )
