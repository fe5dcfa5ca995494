"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request

from finance_analytics.infrastructure.clients.advice import AdviceClient
from finance_analytics.services.analytics import AnalyticsService, TransactionSource


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_transaction_source(request: Request) -> TransactionSource:
    """Transaction source built once in create_app"""
    return request.app.state.transaction_source


def get_advice_client(request: Request) -> AdviceClient:
    """Advice collaborator built once in create_app"""
    return request.app.state.advice_client


def get_analytics_service(
    source: TransactionSource = Depends(get_transaction_source),
    advice_client: AdviceClient = Depends(get_advice_client),
) -> AnalyticsService:
    return AnalyticsService(source, advice_client)
