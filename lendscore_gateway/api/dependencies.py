"""Dependency injection for FastAPI endpoints"""

from fastapi import Depends, Request
from lendscore_gateway.config import Settings, get_settings
from lendscore_gateway.infrastructure.clients.ai_gateway import AIGatewayClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_ai_gateway_client(settings: Settings = Depends(get_settings)) -> AIGatewayClient:
    """Provide AI gateway client built from process settings"""
    return AIGatewayClient.from_settings(settings)
