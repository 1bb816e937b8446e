"""
Health check endpoints for the User Story to Tests service.
"""

import time
from typing import Any, Dict

from fastapi import APIRouter

from storytests.core.config import settings
from storytests.utils.correlation import CorrelationIdManager

router = APIRouter()


@router.get("/health", tags=["health"])
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.

    Reports which outbound integrations are configured; it does not call
    them.
    """
    return {
        "status": "ok",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "timestamp": time.time(),
        "correlation_id": CorrelationIdManager.get_correlation_id(),
        "integrations": {
            "generation": "configured" if settings.generation_configured else "not_configured",
            "jira": "configured" if settings.jira_configured else "not_configured",
        },
    }
