"""
Health check API endpoints.

This module provides health check endpoints for monitoring
application and component status.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from ....application.startup import ApplicationStartup
from ....infrastructure.config.models import ApplicationConfig
from ..dependencies import get_config, get_startup

router = APIRouter()


@router.get("")
async def health_check(
    startup: ApplicationStartup = Depends(get_startup),
    config: ApplicationConfig = Depends(get_config)
) -> Dict[str, Any]:
    """
    Health check with component status.

    Reports ``degraded`` when a component is unhealthy or Drive settings
    are missing.
    """
    health = await startup.check_health()
    missing = config.drive.missing_settings()

    return {
        "status": "healthy" if health["healthy"] and not missing else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "application": {
            "name": config.name,
            "version": config.version,
            "environment": config.environment
        },
        "missing_settings": missing,
        "components": health["components"]
    }


@router.get("/live")
async def liveness_check() -> Dict[str, Any]:
    """Liveness check endpoint."""
    return {
        "alive": True,
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
