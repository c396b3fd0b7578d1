"""
FastAPI dependency functions.

Routes reach the configured services through the ApplicationStartup stored
on the application state.
"""

from fastapi import Depends, HTTPException, Request, status

from ...application.startup import ApplicationStartup
from ...core.services.folder_directory import FolderDirectory
from ...core.services.session_broker import SessionBroker
from ...infrastructure.config.models import ApplicationConfig


def get_startup(request: Request) -> ApplicationStartup:
    """
    Get the application startup manager from the request.

    Raises:
        HTTPException: If the services are not available
    """
    if not hasattr(request.app.state, "startup"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application services not available"
        )

    return request.app.state.startup


def get_config(request: Request) -> ApplicationConfig:
    """Get the application configuration from the request."""
    if not hasattr(request.app.state, "config"):
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Application configuration not available"
        )

    return request.app.state.config


def get_broker(startup: ApplicationStartup = Depends(get_startup)) -> SessionBroker:
    return startup.broker


def get_folder_directory(startup: ApplicationStartup = Depends(get_startup)) -> FolderDirectory:
    return startup.directory
