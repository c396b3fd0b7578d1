"""
Infrastructure layer: configuration, logging, the Google Drive client, the
transfer engine and the session broker HTTP client.
"""

from .config import ApplicationConfig, ConfigLoader, DriveConfig
from .logging import setup_logging

__all__ = [
    "ApplicationConfig",
    "ConfigLoader",
    "DriveConfig",
    "setup_logging",
]
