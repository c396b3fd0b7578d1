"""
Configuration management infrastructure.

This module provides configuration models and loading from files and the
environment.
"""

from .loader import ConfigLoader
from .models import (
    ApplicationConfig, ClientConfig, DriveConfig, LoggingConfig,
    SecurityConfig, ServerConfig
)

__all__ = [
    "ConfigLoader",
    "ApplicationConfig",
    "ClientConfig",
    "DriveConfig",
    "LoggingConfig",
    "SecurityConfig",
    "ServerConfig",
]
