"""
HTTP API for the session broker.
"""

from .app import create_app

__all__ = [
    "create_app",
]
