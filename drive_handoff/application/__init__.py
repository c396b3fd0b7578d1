"""
Application layer: service wiring and lifecycle management.
"""

from .startup import ApplicationStartup

__all__ = [
    "ApplicationStartup",
]
