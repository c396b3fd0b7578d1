"""
API routers for the session broker.
"""

from . import folders, health, upload

__all__ = [
    "folders",
    "health",
    "upload",
]
