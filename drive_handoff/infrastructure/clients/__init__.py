"""
Clients for services the upload client talks to.
"""

from .broker_client import SessionBrokerClient

__all__ = [
    "SessionBrokerClient",
]
