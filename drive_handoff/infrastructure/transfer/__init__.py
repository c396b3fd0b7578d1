"""
Client-side byte transfer to resumable session URLs.
"""

from .engine import TRANSFER_CONTENT_TYPE, AiohttpTransferEngine

__all__ = [
    "TRANSFER_CONTENT_TYPE",
    "AiohttpTransferEngine",
]
