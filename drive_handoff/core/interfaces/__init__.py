"""
Core interfaces defining the seams between upload components.
"""

from .lifecycle import IStartable, IStoppable, IHealthCheckable, IComponent
from .provider import IDriveSettings, IStorageProvider
from .upload import ISessionSource, ITransferEngine, ProgressCallback

__all__ = [
    "IStartable",
    "IStoppable",
    "IHealthCheckable",
    "IComponent",
    "IDriveSettings",
    "IStorageProvider",
    "ISessionSource",
    "ITransferEngine",
    "ProgressCallback",
]
