"""
Lifecycle interfaces for components that hold network resources.

The provider client and the transfer engine own HTTP sessions that must be
opened before use and closed on shutdown.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict


class IStartable(ABC):
    """Interface for components that can be started."""

    @abstractmethod
    async def start(self) -> None:
        """
        Start the component.

        Acquires any resources the component needs, such as an HTTP
        client session.
        """
        pass


class IStoppable(ABC):
    """Interface for components that can be stopped."""

    @abstractmethod
    async def stop(self) -> None:
        """Release the component's resources."""
        pass


class IHealthCheckable(ABC):
    """Interface for components that can report their health status."""

    @abstractmethod
    async def check_health(self) -> Dict[str, Any]:
        """
        Check the health status of the component.

        Returns:
            Dict containing at least:
            - 'healthy': bool indicating if component is healthy
            - 'status': str describing current status
            - 'details': Dict with additional health details
        """
        pass


class IComponent(IStartable, IStoppable, IHealthCheckable):
    """Base interface for components with a full lifecycle."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the component name."""
        pass
