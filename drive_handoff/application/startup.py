"""
Application startup and service wiring.

This module builds the server-side services (provider client, session
broker and folder directory) from configuration and manages the lifecycle
of the components that hold network resources.
"""

import logging
from typing import Any, Dict, List, Optional

from ..core.interfaces.lifecycle import IComponent, IStartable, IStoppable
from ..core.interfaces.provider import IStorageProvider
from ..core.services.folder_directory import FolderDirectory
from ..core.services.session_broker import SessionBroker
from ..infrastructure.config.models import ApplicationConfig

logger = logging.getLogger(__name__)


class ApplicationStartup:
    """
    Manages service configuration and startup order.

    Args:
        config: Application configuration
        provider: Storage provider to use instead of the Google Drive client
    """

    def __init__(self, config: ApplicationConfig, provider: Optional[IStorageProvider] = None) -> None:
        self._config = config
        self._provider = provider
        self._broker: Optional[SessionBroker] = None
        self._directory: Optional[FolderDirectory] = None
        self._started_components: List[IComponent] = []
        self._configured = False

    @property
    def config(self) -> ApplicationConfig:
        return self._config

    @property
    def provider(self) -> IStorageProvider:
        self._require_configured()
        assert self._provider is not None
        return self._provider

    @property
    def broker(self) -> SessionBroker:
        self._require_configured()
        assert self._broker is not None
        return self._broker

    @property
    def directory(self) -> FolderDirectory:
        self._require_configured()
        assert self._directory is not None
        return self._directory

    async def configure_services(self) -> None:
        """Create the provider client, session broker and folder directory."""
        if self._configured:
            return

        logger.info("Configuring application services...")

        if self._provider is None:
            from ..infrastructure.providers.google_drive import GoogleDriveProvider
            self._provider = GoogleDriveProvider(self._config.drive)

        identity = getattr(self._provider, "identity", None)
        self._broker = SessionBroker(
            self._config.drive,
            self._provider,
            debug=self._config.debug,
            identity=identity
        )
        self._directory = FolderDirectory(self._config.drive, self._provider)
        self._configured = True

        missing = self._config.drive.missing_settings()
        if missing:
            # Requests will fail with MissingConfigurationError until fixed
            logger.warning(f"Missing Drive settings: {', '.join(missing)}")

        logger.info("Service configuration completed")

    async def start_application(self) -> None:
        """Start every component that holds resources."""
        await self.configure_services()

        logger.info("Starting application components...")

        for component in self._components():
            try:
                if isinstance(component, IStartable):
                    await component.start()
                if isinstance(component, IComponent):
                    self._started_components.append(component)
                    logger.info(f"Started component: {component.name}")
            except Exception as e:
                logger.error(f"Failed to start component {component}: {e}")
                await self.stop_application()
                raise

        logger.info("Application startup completed successfully")

    async def stop_application(self) -> None:
        """Stop started components in reverse order."""
        logger.info("Stopping application components...")

        for component in reversed(self._started_components):
            try:
                if isinstance(component, IStoppable):
                    await component.stop()
                    logger.info(f"Stopped component: {component.name}")
            except Exception as e:
                logger.error(f"Error stopping component {component.name}: {e}")

        self._started_components.clear()
        logger.info("Application shutdown completed")

    async def check_health(self) -> Dict[str, Any]:
        """Collect health information from all lifecycle components."""
        components: Dict[str, Any] = {}
        healthy = True

        for component in self._components():
            if not isinstance(component, IComponent):
                continue
            try:
                info = await component.check_health()
            except Exception as e:
                info = {"healthy": False, "status": "error", "details": {"error": str(e)}}
            components[component.name] = info
            healthy = healthy and bool(info.get("healthy", True))

        return {"healthy": healthy, "components": components}

    def _components(self) -> List[Any]:
        return [self._provider] if self._provider is not None else []

    def _require_configured(self) -> None:
        if not self._configured:
            raise RuntimeError("Services are not configured; call configure_services() first")
