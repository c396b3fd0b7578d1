"""
Main entry point for the Drive Handoff application.

This module provides the command-line interface: the session broker server,
configuration helpers, and an upload client that drives a batch of files
straight to Google Drive.
"""

import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp
import typer
import uvicorn

from .application.startup import ApplicationStartup
from .core.domain.models import UploadState, UploadTask, format_bytes
from .core.interfaces.upload import ISessionSource
from .core.services.batch_coordinator import BatchCoordinator
from .infrastructure.clients.broker_client import SessionBrokerClient
from .infrastructure.config.loader import ConfigLoader
from .infrastructure.config.models import ApplicationConfig
from .infrastructure.logging.setup import setup_logging
from .infrastructure.transfer.engine import AiohttpTransferEngine
from .presentation.api.app import create_app

# Create CLI application
cli = typer.Typer(
    name="drive-handoff",
    help="Direct-to-Drive resumable upload session broker and upload client"
)

logger = logging.getLogger(__name__)


@cli.command()
def start(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    host: Optional[str] = typer.Option(
        None, "--host", help="Server host address"
    ),
    port: Optional[int] = typer.Option(
        None, "--port", "-p", help="Server port"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Enable debug mode"
    )
) -> None:
    """Start the session broker server."""

    config = ConfigLoader().load_config(config_file)

    # Override with command line arguments
    if host:
        config.server.host = host
    if port:
        config.server.port = port
    if log_level:
        config.logging.level = log_level.upper()
    if debug:
        config.debug = True
        config.logging.level = "DEBUG"

    setup_logging(config.logging)

    logger.info(f"Starting {config.name} v{config.version}")
    logger.info(f"Environment: {config.environment}")
    logger.info(f"Debug mode: {config.debug}")

    try:
        asyncio.run(run_application(config))
    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
    except Exception as e:
        logger.error(f"Application failed to start: {e}")
        sys.exit(1)


@cli.command()
def dev(
    config_file: Optional[str] = typer.Option(
        "config.yaml", "--config", "-c", help="Configuration file path"
    ),
    port: int = typer.Option(
        8000, "--port", "-p", help="Server port"
    ),
    reload: bool = typer.Option(
        True, "--reload/--no-reload", help="Enable auto-reload"
    )
) -> None:
    """Start the server in development mode with auto-reload."""

    if config_file and not Path(config_file).exists():
        config_file = None

    config = ConfigLoader().load_config(config_file)

    config.debug = True
    config.environment = "development"
    config.logging.level = "DEBUG"
    config.server.port = port

    setup_logging(config.logging)

    logger.info(f"Starting {config.name} in development mode")

    # The reloaded worker builds its own app from these variables
    if config_file:
        os.environ["DRIVE_HANDOFF_CONFIG_FILE"] = config_file
    os.environ["DRIVE_HANDOFF_DEBUG"] = "true"
    os.environ["DRIVE_HANDOFF_ENVIRONMENT"] = "development"

    uvicorn.run(
        "drive_handoff.presentation.api.app:create_app_from_config",
        factory=True,
        host=config.server.host,
        port=config.server.port,
        reload=reload,
        reload_dirs=["drive_handoff"],
        log_level=config.logging.level.lower(),
        access_log=True
    )


@cli.command()
def init_config(
    output: str = typer.Option(
        "config.yaml", "--output", "-o", help="Output configuration file"
    ),
    format: str = typer.Option(
        "yaml", "--format", "-f", help="Configuration format (yaml/json)"
    )
) -> None:
    """Generate a default configuration file."""

    config = ApplicationConfig()

    try:
        ConfigLoader().save_config(config, output, format)
        typer.echo(f"Default configuration saved to {output}")
    except Exception as e:
        typer.echo(f"Error saving configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
def validate_config(
    config_file: str = typer.Argument(...,
                                      help="Configuration file to validate")
) -> None:
    """Validate a configuration file."""

    try:
        config = ConfigLoader().load_config(config_file)
    except Exception as e:
        typer.echo(f"Configuration validation failed: {e}", err=True)
        sys.exit(1)

    typer.echo(f"Configuration file {config_file} is valid")
    typer.echo(f"Application: {config.name} v{config.version}")
    typer.echo(f"Environment: {config.environment}")
    typer.echo(f"Drive auth mode: {config.drive.effective_auth_mode}")

    missing = config.drive.missing_settings()
    if missing:
        typer.echo(f"Missing Drive settings: {', '.join(missing)}")


@cli.command()
def health_check(
    server: str = typer.Option(
        "http://localhost:8000", "--server", "-s", help="Session broker URL"
    ),
    timeout: float = typer.Option(10.0, "--timeout", help="Request timeout")
) -> None:
    """Probe a running session broker and report missing Drive settings."""

    async def probe() -> Dict[str, Any]:
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(f"{server.rstrip('/')}/health") as response:
                response.raise_for_status()
                return await response.json()  # type: ignore[no-any-return]

    try:
        report = asyncio.run(probe())
    except aiohttp.ClientError as e:
        typer.echo(f"Session broker unreachable: {e}", err=True)
        sys.exit(1)

    status = report.get("status", "unknown")
    typer.echo(f"Session broker at {server} is {status}")
    for setting in report.get("missing_settings") or []:
        typer.echo(f"  missing {setting}")

    if status != "healthy":
        sys.exit(1)


@cli.command()
def folders(
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    server: Optional[str] = typer.Option(
        None, "--server", "-s", help="Session broker URL"
    ),
    local: bool = typer.Option(
        False, "--local", help="Query Google Drive directly instead of a broker"
    )
) -> None:
    """List the destination folders under the configured root."""

    config = ConfigLoader().load_config(config_file)
    if server:
        config.client.server_url = server

    try:
        result = asyncio.run(run_folders(config, local))
    except Exception as e:
        typer.echo(f"Failed to load folders: {e}", err=True)
        sys.exit(1)

    if not result:
        typer.echo("No folders found")
    for folder in result:
        typer.echo(f"{folder.id}  {folder.name}")


@cli.command()
def upload(
    paths: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="Files to upload"
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", "-c", help="Configuration file path"
    ),
    server: Optional[str] = typer.Option(
        None, "--server", "-s", help="Session broker URL"
    ),
    local: bool = typer.Option(
        False, "--local", help="Create sessions in-process instead of via a broker"
    ),
    folder_id: Optional[str] = typer.Option(
        None, "--folder-id", help="Upload into this existing folder"
    ),
    new_folder: Optional[str] = typer.Option(
        None, "--new-folder", help="Create this folder under the root and upload into it"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level"
    )
) -> None:
    """Upload files straight to Google Drive, one at a time."""

    config = ConfigLoader().load_config(config_file)
    if server:
        config.client.server_url = server
    config.logging.level = (log_level or "WARNING").upper()
    config.logging.file_enabled = False

    setup_logging(config.logging)

    try:
        coordinator = asyncio.run(run_upload(config, paths, folder_id, new_folder, local))
    except Exception as e:
        typer.echo(f"Upload failed: {e}", err=True)
        sys.exit(1)

    for task in coordinator.tasks:
        typer.echo(_describe_task(task))

    status = coordinator.status
    failed = [task for task in coordinator.tasks if task.state is UploadState.ERROR]

    if status is UploadState.SUCCESS:
        typer.echo(f"All {len(coordinator.tasks)} file(s) uploaded successfully")
    else:
        typer.echo(f"{len(failed)} of {len(coordinator.tasks)} file(s) failed", err=True)
        sys.exit(1)


async def run_application(config: ApplicationConfig) -> None:
    """
    Run the session broker server with the given configuration.

    Component startup and shutdown happen in the application lifespan.
    """
    startup = ApplicationStartup(config)
    app = create_app(startup, config)

    server_config = uvicorn.Config(
        app=app,
        host=config.server.host,
        port=config.server.port,
        log_level=config.logging.level.lower(),
        access_log=config.debug
    )

    server = uvicorn.Server(server_config)
    await server.serve()


async def run_folders(config: ApplicationConfig, local: bool) -> list:
    """Fetch the folder listing from a broker or, with ``local``, from Drive."""
    if local:
        startup = ApplicationStartup(config)
        await startup.start_application()
        try:
            return await startup.directory.list_folders()
        finally:
            await startup.stop_application()

    async with SessionBrokerClient(config.client.server_url, config.client.request_timeout) as client:
        return await client.list_folders()


async def run_upload(
    config: ApplicationConfig,
    paths: List[Path],
    folder_id: Optional[str],
    new_folder: Optional[str],
    local: bool
) -> BatchCoordinator:
    """
    Upload ``paths`` as one batch.

    Returns:
        The coordinator, with every task in a terminal state
    """
    startup: Optional[ApplicationStartup] = None
    client: Optional[SessionBrokerClient] = None
    session_source: ISessionSource

    if local:
        startup = ApplicationStartup(config)
        await startup.start_application()
        session_source = startup.broker
    else:
        client = SessionBrokerClient(config.client.server_url, config.client.request_timeout)
        await client.start()
        session_source = client

    engine = AiohttpTransferEngine(chunk_size=config.client.chunk_size)
    coordinator = BatchCoordinator(
        session_source, engine, folder_id=folder_id, new_folder_name=new_folder
    )
    coordinator.add_files(paths)
    coordinator.subscribe(_log_task)

    try:
        async with engine:
            await coordinator.run()
    finally:
        if client is not None:
            await client.stop()
        if startup is not None:
            await startup.stop_application()

    return coordinator


def _log_task(task: UploadTask) -> None:
    logger.debug(f"{task.file.name}: {task.state.value} {task.progress}%")


def _describe_task(task: UploadTask) -> str:
    line = f"[{task.state.value}] {task.file.name} ({format_bytes(task.file.size)})"
    if task.state is UploadState.ERROR:
        line += f": {task.error}"
    elif task.upload_duration is not None:
        line += f" in {task.upload_duration:.2f}s"
    return line


def main() -> None:
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
