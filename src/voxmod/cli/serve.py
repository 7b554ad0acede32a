"""Comando `voxmod serve` — inicia o API Server."""

from __future__ import annotations

import asyncio
import signal
import sys
from typing import TYPE_CHECKING

import click

from voxmod._types import DeploymentMode
from voxmod.cli.main import cli
from voxmod.logging import configure_logging, get_logger

if TYPE_CHECKING:
    from voxmod.config.settings import Settings

logger = get_logger("cli.serve")


@cli.command()
@click.option("--host", default=None, help="Host do API Server. Default: VOXMOD_HOST ou 127.0.0.1.")
@click.option("--port", default=None, type=int, help="Porta HTTP. Default: PORT ou 3000.")
@click.option(
    "--mode",
    type=click.Choice([m.value for m in DeploymentMode]),
    default=None,
    help="Modo de deploy. Default: VOXMOD_DEPLOYMENT_MODE ou persistent.",
)
@click.option(
    "--cors-origins",
    default="",
    help="CORS origins (comma-separated). Ex: http://localhost:5173",
)
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default="console",
    show_default=True,
    help="Formato de log.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"]),
    default="INFO",
    show_default=True,
    help="Nivel de log.",
)
def serve(
    host: str | None,
    port: int | None,
    mode: str | None,
    cors_origins: str,
    log_format: str,
    log_level: str,
) -> None:
    """Inicia o voxmod API Server."""
    from voxmod.config.settings import Settings
    from voxmod.exceptions import ConfigError

    configure_logging(log_format=log_format, level=log_level, force=True)

    try:
        settings = Settings.from_env()
        overrides: dict[str, object] = {}
        if host:
            overrides["host"] = host
        if port is not None:
            overrides["port"] = port
        if mode:
            overrides["deployment_mode"] = DeploymentMode(mode)
        origins = [o.strip() for o in cors_origins.split(",") if o.strip()]
        if origins:
            overrides["cors_origins"] = origins
        if overrides:
            settings = Settings.model_validate({**settings.model_dump(), **overrides})
    except (ConfigError, ValueError) as exc:
        logger.error("invalid_configuration", error=str(exc))
        click.echo(f"Erro de configuracao: {exc}", err=True)
        sys.exit(1)

    asyncio.run(_serve(settings))


async def _serve(settings: Settings) -> None:
    """Fluxo async principal do serve."""
    import uvicorn

    from voxmod.server.app import create_app

    app = create_app(settings)

    logger.info(
        "server_starting",
        host=settings.host,
        port=settings.port,
        mode=settings.deployment_mode.value,
    )

    shutdown_event = asyncio.Event()
    loop = asyncio.get_running_loop()

    def _handle_signal(s: signal.Signals) -> None:
        logger.info("shutdown_signal", signal=s.name)
        shutdown_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _handle_signal, sig)

    config = uvicorn.Config(app, host=settings.host, port=settings.port, log_level="warning")
    server = uvicorn.Server(config)

    server_task = asyncio.create_task(server.serve())

    # Espera o sinal de shutdown ou o servidor parar sozinho
    _done, _ = await asyncio.wait(
        [server_task, asyncio.create_task(shutdown_event.wait())],
        return_when=asyncio.FIRST_COMPLETED,
    )

    if not server_task.done():
        server.should_exit = True
        await server_task

    logger.info("server_stopped")
