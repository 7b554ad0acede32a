"""Comando `voxmod capabilities`: mostra o que este host suporta."""

from __future__ import annotations

import json
import sys

import click

from voxmod.cli.main import cli


@cli.command()
@click.option(
    "--ffmpeg",
    "ffmpeg_binary",
    default=None,
    help="Binario do ffmpeg a sondar. Default: VOXMOD_FFMPEG_BINARY ou ffmpeg.",
)
def capabilities(ffmpeg_binary: str | None) -> None:
    """Executa o probe de capacidades e imprime o resultado em JSON."""
    from voxmod.audio.transcoder import FFmpegTranscoder
    from voxmod.capabilities import capabilities_payload, probe_capabilities
    from voxmod.config.settings import Settings
    from voxmod.exceptions import ConfigError

    try:
        settings = Settings.from_env()
    except ConfigError as exc:
        click.echo(f"Erro de configuracao: {exc}", err=True)
        sys.exit(1)

    transcoder = FFmpegTranscoder(ffmpeg_binary or settings.ffmpeg_binary)
    snapshot = probe_capabilities(settings, transcoder)
    click.echo(json.dumps(capabilities_payload(snapshot, settings), indent=2))
