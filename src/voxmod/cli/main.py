"""Grupo principal de comandos CLI do voxmod."""

from __future__ import annotations

import click

import voxmod


@click.group()
@click.version_option(version=voxmod.__version__, prog_name="voxmod")
def cli() -> None:
    """voxmod: clonagem de voz e sintese de fala via HTTP."""
