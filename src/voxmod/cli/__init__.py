"""CLI do voxmod.

Registra todos os comandos no grupo principal.
"""

from voxmod.cli.capabilities import capabilities
from voxmod.cli.main import cli
from voxmod.cli.serve import serve

__all__ = [
    "capabilities",
    "cli",
    "serve",
]
