"""Entry point ASGI para hospedagem stateless (ex: ``uvicorn voxmod.asgi:app``).

A configuracao vem inteiramente do ambiente; use VOXMOD_DEPLOYMENT_MODE=serverless
em plataformas sem filesystem persistente.
"""

from __future__ import annotations

from voxmod.config.settings import Settings
from voxmod.logging import configure_logging
from voxmod.server.app import create_app

configure_logging()

app = create_app(Settings.from_env())
