"""Structured logging para o voxmod.

structlog sobre stdlib logging. Formatos:
- console: legivel em desenvolvimento (default)
- json: uma linha JSON por evento, para producao e plataformas serverless

Contexto por request (request_id, rota) fica em contextvars e e mesclado
em todos os eventos emitidos durante a request.
"""

from __future__ import annotations

import logging
import os
from typing import Any

import structlog

_configured = False

_PREVIEW_CHARS = 100


def configure_logging(
    log_format: str | None = None,
    level: str | None = None,
    *,
    force: bool = False,
) -> None:
    """Configura logging estruturado.

    Idempotente: chamadas subsequentes sao ignoradas, exceto com force=True
    (usado pela CLI para aplicar --log-format depois dos imports).

    Args:
        log_format: "json" ou "console". Default via VOXMOD_LOG_FORMAT ou "console".
        level: DEBUG, INFO, WARNING ou ERROR. Default via VOXMOD_LOG_LEVEL ou "INFO".
        force: Reconfigura mesmo se ja configurado.
    """
    global _configured
    if _configured and not force:
        return

    resolved_format = log_format or os.environ.get("VOXMOD_LOG_FORMAT", "console")
    resolved_level = level or os.environ.get("VOXMOD_LOG_LEVEL", "INFO")

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if resolved_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, resolved_level.upper(), logging.INFO))

    # uvicorn e httpx emitem seus proprios logs; mantem apenas avisos
    for noisy in ("httpx", "httpcore", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    _configured = True


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Retorna logger com o campo component vinculado.

    Args:
        component: Nome do componente (ex: "pipeline.upload", "providers.fish_audio").
    """
    configure_logging()
    return structlog.get_logger().bind(component=component)  # type: ignore[no-any-return]


def bind_request_context(**values: Any) -> None:
    """Vincula valores ao contexto da request corrente (ex: request_id)."""
    structlog.contextvars.bind_contextvars(**values)


def clear_request_context() -> None:
    """Remove todo o contexto de request vinculado."""
    structlog.contextvars.clear_contextvars()


def preview(text: str, limit: int = _PREVIEW_CHARS) -> str:
    """Trecho curto de um texto para logs, com reticencias quando truncado."""
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
