"""Registro append-only de inscricoes no waitlist.

Nao e um store: cada inscricao vira uma linha JSON no arquivo (ou apenas
um evento de log quando nao ha arquivo, ex: serverless). Nada e lido de volta.
"""

from __future__ import annotations

import json
import threading
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from voxmod.logging import get_logger

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger("waitlist")


class WaitlistLog:
    """Append de inscricoes em JSON Lines.

    Args:
        path: Arquivo destino. None registra apenas em log.
    """

    def __init__(self, path: Path | None) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path | None:
        return self._path

    def append(self, email: str, signup_type: str | None = None) -> dict[str, Any]:
        """Registra uma inscricao e retorna a entrada gravada."""
        entry = {
            "email": email,
            "type": signup_type,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        logger.info("waitlist_signup", email=email, type=signup_type)

        if self._path is None:
            return entry

        line = json.dumps(entry, ensure_ascii=False)
        with self._lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        return entry
