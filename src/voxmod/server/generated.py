"""Audio gerado gravado em disco (modo persistent) e servido em /generated."""

from __future__ import annotations

import time
import uuid
from typing import TYPE_CHECKING

from voxmod.logging import get_logger
from voxmod.server.constants import GENERATED_ROUTE

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger("server.generated")


class GeneratedAudioStore:
    """Grava audio sintetizado em directory e devolve a URL publica.

    Os arquivos sao incidentais: nada depende deles entre restarts.
    """

    def __init__(self, directory: Path) -> None:
        self._directory = directory

    @property
    def directory(self) -> Path:
        return self._directory

    def save(self, audio: bytes, extension: str = "mp3") -> str:
        """Grava o audio e retorna a URL relativa (ex: /generated/voice-...mp3)."""
        self._directory.mkdir(parents=True, exist_ok=True)
        filename = f"voice-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{extension}"
        (self._directory / filename).write_bytes(audio)
        logger.info("generated_audio_saved", filename=filename, audio_bytes=len(audio))
        return f"{GENERATED_ROUTE}/{filename}"
