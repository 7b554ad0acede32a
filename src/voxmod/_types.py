"""Tipos fundamentais do voxmod.

Este modulo define enums e dataclasses transitorios usados por todos os
componentes do pipeline de captura. Nada aqui e persistido: cada valor vive
apenas durante uma request, exceto o CapabilitySnapshot, calculado uma vez
no startup.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path  # noqa: TC003

MAX_UPLOAD_BYTES = 10 * 1024 * 1024  # 10MB
MAX_TRANSCRIPTION_BYTES = 25 * 1024 * 1024  # 25MB
MAX_TRANSCRIPT_CHARS = 500


class FormatClass(Enum):
    """Classificacao de um formato de audio frente ao provider de clonagem.

    - NATIVE: aceito pelo provider sem conversao
    - NEEDS_TRANSCODE: precisa de conversao antes do envio (WebM, OGG)
    - UNSUPPORTED: rejeitado na entrada
    """

    NATIVE = "native"
    NEEDS_TRANSCODE = "needs_transcode"
    UNSUPPORTED = "unsupported"


class TranscriptSource(Enum):
    """Procedencia do texto de transcricao anexado ao modelo de voz."""

    NONE = "none"
    USER = "user"
    AUTO = "auto"
    FAILED = "failed"


class DeploymentMode(Enum):
    """Modelo de hospedagem do servidor.

    PERSISTENT: processo longo, serve arquivos estaticos e audio gerado em disco.
    SERVERLESS: handler stateless, audio gerado devolvido inline em base64.
    """

    PERSISTENT = "persistent"
    SERVERLESS = "serverless"


@dataclass(frozen=True, slots=True)
class AudioAsset:
    """Arquivo de audio recebido, gravado em arquivo temporario."""

    path: Path
    mime_type: str
    filename: str
    size_bytes: int

    def with_replacement(self, path: Path, mime_type: str, filename: str) -> AudioAsset:
        """Retorna o asset substituto (ex: apos transcoding)."""
        size = path.stat().st_size if path.exists() else self.size_bytes
        return replace(self, path=path, mime_type=mime_type, filename=filename, size_bytes=size)


@dataclass(frozen=True, slots=True)
class TranscriptionResult:
    """Resultado do adaptador de transcricao.

    Falhas sao valores, nao exceptions: success=False com error preenchido.
    """

    success: bool
    text: str = ""
    error: str | None = None


@dataclass(frozen=True, slots=True)
class TranscriptProvenance:
    """Registro da origem do texto usado no treino do modelo."""

    source: TranscriptSource
    text: str | None = None
    auto_transcription_available: bool = False
    error: str | None = None

    @property
    def character_count(self) -> int:
        return len(self.text) if self.text else 0


@dataclass(frozen=True, slots=True)
class FormatInfo:
    """Formato original vs. formato efetivamente enviado ao provider."""

    original_format: str
    uploaded_format: str
    converted: bool


@dataclass(frozen=True, slots=True)
class VoiceModelHandle:
    """Identificador do modelo de voz atribuido pelo provider."""

    model_id: str
    state: str | None = None


@dataclass(frozen=True, slots=True)
class SpeechResult:
    """Audio sintetizado pelo provider de TTS."""

    audio: bytes
    content_type: str = "audio/mpeg"


@dataclass(frozen=True, slots=True)
class CapabilitySnapshot:
    """Capacidades opcionais disponiveis no processo.

    Calculado uma vez no startup e passado explicitamente aos componentes.
    Imutavel durante toda a vida do processo.
    """

    transcoding_available: bool
    transcription_available: bool
    cloning_configured: bool = False
    supported_formats: frozenset[str] = field(default_factory=frozenset)
    native_formats: frozenset[str] = field(default_factory=frozenset)
    conversion_formats: frozenset[str] = field(default_factory=frozenset)
