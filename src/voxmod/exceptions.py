"""Exceptions tipadas do voxmod.

Hierarquia:
    VoxmodError (base)
    +-- ConfigError
    +-- AudioError
    |   +-- AudioMissingError
    |   +-- AudioFormatError
    |   +-- AudioTooLargeError
    +-- InvalidRequestError
    +-- TranscriptionUnavailableError
    +-- ProviderError
    |   +-- ProviderRejectedError
    |   +-- ProviderTimeoutError
    |   +-- ProviderUnavailableError
    +-- VoiceUploadRejectedError
"""

from __future__ import annotations

from typing import Any


class VoxmodError(Exception):
    """Base para todas as exceptions do voxmod."""


# --- Configuracao ---


class ConfigError(VoxmodError):
    """Erro de configuracao do servidor."""

    def __init__(self, setting: str, reason: str) -> None:
        self.setting = setting
        self.reason = reason
        super().__init__(f"Configuracao '{setting}' invalida: {reason}")


# --- Audio ---


class AudioError(VoxmodError):
    """Erro relacionado ao audio recebido."""


class AudioMissingError(AudioError):
    """Request sem arquivo de audio."""

    def __init__(self) -> None:
        super().__init__("No audio file provided")


class AudioFormatError(AudioError):
    """Formato de audio nao suportado."""

    def __init__(self, mime_type: str | None, detail: str | None = None) -> None:
        self.mime_type = mime_type
        self.detail = detail or (
            f"Unsupported audio format: {mime_type}. "
            "Supported formats: MP3, WAV, M4A, WebM, OGG, FLAC"
        )
        super().__init__(self.detail)


class AudioTooLargeError(AudioError):
    """Arquivo de audio excede o limite permitido."""

    def __init__(self, size_bytes: int, max_bytes: int) -> None:
        self.size_bytes = size_bytes
        self.max_bytes = max_bytes
        size_mb = size_bytes / (1024 * 1024)
        max_mb = max_bytes / (1024 * 1024)
        super().__init__(f"Audio file ({size_mb:.1f}MB) exceeds the {max_mb:.0f}MB limit")


# --- Request ---


class InvalidRequestError(VoxmodError):
    """Parametro de request invalido."""

    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(detail)


class TranscriptionUnavailableError(VoxmodError):
    """Servico de transcricao nao configurado neste processo."""

    def __init__(self) -> None:
        super().__init__("Transcription service not available")


# --- Provider externo ---


class ProviderError(VoxmodError):
    """Falha em chamada ao provider externo de clonagem/TTS.

    Carrega o payload de erro do provider para diagnostico.
    """

    def __init__(
        self,
        operation: str,
        status_code: int | None = None,
        payload: Any = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.payload = payload
        msg = f"Provider falhou em '{operation}'"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        super().__init__(msg)


class ProviderRejectedError(ProviderError):
    """Provider rejeitou a request (validacao ou formato)."""


class ProviderTimeoutError(ProviderError):
    """Provider nao respondeu dentro do timeout."""

    def __init__(self, operation: str, timeout_seconds: float | None) -> None:
        self.timeout_seconds = timeout_seconds
        super().__init__(operation)


class ProviderUnavailableError(ProviderError):
    """Provider inacessivel (erro de transporte)."""


# --- Pipeline ---


class VoiceUploadRejectedError(VoxmodError):
    """Provider recusou o audio do upload; inclui sugestao de remediacao."""

    def __init__(self, mime_type: str, details: Any, suggestion: str) -> None:
        self.mime_type = mime_type
        self.details = details
        self.suggestion = suggestion
        super().__init__("Audio format not accepted by the voice cloning provider")
