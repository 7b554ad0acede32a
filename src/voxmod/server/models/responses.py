"""Modelos de resposta da API: Pydantic models serializados em camelCase."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from voxmod._types import FormatInfo, TranscriptProvenance  # noqa: TC001


class CamelModel(BaseModel):
    """Base com aliases camelCase, o formato esperado pelo cliente web."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        protected_namespaces=(),
    )


class TranscriptionInfo(CamelModel):
    """Procedencia da transcricao usada no treino."""

    source: str
    text: str | None = None
    character_count: int = 0
    auto_transcription_available: bool = False
    error: str | None = None

    @classmethod
    def from_provenance(cls, provenance: TranscriptProvenance) -> TranscriptionInfo:
        return cls(
            source=provenance.source.value,
            text=provenance.text or None,
            character_count=provenance.character_count,
            auto_transcription_available=provenance.auto_transcription_available,
            error=provenance.error,
        )


class FormatInfoResponse(CamelModel):
    """Formato original vs. formato enviado ao provider."""

    original_format: str
    uploaded_format: str
    converted: bool

    @classmethod
    def from_info(cls, info: FormatInfo) -> FormatInfoResponse:
        return cls(
            original_format=info.original_format,
            uploaded_format=info.uploaded_format,
            converted=info.converted,
        )


class VoiceUploadResponse(CamelModel):
    """Resposta de POST /api/voice/upload."""

    success: bool = True
    model_id: str
    message: str = "Voice uploaded and model created successfully"
    format_info: FormatInfoResponse
    transcription: TranscriptionInfo


class TranscribeResponse(CamelModel):
    """Resposta de sucesso de POST /api/transcribe."""

    success: bool = True
    text: str
    character_count: int


class GenerateSpeechResponse(CamelModel):
    """Resposta JSON de POST /api/voice/generate.

    audio (base64) so e preenchido no modo serverless.
    """

    success: bool = True
    audio_url: str
    audio: str | None = None
    message: str = "Speech generated successfully"


class ErrorDetail(BaseModel):
    """Detalhe de um erro."""

    message: str
    type: str
    code: str
    details: Any = None
    suggestion: str | None = None


class ErrorResponse(BaseModel):
    """Envelope de erro de todas as rotas."""

    error: ErrorDetail
