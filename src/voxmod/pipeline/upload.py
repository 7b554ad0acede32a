"""Voice Upload Orchestrator: upload -> transcode opcional -> transcricao opcional -> provider.

Pipeline estritamente sequencial: a saida de cada etapa alimenta a seguinte.
Duas degradacoes sao aceitas sem falhar a request:
- transcoding indisponivel ou falho: envia o audio original
- transcricao automatica falha: cria o modelo sem transcricao (source=failed)

Todo arquivo temporario da request e removido em qualquer caminho de saida.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from voxmod._types import (
    MAX_TRANSCRIPT_CHARS,
    FormatClass,
    FormatInfo,
    TranscriptProvenance,
    TranscriptSource,
)
from voxmod.audio.formats import CANONICAL_MIME_TYPE, canonical_filename, classify
from voxmod.audio.tempfiles import TempFileScope
from voxmod.audio.transcoder import output_path_for
from voxmod.exceptions import AudioMissingError, ProviderRejectedError, VoiceUploadRejectedError
from voxmod.logging import get_logger, preview
from voxmod.providers.fish_audio import ModelCreateForm

if TYPE_CHECKING:
    from voxmod._types import AudioAsset, CapabilitySnapshot, VoiceModelHandle
    from voxmod.audio.transcoder import FFmpegTranscoder
    from voxmod.providers.fish_audio import FishAudioClient
    from voxmod.providers.transcription import WhisperTranscriber

logger = get_logger("pipeline.upload")

UPLOAD_SUGGESTION = "Try uploading an MP3 or WAV file, or record using Chrome browser."


def truncate_transcript(text: str, limit: int = MAX_TRANSCRIPT_CHARS) -> str:
    """Limita a transcricao ao maximo aceito pelo provider. Nunca rejeita."""
    if len(text) > limit:
        logger.info("transcript_truncated", original_chars=len(text), max_chars=limit)
        return text[:limit]
    return text


def default_title() -> str:
    return f"Voice Clone {int(time.time() * 1000)}"


@dataclass(frozen=True, slots=True)
class VoiceUploadRequest:
    """Entrada do pipeline.

    O orchestrator assume a posse do arquivo do asset e o remove ao final.
    auto_transcribe=False e o opt-out explicito do cliente.
    """

    asset: AudioAsset | None
    name: str | None = None
    text: str | None = None
    auto_transcribe: bool = True


@dataclass(frozen=True, slots=True)
class VoiceUploadResult:
    """Modelo criado + procedencia da transcricao + formato enviado."""

    model: VoiceModelHandle
    transcription: TranscriptProvenance
    format_info: FormatInfo

    @property
    def model_id(self) -> str:
        return self.model.model_id


class VoiceUploadOrchestrator:
    """Orquestra a criacao de um modelo de voz a partir de uma amostra.

    Args:
        capabilities: Snapshot imutavel calculado no startup.
        cloning_client: Cliente do provider de clonagem.
        transcoder: Adaptador de conversao (ffmpeg).
        transcriber: Adaptador de transcricao.
    """

    def __init__(
        self,
        *,
        capabilities: CapabilitySnapshot,
        cloning_client: FishAudioClient,
        transcoder: FFmpegTranscoder,
        transcriber: WhisperTranscriber,
    ) -> None:
        self._capabilities = capabilities
        self._client = cloning_client
        self._transcoder = transcoder
        self._transcriber = transcriber

    async def run(self, request: VoiceUploadRequest) -> VoiceUploadResult:
        """Executa o pipeline completo.

        Raises:
            AudioMissingError: Request sem audio.
            VoiceUploadRejectedError: Provider recusou o audio ou os campos.
            ProviderError: Demais falhas do provider (payload anexado).
        """
        if request.asset is None:
            raise AudioMissingError()

        original = request.asset
        with TempFileScope() as scope:
            scope.track(original.path)

            logger.info(
                "voice_upload_start",
                filename=original.filename,
                mime_type=original.mime_type,
                size_kb=round(original.size_bytes / 1024, 2),
            )

            asset = await self._prepare_asset(original, scope)
            provenance = await self._resolve_transcript(request, asset)

            form = ModelCreateForm(
                title=request.name or default_title(),
                texts=provenance.text or "",
            )

            try:
                model = await self._client.create_model(form, asset)
            except ProviderRejectedError as exc:
                raise VoiceUploadRejectedError(
                    original.mime_type,
                    self._rejection_details(original.mime_type, exc.payload),
                    UPLOAD_SUGGESTION,
                ) from exc

        logger.info(
            "voice_upload_done",
            model_id=model.model_id,
            transcript_source=provenance.source.value,
        )
        return VoiceUploadResult(
            model=model,
            transcription=provenance,
            format_info=FormatInfo(
                original_format=original.mime_type,
                uploaded_format=asset.mime_type,
                converted=asset.mime_type != original.mime_type,
            ),
        )

    async def _prepare_asset(self, asset: AudioAsset, scope: TempFileScope) -> AudioAsset:
        """Converte WebM/OGG para WAV quando possivel; senao mantem o original."""
        if classify(asset.mime_type, asset.filename) != FormatClass.NEEDS_TRANSCODE:
            return asset

        if not self._capabilities.transcoding_available:
            logger.warning(
                "transcode_fallback",
                reason="transcoding_unavailable",
                mime_type=asset.mime_type,
                note="uploading original format; provider may reject it",
            )
            return asset

        # Registrado antes da conversao para cobrir cancelamento durante o ffmpeg
        scope.track(output_path_for(asset.path))
        converted = await self._transcoder.convert(asset.path, asset.mime_type)
        if converted is None:
            logger.warning(
                "transcode_fallback",
                reason="conversion_failed",
                mime_type=asset.mime_type,
                note="uploading original format; provider may reject it",
            )
            return asset

        scope.track(converted)
        return asset.with_replacement(
            converted,
            CANONICAL_MIME_TYPE,
            canonical_filename(asset.filename),
        )

    async def _resolve_transcript(
        self, request: VoiceUploadRequest, asset: AudioAsset
    ) -> TranscriptProvenance:
        """Decide o texto de treino: usuario > automatico > nenhum."""
        available = self._capabilities.transcription_available

        if request.text:
            text = truncate_transcript(request.text)
            return TranscriptProvenance(
                source=TranscriptSource.USER,
                text=text,
                auto_transcription_available=available,
            )

        if not request.auto_transcribe or not available:
            logger.info(
                "transcript_skipped",
                auto_transcribe=request.auto_transcribe,
                transcription_available=available,
            )
            return TranscriptProvenance(
                source=TranscriptSource.NONE,
                auto_transcription_available=available,
            )

        result = await self._transcriber.transcribe(asset.path, asset.mime_type)
        if not result.success:
            logger.warning("auto_transcription_failed", error=result.error)
            return TranscriptProvenance(
                source=TranscriptSource.FAILED,
                auto_transcription_available=available,
                error=result.error,
            )

        text = truncate_transcript(result.text)
        logger.info("auto_transcription_used", characters=len(text), preview=preview(text))
        return TranscriptProvenance(
            source=TranscriptSource.AUTO,
            text=text,
            auto_transcription_available=available,
        )

    def _rejection_details(self, mime_type: str, provider_payload: Any) -> dict[str, Any]:
        message = (
            f"The audio format ({mime_type}) may not be supported. "
            "Try recording in a different browser or uploading an MP3/WAV file."
        )
        if not self._capabilities.transcoding_available:
            message += " Install FFmpeg on the server to enable automatic format conversion."
        return {"message": message, "provider": provider_payload}
