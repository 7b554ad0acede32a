"""Transcription Adapter: speech-to-text via OpenAI Whisper API.

Transcricao e opcional: sem credencial, toda chamada retorna
success=False com erro fixo, sem tocar a rede. Chamadores tratam isso
como resultado normal, nao como falha.
"""

from __future__ import annotations

import contextlib
from typing import TYPE_CHECKING, Any

import openai

from voxmod._types import MAX_TRANSCRIPTION_BYTES, TranscriptionResult
from voxmod.audio.formats import extension_for_mime
from voxmod.audio.tempfiles import temporary_copy_with_suffix
from voxmod.config.settings import OPENAI_KEY_PLACEHOLDER
from voxmod.logging import get_logger, preview

if TYPE_CHECKING:
    from pathlib import Path

logger = get_logger("providers.transcription")

NOT_CONFIGURED_ERROR = "Transcription service not configured. Add OPENAI_API_KEY to enable."


def _friendly_error(exc: openai.OpenAIError) -> str:
    """Traduz erros conhecidos da API em mensagens acionaveis."""
    code = getattr(exc, "code", None)
    message = str(exc) or "Transcription failed"
    if isinstance(exc, openai.AuthenticationError) or code == "invalid_api_key":
        return "Invalid OpenAI API key. Please check your OPENAI_API_KEY."
    if code == "insufficient_quota":
        return "OpenAI API quota exceeded. Please check your billing."
    if "audio" in message.lower():
        return "Audio format not supported for transcription. Try converting to WAV or MP3."
    return message


class WhisperTranscriber:
    """Cliente de transcricao com gate de tamanho e correcao de extensao.

    Args:
        api_key: Chave da OpenAI. None, vazio ou placeholder desabilitam o adaptador.
        model: Modelo de transcricao.
        language: Idioma fixo (nao ha auto-deteccao).
        client: Cliente AsyncOpenAI pre-construido (testes).
        max_bytes: Tamanho maximo aceito pela API.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        model: str = "whisper-1",
        language: str = "en",
        client: Any = None,
        max_bytes: int = MAX_TRANSCRIPTION_BYTES,
        timeout: float | None = None,
    ) -> None:
        self._model = model
        self._language = language
        self._max_bytes = max_bytes
        configured = bool(api_key) and api_key != OPENAI_KEY_PLACEHOLDER
        if client is not None:
            self._client = client
        elif configured:
            self._client = openai.AsyncOpenAI(api_key=api_key, timeout=timeout, max_retries=0)
        else:
            self._client = None

    @property
    def available(self) -> bool:
        return self._client is not None

    @property
    def max_bytes(self) -> int:
        return self._max_bytes

    async def transcribe(self, path: Path, mime_type: str | None = None) -> TranscriptionResult:
        """Transcreve o arquivo e retorna texto verbatim.

        Pre-condicoes verificadas localmente, sem chamada de rede:
        adaptador configurado, arquivo existente e dentro do limite de tamanho.
        A API exige nome de arquivo com extensao real; arquivos sem extensao
        sao copiados temporariamente com a extensao derivada do MIME.
        """
        if self._client is None:
            return TranscriptionResult(success=False, error=NOT_CONFIGURED_ERROR)

        if not path.exists():
            return TranscriptionResult(success=False, error="Audio file not found")

        size = path.stat().st_size
        if size > self._max_bytes:
            logger.warning("transcription_too_large", size_bytes=size, max_bytes=self._max_bytes)
            max_mb = self._max_bytes // (1024 * 1024)
            return TranscriptionResult(
                success=False,
                error=f"Audio file too large for transcription (max {max_mb}MB)",
            )

        logger.info(
            "transcription_start",
            size_mb=round(size / (1024 * 1024), 2),
            mime_type=mime_type,
        )

        try:
            with contextlib.ExitStack() as stack:
                target = path
                if not path.suffix:
                    suffix = extension_for_mime(mime_type)
                    target = stack.enter_context(temporary_copy_with_suffix(path, suffix))
                text = await self._request(target)
        except openai.OpenAIError as exc:
            logger.warning("transcription_failed", error=str(exc), error_type=type(exc).__name__)
            return TranscriptionResult(success=False, error=_friendly_error(exc))
        except OSError as exc:
            logger.warning("transcription_failed", error=str(exc), error_type=type(exc).__name__)
            return TranscriptionResult(success=False, error=str(exc) or "Transcription failed")

        logger.info("transcription_done", characters=len(text), preview=preview(text))
        return TranscriptionResult(success=True, text=text)

    async def _request(self, path: Path) -> str:
        with path.open("rb") as audio_file:
            result = await self._client.audio.transcriptions.create(
                file=audio_file,
                model=self._model,
                language=self._language,
                response_format="text",
            )
        if isinstance(result, str):
            return result
        return str(getattr(result, "text", result))
