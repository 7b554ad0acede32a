"""Speech Generation Adapter: texto + modelo de voz -> audio sintetizado."""

from __future__ import annotations

from typing import TYPE_CHECKING

from voxmod._types import SpeechResult
from voxmod.config.presets import DEFAULT_TTS_PROFILE
from voxmod.exceptions import InvalidRequestError
from voxmod.logging import get_logger, preview

if TYPE_CHECKING:
    from voxmod.config.presets import TTSProfile
    from voxmod.providers.fish_audio import FishAudioClient

logger = get_logger("pipeline.speech")

_CONTENT_TYPES = {"mp3": "audio/mpeg", "wav": "audio/wav", "opus": "audio/ogg"}


class SpeechGenerator:
    """Chamada stateless ao TTS com perfil de qualidade fixo.

    Uma unica tentativa por request; falhas do provider propagam como
    ProviderError para o chamador, que pode reenviar.
    """

    def __init__(self, client: FishAudioClient, profile: TTSProfile = DEFAULT_TTS_PROFILE) -> None:
        self._client = client
        self._profile = profile

    @property
    def profile(self) -> TTSProfile:
        return self._profile

    async def generate(self, model_id: str | None, text: str | None) -> SpeechResult:
        """Sintetiza text com a voz model_id.

        Raises:
            InvalidRequestError: model_id ou text ausentes (nenhuma chamada ao provider).
            ProviderError: Falha do provider.
        """
        if not model_id or not text or not text.strip():
            raise InvalidRequestError("Missing modelId or text")

        logger.info(
            "speech_request",
            model_id=model_id,
            text_length=len(text),
            text_preview=preview(text),
            temperature=self._profile.temperature,
            top_p=self._profile.top_p,
        )

        audio = await self._client.synthesize(model_id, text, self._profile)

        logger.info("speech_done", model_id=model_id, audio_bytes=len(audio))
        content_type = _CONTENT_TYPES.get(self._profile.format, "application/octet-stream")
        return SpeechResult(audio=audio, content_type=content_type)
