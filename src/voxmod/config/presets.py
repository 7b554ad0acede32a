"""Perfil de qualidade do TTS e tabela de presets exposta ao cliente."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class TTSProfile(BaseModel):
    """Parametros fixos enviados ao endpoint de TTS.

    Nao configuravel pelo cliente: os valores foram ajustados para
    consistencia com a voz original.
    """

    model_config = {"frozen": True}

    model: str = "s1"
    format: str = "mp3"
    temperature: float = 0.5
    top_p: float = 0.6
    chunk_length: int = 250
    normalize: bool = True
    latency: str = "normal"
    repetition_penalty: float = 1.2
    mp3_bitrate: int = 192
    speed: float = 1.0
    volume: float = 0

    def request_body(self, model_id: str, text: str) -> dict[str, Any]:
        """Body JSON da request de sintese (o modelo vai no header)."""
        body = self.model_dump(exclude={"model"})
        return {"reference_id": model_id, "text": text, **body}


DEFAULT_TTS_PROFILE = TTSProfile()

QUALITY_PRESETS: dict[str, dict[str, Any]] = {
    "consistent": {
        "temperature": 0.4,
        "top_p": 0.5,
        "description": "Most consistent with original voice",
    },
    "balanced": {
        "temperature": 0.6,
        "top_p": 0.7,
        "description": "Balance of consistency and variation",
    },
    "expressive": {
        "temperature": 0.8,
        "top_p": 0.85,
        "description": "More expressive and natural",
    },
}

RECORDING_GUIDELINES: dict[str, Any] = {
    "duration": "30-45 seconds per sample",
    "sampleRate": "44.1kHz or 48kHz",
    "environment": "Quiet room, no echo or background noise",
    "content": "Natural speech with varied intonation",
    "tips": [
        "Speak at your natural pace",
        "Include varied emotions and expressions",
        "Avoid background music or noise",
        "Use a quality microphone if available",
        "Multiple samples improve quality (future feature)",
    ],
}


def presets_payload(profile: TTSProfile = DEFAULT_TTS_PROFILE) -> dict[str, Any]:
    """Tabela estatica servida em GET /api/voice/presets."""
    return {
        "presets": QUALITY_PRESETS,
        "recordingGuidelines": RECORDING_GUIDELINES,
        "currentDefaults": profile.model_dump(
            include={
                "temperature",
                "top_p",
                "chunk_length",
                "normalize",
                "latency",
                "repetition_penalty",
                "mp3_bitrate",
            }
        ),
    }
