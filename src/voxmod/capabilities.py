"""Capability snapshot e payloads de health/capabilities.

O snapshot e calculado uma vez no startup (probe do ffmpeg, presenca da
credencial de transcricao) e lido sem mutacao pelo resto do processo.
"""

from __future__ import annotations

import platform
import sys
from typing import TYPE_CHECKING, Any

import voxmod
from voxmod._types import MAX_TRANSCRIPTION_BYTES, CapabilitySnapshot, DeploymentMode
from voxmod.audio.formats import CONVERSION_FORMATS, NATIVE_FORMATS, SUPPORTED_FORMATS
from voxmod.logging import get_logger

if TYPE_CHECKING:
    from voxmod.audio.transcoder import FFmpegTranscoder
    from voxmod.config.settings import Settings

logger = get_logger("capabilities")

SERVICE_MESSAGE = "Culture Voices API is running"

# Extensoes aceitas pela API de transcricao
TRANSCRIPTION_FORMATS = ("mp3", "mp4", "m4a", "wav", "webm", "ogg", "flac")


def probe_capabilities(
    settings: Settings,
    transcoder: FFmpegTranscoder | None = None,
) -> CapabilitySnapshot:
    """Descobre as capacidades opcionais do processo.

    Args:
        settings: Configuracao do processo.
        transcoder: Transcoder a sondar. None desabilita transcoding.
    """
    transcoding = transcoder.probe() if transcoder is not None else False
    snapshot = CapabilitySnapshot(
        transcoding_available=transcoding,
        transcription_available=settings.transcription_configured,
        cloning_configured=settings.cloning_configured,
        supported_formats=SUPPORTED_FORMATS,
        native_formats=NATIVE_FORMATS,
        conversion_formats=CONVERSION_FORMATS,
    )

    logger.info(
        "capabilities_probed",
        transcoding_available=snapshot.transcoding_available,
        transcription_available=snapshot.transcription_available,
        cloning_configured=snapshot.cloning_configured,
    )
    if not snapshot.transcoding_available:
        logger.info("transcoding_disabled", hint="install ffmpeg to enable WebM/OGG conversion")
    if not snapshot.transcription_available:
        logger.info("transcription_disabled", hint="set OPENAI_API_KEY to enable")
    if not snapshot.cloning_configured:
        logger.warning("cloning_not_configured", hint="set FISH_AUDIO_API_KEY")
    return snapshot


def _sorted(formats: frozenset[str]) -> list[str]:
    return sorted(formats)


def health_payload(snapshot: CapabilitySnapshot, mode: DeploymentMode) -> dict[str, Any]:
    """Resumo de liveness + capacidades (GET /api/health)."""
    return {
        "status": "ok",
        "message": SERVICE_MESSAGE,
        "environment": mode.value,
        "capabilities": {
            "ffmpegAvailable": snapshot.transcoding_available,
            "whisperAvailable": snapshot.transcription_available,
            "supportedFormats": _sorted(snapshot.supported_formats),
            "nativeFormats": _sorted(snapshot.native_formats),
            "conversionFormats": _sorted(snapshot.conversion_formats),
        },
    }


def capabilities_payload(snapshot: CapabilitySnapshot, settings: Settings) -> dict[str, Any]:
    """Snapshot completo + metadados estaticos (GET /api/capabilities).

    Permite ao cliente avisar antes da gravacao quando o formato do browser
    exige uma conversao indisponivel.
    """
    transcoding = snapshot.transcoding_available
    transcription = snapshot.transcription_available
    base_url = settings.fish_audio_base_url.rstrip("/")
    max_mb = MAX_TRANSCRIPTION_BYTES // (1024 * 1024)

    return {
        "server": {
            "version": voxmod.__version__,
            "platform": sys.platform,
            "pythonVersion": platform.python_version(),
            "deploymentMode": settings.deployment_mode.value,
        },
        "audio": {
            "ffmpegAvailable": transcoding,
            "supportedBrowserFormats": _sorted(snapshot.supported_formats),
            "fishAudioNativeFormats": _sorted(snapshot.native_formats),
            "formatsNeedingConversion": _sorted(snapshot.conversion_formats),
            "conversionEnabled": transcoding,
            "recommendation": (
                "All audio formats supported with automatic conversion"
                if transcoding
                else "Install FFmpeg for WebM/OGG conversion support. "
                "Safari and Chrome recordings work best."
            ),
        },
        "transcription": {
            "whisperAvailable": transcription,
            "service": "OpenAI Whisper",
            "maxFileSize": f"{max_mb}MB",
            "supportedFormats": list(TRANSCRIPTION_FORMATS),
            "recommendation": (
                "Automatic transcription enabled - improves voice cloning quality"
                if transcription
                else "Add OPENAI_API_KEY to .env to enable automatic transcription"
            ),
        },
        "api": {
            "fishAudioConfigured": snapshot.cloning_configured,
            "fishAudioBaseUrl": base_url,
            "openaiConfigured": transcription,
            "endpoints": {
                "modelCreate": f"{base_url}/model",
                "modelList": f"{base_url}/model",
                "tts": f"{base_url}/v1/tts",
                "transcribe": "/api/transcribe",
            },
        },
    }
