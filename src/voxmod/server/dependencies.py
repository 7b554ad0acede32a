"""FastAPI dependencies para injecao dos componentes montados em create_app()."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import Request  # noqa: TC002

if TYPE_CHECKING:
    from voxmod._types import CapabilitySnapshot
    from voxmod.audio.transcoder import FFmpegTranscoder
    from voxmod.config.settings import Settings
    from voxmod.pipeline.speech import SpeechGenerator
    from voxmod.pipeline.upload import VoiceUploadOrchestrator
    from voxmod.providers.fish_audio import FishAudioClient
    from voxmod.providers.transcription import WhisperTranscriber
    from voxmod.server.generated import GeneratedAudioStore
    from voxmod.waitlist import WaitlistLog


def get_settings(request: Request) -> Settings:
    """Retorna a configuracao do processo."""
    return request.app.state.settings  # type: ignore[no-any-return]


def get_capabilities(request: Request) -> CapabilitySnapshot:
    """Retorna o CapabilitySnapshot calculado no startup."""
    return request.app.state.capabilities  # type: ignore[no-any-return]


def get_transcoder(request: Request) -> FFmpegTranscoder:
    return request.app.state.transcoder  # type: ignore[no-any-return]


def get_transcriber(request: Request) -> WhisperTranscriber:
    return request.app.state.transcriber  # type: ignore[no-any-return]


def get_cloning_client(request: Request) -> FishAudioClient:
    return request.app.state.cloning_client  # type: ignore[no-any-return]


def get_orchestrator(request: Request) -> VoiceUploadOrchestrator:
    return request.app.state.orchestrator  # type: ignore[no-any-return]


def get_speech_generator(request: Request) -> SpeechGenerator:
    return request.app.state.speech_generator  # type: ignore[no-any-return]


def get_waitlist(request: Request) -> WaitlistLog:
    return request.app.state.waitlist  # type: ignore[no-any-return]


def get_audio_store(request: Request) -> GeneratedAudioStore | None:
    """Store de audio gerado, ou None no modo serverless."""
    return request.app.state.audio_store  # type: ignore[no-any-return]
