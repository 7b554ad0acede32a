"""Pipelines de request: criacao de modelo de voz e sintese de fala."""

from __future__ import annotations

from voxmod.pipeline.speech import SpeechGenerator
from voxmod.pipeline.upload import VoiceUploadOrchestrator, VoiceUploadRequest, VoiceUploadResult

__all__ = [
    "SpeechGenerator",
    "VoiceUploadOrchestrator",
    "VoiceUploadRequest",
    "VoiceUploadResult",
]
