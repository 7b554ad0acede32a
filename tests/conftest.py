"""Fixtures compartilhadas para todos os testes."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest

from voxmod._types import (
    AudioAsset,
    CapabilitySnapshot,
    DeploymentMode,
    TranscriptionResult,
    VoiceModelHandle,
)
from voxmod.audio.formats import CONVERSION_FORMATS, NATIVE_FORMATS, SUPPORTED_FORMATS
from voxmod.config.settings import Settings

# Cabecalho RIFF minimo; o conteudo nunca e decodificado nos testes
FAKE_WAV_BYTES = b"RIFF\x24\x00\x00\x00WAVEfmt " + b"\x00" * 64


def _make_capabilities(
    *,
    transcoding: bool = True,
    transcription: bool = True,
    cloning: bool = True,
) -> CapabilitySnapshot:
    return CapabilitySnapshot(
        transcoding_available=transcoding,
        transcription_available=transcription,
        cloning_configured=cloning,
        supported_formats=SUPPORTED_FORMATS,
        native_formats=NATIVE_FORMATS,
        conversion_formats=CONVERSION_FORMATS,
    )


@pytest.fixture
def make_capabilities() -> Callable[..., CapabilitySnapshot]:
    """Factory de CapabilitySnapshot com flags configuraveis."""
    return _make_capabilities


@pytest.fixture
def capabilities_full() -> CapabilitySnapshot:
    """ffmpeg e transcricao disponiveis."""
    return _make_capabilities()


@pytest.fixture
def capabilities_none() -> CapabilitySnapshot:
    """Nenhuma capacidade opcional disponivel."""
    return _make_capabilities(transcoding=False, transcription=False)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings persistent com todos os diretorios dentro de tmp_path."""
    return Settings(
        openai_api_key="sk-test",
        fish_audio_api_key="fa-test",
        upload_dir=tmp_path / "uploads",
        generated_dir=tmp_path / "generated",
        waitlist_path=tmp_path / "waitlist.jsonl",
    )


@pytest.fixture
def serverless_settings(tmp_path: Path) -> Settings:
    return Settings(
        openai_api_key="sk-test",
        fish_audio_api_key="fa-test",
        deployment_mode=DeploymentMode.SERVERLESS,
        upload_dir=tmp_path / "uploads",
        generated_dir=tmp_path / "generated",
        waitlist_path=None,
    )


@pytest.fixture
def make_asset(tmp_path: Path) -> Callable[..., AudioAsset]:
    """Factory de AudioAsset gravado em disco, sem extensao como no upload real."""
    counter = {"n": 0}

    def _make(
        mime_type: str = "audio/wav",
        filename: str = "sample.wav",
        data: bytes = FAKE_WAV_BYTES,
    ) -> AudioAsset:
        counter["n"] += 1
        path = tmp_path / f"upload-{counter['n']}"
        path.write_bytes(data)
        return AudioAsset(path=path, mime_type=mime_type, filename=filename, size_bytes=len(data))

    return _make


@pytest.fixture
def mock_cloning_client() -> MagicMock:
    """Cliente do provider com respostas de sucesso."""
    client = MagicMock()
    client.create_model = AsyncMock(return_value=VoiceModelHandle(model_id="model-abc"))
    client.synthesize = AsyncMock(return_value=b"ID3fake-mp3")
    client.list_models = AsyncMock(return_value=[{"_id": "model-abc", "title": "Minha voz"}])
    client.delete_model = AsyncMock(return_value=None)
    client.aclose = AsyncMock(return_value=None)
    return client


@pytest.fixture
def mock_transcoder() -> MagicMock:
    """Transcoder que nunca converte."""
    transcoder = MagicMock()
    transcoder.available = True
    transcoder.convert = AsyncMock(return_value=None)
    return transcoder


@pytest.fixture
def mock_transcriber() -> MagicMock:
    transcriber = MagicMock()
    transcriber.available = True
    transcriber.transcribe = AsyncMock(
        return_value=TranscriptionResult(success=True, text="Hello, this is my voice.")
    )
    return transcriber
