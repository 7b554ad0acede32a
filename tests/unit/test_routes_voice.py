"""Testes das rotas de voz: upload, generate, listagem, remocao e presets."""

from __future__ import annotations

import base64
import threading
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, MagicMock

import httpx

from voxmod.exceptions import (
    ProviderError,
    ProviderRejectedError,
    ProviderTimeoutError,
    ProviderUnavailableError,
)
from voxmod.server.app import create_app

if TYPE_CHECKING:
    from fastapi import FastAPI

    from voxmod._types import CapabilitySnapshot
    from voxmod.config.settings import Settings

WAV_FILE = {"audio": ("voz.wav", b"RIFFaudio", "audio/wav")}


def _make_app(
    settings: Settings,
    capabilities: CapabilitySnapshot,
    cloning_client: MagicMock,
    transcriber: MagicMock | None = None,
) -> FastAPI:
    transcoder = MagicMock()
    transcoder.convert = AsyncMock(return_value=None)
    return create_app(
        settings,
        capabilities=capabilities,
        cloning_client=cloning_client,
        transcoder=transcoder,
        transcriber=transcriber or MagicMock(),
    )


async def _request(app: FastAPI, method: str, url: str, **kwargs: Any) -> httpx.Response:
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        return await client.request(method, url, **kwargs)


class TestVoiceUpload:
    async def test_upload_with_user_text(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
        mock_transcriber: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client, mock_transcriber)

        response = await _request(
            app,
            "POST",
            "/api/voice/upload",
            files=WAV_FILE,
            data={"name": "Minha voz", "text": "Hello from me"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["modelId"] == "model-abc"
        assert body["message"] == "Voice uploaded and model created successfully"
        assert body["formatInfo"] == {
            "originalFormat": "audio/wav",
            "uploadedFormat": "audio/wav",
            "converted": False,
        }
        assert body["transcription"]["source"] == "user"
        assert body["transcription"]["characterCount"] == 13
        assert body["transcription"]["autoTranscriptionAvailable"] is True
        mock_transcriber.transcribe.assert_not_called()
        assert list(settings.upload_dir.iterdir()) == []

    async def test_upload_auto_transcribes(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
        mock_transcriber: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client, mock_transcriber)

        response = await _request(app, "POST", "/api/voice/upload", files=WAV_FILE)

        body = response.json()
        assert body["transcription"]["source"] == "auto"
        assert body["transcription"]["text"] == "Hello, this is my voice."
        mock_transcriber.transcribe.assert_awaited_once()

    async def test_auto_transcribe_opt_out(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
        mock_transcriber: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client, mock_transcriber)

        response = await _request(
            app,
            "POST",
            "/api/voice/upload",
            files=WAV_FILE,
            data={"autoTranscribe": "FALSE"},
        )

        assert response.status_code == 200
        assert response.json()["transcription"]["source"] == "none"
        mock_transcriber.transcribe.assert_not_called()

    async def test_missing_audio(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(app, "POST", "/api/voice/upload", data={"name": "x"})

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No audio file provided"
        mock_cloning_client.create_model.assert_not_called()

    async def test_unsupported_format(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app,
            "POST",
            "/api/voice/upload",
            files={"audio": ("clip.mp4", b"\x00\x00", "video/mp4")},
        )

        assert response.status_code == 400
        assert "video/mp4" in response.json()["error"]["message"]
        mock_cloning_client.create_model.assert_not_called()

    async def test_provider_rejection_returns_400_with_suggestion(
        self,
        settings: Settings,
        capabilities_none: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.create_model = AsyncMock(
            side_effect=ProviderRejectedError("create_model", 400, {"message": "invalid audio"})
        )
        app = _make_app(settings, capabilities_none, mock_cloning_client)

        response = await _request(
            app,
            "POST",
            "/api/voice/upload",
            files={"audio": ("rec.webm", b"\x1a\x45\xdf\xa3", "audio/webm")},
        )

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["type"] == "provider_rejected_error"
        assert error["code"] == "audio_rejected"
        assert error["details"]["provider"] == {"message": "invalid audio"}
        assert "FFmpeg" in error["details"]["message"]
        assert "MP3 or WAV" in error["suggestion"]
        assert list(settings.upload_dir.iterdir()) == []

    async def test_provider_failure_returns_502_with_details(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.create_model = AsyncMock(
            side_effect=ProviderError("create_model", 500, {"message": "internal"})
        )
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app, "POST", "/api/voice/upload", files=WAV_FILE, data={"text": "t"}
        )

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["message"] == "Failed to upload voice"
        assert error["details"] == {"message": "internal"}

    async def test_provider_timeout_returns_504(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.create_model = AsyncMock(
            side_effect=ProviderTimeoutError("create_model", 120.0)
        )
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app, "POST", "/api/voice/upload", files=WAV_FILE, data={"text": "t"}
        )

        assert response.status_code == 504
        assert response.json()["error"]["code"] == "gateway_timeout"
        assert list(settings.upload_dir.iterdir()) == []


class TestGenerateSpeech:
    async def test_persistent_mode_returns_file_url(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            response = await client.post(
                "/api/voice/generate", json={"modelId": "model-abc", "text": "Hello"}
            )
            body = response.json()
            audio = await client.get(body["audioUrl"])

        assert response.status_code == 200
        assert body["success"] is True
        assert body["audioUrl"].startswith("/generated/voice-")
        assert "audio" not in body
        assert audio.status_code == 200
        assert audio.content == b"ID3fake-mp3"

    async def test_generated_file_written_off_event_loop_thread(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)
        threads: list[int] = []

        def _save(audio: bytes) -> str:
            threads.append(threading.get_ident())
            return "/generated/voice-1.mp3"

        app.state.audio_store = MagicMock()
        app.state.audio_store.save = MagicMock(side_effect=_save)

        response = await _request(
            app, "POST", "/api/voice/generate", json={"modelId": "model-abc", "text": "Hello"}
        )

        assert response.status_code == 200
        assert response.json()["audioUrl"] == "/generated/voice-1.mp3"
        assert threads
        assert threads[0] != threading.get_ident()

    async def test_serverless_mode_returns_inline_base64(
        self,
        serverless_settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(serverless_settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app, "POST", "/api/voice/generate", json={"modelId": "model-abc", "text": "Hello"}
        )

        assert response.status_code == 200
        body = response.json()
        assert base64.b64decode(body["audio"]) == b"ID3fake-mp3"
        assert body["audioUrl"] == f"data:audio/mp3;base64,{body['audio']}"
        assert not serverless_settings.generated_dir.exists()

    async def test_repeated_identical_requests_each_reach_provider(
        self,
        serverless_settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.synthesize = AsyncMock(side_effect=[b"ID3take-one", b"ID3take-two"])
        app = _make_app(serverless_settings, capabilities_full, mock_cloning_client)
        payload = {"modelId": "model-abc", "text": "Same sentence"}

        async with httpx.AsyncClient(
            transport=httpx.ASGITransport(app=app),
            base_url="http://test",
        ) as client:
            first = await client.post("/api/voice/generate", json=payload)
            second = await client.post("/api/voice/generate", json=payload)

        for response in (first, second):
            assert response.status_code == 200
            body = response.json()
            assert body["success"] is True
            assert base64.b64decode(body["audio"])
        assert mock_cloning_client.synthesize.await_count == 2

    async def test_raw_returns_binary(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app,
            "POST",
            "/api/voice/generate",
            params={"raw": "true"},
            json={"modelId": "model-abc", "text": "Hello"},
        )

        assert response.status_code == 200
        assert response.headers["content-type"] == "audio/mpeg"
        assert response.content == b"ID3fake-mp3"

    async def test_empty_text_rejected_without_provider_call(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app, "POST", "/api/voice/generate", json={"modelId": "model-abc", "text": ""}
        )

        assert response.status_code == 400
        assert response.json()["error"]["message"] == "Missing modelId or text"
        mock_cloning_client.synthesize.assert_not_called()

    async def test_missing_model_id_rejected(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(app, "POST", "/api/voice/generate", json={"text": "Hello"})

        assert response.status_code == 400
        mock_cloning_client.synthesize.assert_not_called()

    async def test_provider_error_returns_502(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.synthesize = AsyncMock(
            side_effect=ProviderError("synthesize", 402, {"message": "no credit"})
        )
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app, "POST", "/api/voice/generate", json={"modelId": "m", "text": "Hello"}
        )

        assert response.status_code == 502
        error = response.json()["error"]
        assert error["message"] == "Failed to generate speech"
        assert error["details"] == {"message": "no credit"}

    async def test_provider_unreachable_returns_503_with_retry_after(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.synthesize = AsyncMock(
            side_effect=ProviderUnavailableError("synthesize", payload="connection refused")
        )
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(
            app, "POST", "/api/voice/generate", json={"modelId": "m", "text": "Hello"}
        )

        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"


class TestVoiceManagement:
    async def test_list_voices(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(app, "GET", "/api/voices")

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "voices": [{"_id": "model-abc", "title": "Minha voz"}],
        }

    async def test_list_voices_provider_error(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        mock_cloning_client.list_models = AsyncMock(
            side_effect=ProviderError("list_models", 401, {"message": "unauthorized"})
        )
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(app, "GET", "/api/voices")

        assert response.status_code == 502
        assert response.json()["error"]["message"] == "Failed to fetch voices"

    async def test_delete_voice(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(app, "DELETE", "/api/voice/model-abc")

        assert response.status_code == 200
        assert response.json() == {"success": True, "message": "Voice model deleted"}
        mock_cloning_client.delete_model.assert_awaited_once_with("model-abc")

    async def test_presets(
        self,
        settings: Settings,
        capabilities_full: CapabilitySnapshot,
        mock_cloning_client: MagicMock,
    ) -> None:
        app = _make_app(settings, capabilities_full, mock_cloning_client)

        response = await _request(app, "GET", "/api/voice/presets")

        assert response.status_code == 200
        body = response.json()
        assert set(body["presets"]) == {"consistent", "balanced", "expressive"}
        assert body["currentDefaults"]["temperature"] == 0.5
        assert "tips" in body["recordingGuidelines"]
