"""Rotas de voz: upload/clonagem, sintese, listagem, remocao e presets."""

from __future__ import annotations

import asyncio
import base64
from typing import Any

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from fastapi.responses import JSONResponse, Response

from voxmod.config.presets import presets_payload
from voxmod.config.settings import Settings  # noqa: TC001
from voxmod.logging import get_logger
from voxmod.pipeline.speech import SpeechGenerator  # noqa: TC001
from voxmod.pipeline.upload import VoiceUploadOrchestrator, VoiceUploadRequest
from voxmod.providers.fish_audio import FishAudioClient  # noqa: TC001
from voxmod.server.dependencies import (
    get_audio_store,
    get_cloning_client,
    get_orchestrator,
    get_settings,
    get_speech_generator,
)
from voxmod.server.generated import GeneratedAudioStore  # noqa: TC001
from voxmod.server.models.requests import GenerateSpeechRequest  # noqa: TC001
from voxmod.server.models.responses import (
    FormatInfoResponse,
    GenerateSpeechResponse,
    TranscriptionInfo,
    VoiceUploadResponse,
)
from voxmod.server.routes._common import spool_upload

router = APIRouter()

logger = get_logger("server.routes.voice")

# Valores de autoTranscribe que desligam a transcricao automatica
_OPT_OUT_VALUES = frozenset({"false", "0", "no", "off"})


@router.post("/voice/upload")
async def upload_voice(
    audio: UploadFile | None = File(default=None),  # noqa: B008
    name: str | None = Form(default=None),
    text: str | None = Form(default=None),
    auto_transcribe: str | None = Form(default=None, alias="autoTranscribe"),
    settings: Settings = Depends(get_settings),  # noqa: B008
    orchestrator: VoiceUploadOrchestrator = Depends(get_orchestrator),  # noqa: B008
) -> dict[str, Any]:
    """Cria um modelo de voz a partir de uma amostra de audio.

    Campos opcionais: ``name`` (titulo), ``text`` (transcricao do usuario) e
    ``autoTranscribe`` ("false" desliga a transcricao automatica).
    """
    asset = await spool_upload(audio, settings.upload_dir)
    opted_out = auto_transcribe is not None and auto_transcribe.strip().lower() in _OPT_OUT_VALUES

    result = await orchestrator.run(
        VoiceUploadRequest(
            asset=asset,
            name=name or None,
            text=text or None,
            auto_transcribe=not opted_out,
        )
    )

    response = VoiceUploadResponse(
        model_id=result.model_id,
        format_info=FormatInfoResponse.from_info(result.format_info),
        transcription=TranscriptionInfo.from_provenance(result.transcription),
    )
    return response.model_dump(by_alias=True)


@router.post("/voice/generate", response_model=None)
async def generate_speech(
    body: GenerateSpeechRequest,
    raw: bool = Query(default=False, description="Retorna o audio binario em vez de JSON."),
    generator: SpeechGenerator = Depends(get_speech_generator),  # noqa: B008
    audio_store: GeneratedAudioStore | None = Depends(get_audio_store),  # noqa: B008
) -> Response:
    """Sintetiza fala com uma voz clonada.

    No modo persistent o audio e gravado e servido em /generated; no modo
    serverless volta inline como base64 e data URL. ``raw=true`` devolve o
    binario em ambos os modos.
    """
    result = await generator.generate(body.model_id, body.text)

    logger.info("speech_delivered", model_id=body.model_id, raw=raw, bytes=len(result.audio))

    if raw:
        return Response(content=result.audio, media_type=result.content_type)

    if audio_store is not None:
        loop = asyncio.get_running_loop()
        audio_url = await loop.run_in_executor(None, audio_store.save, result.audio)
        payload = GenerateSpeechResponse(audio_url=audio_url)
    else:
        encoded = base64.b64encode(result.audio).decode("ascii")
        payload = GenerateSpeechResponse(
            audio=encoded,
            audio_url=f"data:audio/mp3;base64,{encoded}",
        )
    return JSONResponse(content=payload.model_dump(by_alias=True, exclude_none=True))


@router.get("/voices")
async def list_voices(
    client: FishAudioClient = Depends(get_cloning_client),  # noqa: B008
) -> dict[str, Any]:
    """Lista os modelos de voz do usuario, mantidos pelo provider."""
    voices = await client.list_models()
    return {"success": True, "voices": voices}


@router.delete("/voice/{model_id}")
async def delete_voice(
    model_id: str,
    client: FishAudioClient = Depends(get_cloning_client),  # noqa: B008
) -> dict[str, Any]:
    """Remove um modelo de voz no provider."""
    await client.delete_model(model_id)
    logger.info("voice_deleted", model_id=model_id)
    return {"success": True, "message": "Voice model deleted"}


@router.get("/voice/presets")
async def voice_presets(
    generator: SpeechGenerator = Depends(get_speech_generator),  # noqa: B008
) -> dict[str, Any]:
    """Tabela estatica de presets de qualidade e orientacoes de gravacao."""
    return presets_payload(generator.profile)
