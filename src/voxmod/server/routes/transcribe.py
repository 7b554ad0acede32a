"""POST /api/transcribe: transcricao avulsa, sem criar modelo de voz."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from voxmod._types import CapabilitySnapshot, FormatClass  # noqa: TC001
from voxmod.audio.formats import CANONICAL_MIME_TYPE, classify
from voxmod.audio.tempfiles import TempFileScope
from voxmod.audio.transcoder import FFmpegTranscoder, output_path_for  # noqa: TC001
from voxmod.config.settings import Settings  # noqa: TC001
from voxmod.exceptions import TranscriptionUnavailableError
from voxmod.logging import get_logger
from voxmod.providers.transcription import WhisperTranscriber  # noqa: TC001
from voxmod.server.dependencies import (
    get_capabilities,
    get_settings,
    get_transcoder,
    get_transcriber,
)
from voxmod.server.models.responses import TranscribeResponse
from voxmod.server.routes._common import spool_upload

router = APIRouter()

logger = get_logger("server.routes.transcribe")


@router.post("/transcribe", response_model=None)
async def transcribe(
    audio: UploadFile | None = File(default=None),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
    capabilities: CapabilitySnapshot = Depends(get_capabilities),  # noqa: B008
    transcoder: FFmpegTranscoder = Depends(get_transcoder),  # noqa: B008
    transcriber: WhisperTranscriber = Depends(get_transcriber),  # noqa: B008
) -> Any:
    """Transcreve um arquivo de audio.

    WebM/OGG sao convertidos para WAV antes, quando o ffmpeg esta disponivel.
    Falha de transcricao retorna 400 com ``success: false``.
    """
    asset = await spool_upload(audio, settings.upload_dir)
    with TempFileScope() as scope:
        scope.track(asset.path)

        if not capabilities.transcription_available:
            raise TranscriptionUnavailableError()

        path, mime_type = asset.path, asset.mime_type
        needs_transcode = classify(asset.mime_type, asset.filename) == FormatClass.NEEDS_TRANSCODE
        if needs_transcode and capabilities.transcoding_available:
            scope.track(output_path_for(asset.path))
            converted = await transcoder.convert(asset.path, asset.mime_type)
            if converted is not None:
                path, mime_type = scope.track(converted), CANONICAL_MIME_TYPE

        result = await transcriber.transcribe(path, mime_type)

    if not result.success:
        logger.warning("transcribe_failed", error=result.error)
        return JSONResponse(status_code=400, content={"success": False, "error": result.error})

    return TranscribeResponse(text=result.text, character_count=len(result.text)).model_dump(
        by_alias=True
    )
