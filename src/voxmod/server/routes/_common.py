"""Intake compartilhado entre rotas que recebem audio (transcribe e voice upload)."""

from __future__ import annotations

from typing import TYPE_CHECKING

from voxmod._types import AudioAsset
from voxmod.audio.formats import ensure_supported
from voxmod.audio.tempfiles import new_temp_path
from voxmod.exceptions import AudioMissingError, AudioTooLargeError
from voxmod.logging import get_logger
from voxmod.server.constants import MAX_FILE_SIZE_BYTES, SPOOL_CHUNK_BYTES

if TYPE_CHECKING:
    from pathlib import Path

    from fastapi import UploadFile

logger = get_logger("server.intake")


async def spool_upload(
    file: UploadFile | None,
    upload_dir: Path,
    *,
    max_bytes: int = MAX_FILE_SIZE_BYTES,
) -> AudioAsset:
    """Valida o upload e grava em arquivo temporario sem extensao.

    Ordem: presenca -> formato (MIME com fallback de extensao) -> tamanho.
    O chamador passa a ser dono do arquivo retornado. Em qualquer falha o
    arquivo parcial e removido antes de propagar.

    Raises:
        AudioMissingError: Nenhum arquivo no campo de audio.
        AudioFormatError: Formato nao suportado (mensagem cita o MIME).
        AudioTooLargeError: Upload acima de max_bytes.
    """
    if file is None or not file.filename:
        raise AudioMissingError()

    mime_type = file.content_type or "application/octet-stream"
    filename = file.filename

    logger.info("upload_received", filename=filename, mime_type=mime_type, size_bytes=file.size)
    ensure_supported(mime_type, filename)

    # Pre-checagem quando o multipart informa o tamanho
    if file.size is not None and file.size > max_bytes:
        raise AudioTooLargeError(file.size, max_bytes)

    path = new_temp_path(upload_dir)
    written = 0
    try:
        with path.open("wb") as out:
            while chunk := await file.read(SPOOL_CHUNK_BYTES):
                written += len(chunk)
                if written > max_bytes:
                    raise AudioTooLargeError(written, max_bytes)
                out.write(chunk)
    except BaseException:
        path.unlink(missing_ok=True)
        raise

    return AudioAsset(path=path, mime_type=mime_type, filename=filename, size_bytes=written)
