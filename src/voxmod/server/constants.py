"""Constantes compartilhadas do server."""

from __future__ import annotations

from voxmod._types import MAX_UPLOAD_BYTES

API_PREFIX = "/api"
GENERATED_ROUTE = "/generated"

# Campo multipart com o audio em /api/transcribe e /api/voice/upload
AUDIO_FIELD = "audio"

MAX_FILE_SIZE_BYTES = MAX_UPLOAD_BYTES  # 10MB

# Leitura do upload em blocos para nunca manter mais que isso em memoria
SPOOL_CHUNK_BYTES = 1024 * 1024

MIN_PASSWORD_LENGTH = 8

REQUEST_ID_HEADER = "X-Request-ID"
