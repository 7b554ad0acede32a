"""Classificacao de formatos de audio frente ao provider de clonagem.

Funcoes puras, sem I/O. O MIME declarado pelo browser nem sempre e
confiavel, entao a extensao do nome do arquivo serve de fallback.
"""

from __future__ import annotations

import re

from voxmod._types import FormatClass
from voxmod.exceptions import AudioFormatError

# Formatos que o provider aceita diretamente
NATIVE_FORMATS = frozenset(
    {
        "audio/mpeg",
        "audio/mp3",
        "audio/wav",
        "audio/wave",
        "audio/x-wav",
        "audio/flac",
        "audio/x-flac",
        "audio/mp4",
        "audio/x-m4a",
        "audio/aac",
    }
)

# Gravacoes de Chrome/Firefox; precisam de conversao antes do envio
CONVERSION_FORMATS = frozenset({"audio/webm", "audio/ogg"})

SUPPORTED_FORMATS = NATIVE_FORMATS | CONVERSION_FORMATS

CANONICAL_MIME_TYPE = "audio/wav"

_EXTENSION_PATTERN = re.compile(r"\.(mp3|wav|m4a|mp4|webm|ogg|flac|aac)$", re.IGNORECASE)

_CONVERSION_EXTENSIONS = frozenset({"webm", "ogg"})

# Extensao exigida pela API de transcricao (audio/aac vai como .m4a)
_TRANSCRIPTION_EXTENSIONS = {
    "audio/mpeg": ".mp3",
    "audio/mp3": ".mp3",
    "audio/wav": ".wav",
    "audio/wave": ".wav",
    "audio/x-wav": ".wav",
    "audio/mp4": ".m4a",
    "audio/x-m4a": ".m4a",
    "audio/aac": ".m4a",
    "audio/webm": ".webm",
    "audio/ogg": ".ogg",
    "audio/flac": ".flac",
    "audio/x-flac": ".flac",
}

_DEFAULT_TRANSCRIPTION_EXTENSION = ".mp3"


def normalize_mime(mime_type: str | None) -> str:
    """Remove parametros e normaliza caixa: 'Audio/WebM;codecs=opus' -> 'audio/webm'."""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def classify(mime_type: str | None, filename: str | None = None) -> FormatClass:
    """Classifica o audio como native, needs_transcode ou unsupported.

    O MIME tem precedencia. Se for desconhecido, a extensao do arquivo decide.
    """
    mime = normalize_mime(mime_type)
    if mime in NATIVE_FORMATS:
        return FormatClass.NATIVE
    if mime in CONVERSION_FORMATS:
        return FormatClass.NEEDS_TRANSCODE

    match = _EXTENSION_PATTERN.search(filename or "")
    if match is None:
        return FormatClass.UNSUPPORTED
    if match.group(1).lower() in _CONVERSION_EXTENSIONS:
        return FormatClass.NEEDS_TRANSCODE
    return FormatClass.NATIVE


def ensure_supported(mime_type: str | None, filename: str | None = None) -> FormatClass:
    """Classifica e rejeita formatos nao suportados.

    Raises:
        AudioFormatError: Com o MIME recebido na mensagem.
    """
    format_class = classify(mime_type, filename)
    if format_class == FormatClass.UNSUPPORTED:
        raise AudioFormatError(mime_type)
    return format_class


def extension_for_mime(mime_type: str | None) -> str:
    """Extensao (com ponto) usada para o arquivo enviado a transcricao."""
    mime = normalize_mime(mime_type)
    return _TRANSCRIPTION_EXTENSIONS.get(mime, _DEFAULT_TRANSCRIPTION_EXTENSION)


def canonical_filename(filename: str) -> str:
    """Nome do arquivo apos conversao para WAV: troca (ou acrescenta) a extensao."""
    stem, dot, _suffix = filename.rpartition(".")
    if dot and stem:
        return f"{stem}.wav"
    return f"{filename or 'audio'}.wav"
