"""Exception handlers HTTP para o FastAPI.

Mapeia exceptions tipadas do voxmod para respostas HTTP. Erros do provider
levam o payload original em `details` para diagnostico.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi.responses import JSONResponse

from voxmod.exceptions import (
    AudioFormatError,
    AudioMissingError,
    AudioTooLargeError,
    InvalidRequestError,
    ProviderError,
    ProviderTimeoutError,
    ProviderUnavailableError,
    TranscriptionUnavailableError,
    VoiceUploadRejectedError,
    VoxmodError,
)
from voxmod.logging import get_logger
from voxmod.server.models.responses import ErrorDetail, ErrorResponse

if TYPE_CHECKING:
    from fastapi import FastAPI, Request

logger = get_logger("server.errors")


def _error_response(
    status_code: int,
    message: str,
    error_type: str,
    code: str,
    *,
    details: Any = None,
    suggestion: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(
            message=message,
            type=error_type,
            code=code,
            details=details,
            suggestion=suggestion,
        )
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


async def _handle_audio_missing(request: Request, exc: AudioMissingError) -> JSONResponse:
    logger.warning("audio_missing", path=request.url.path, request_id=_get_request_id(request))
    return _error_response(400, str(exc), "invalid_request_error", "missing_audio")


async def _handle_invalid_request(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.warning("invalid_request", detail=exc.detail, request_id=_get_request_id(request))
    return _error_response(400, str(exc), "invalid_request_error", "invalid_request")


async def _handle_audio_format_error(request: Request, exc: AudioFormatError) -> JSONResponse:
    logger.warning(
        "audio_format_error",
        mime_type=exc.mime_type,
        request_id=_get_request_id(request),
    )
    return _error_response(400, str(exc), "audio_format_error", "invalid_audio")


async def _handle_audio_too_large(request: Request, exc: AudioTooLargeError) -> JSONResponse:
    logger.warning(
        "audio_too_large",
        size_bytes=exc.size_bytes,
        max_bytes=exc.max_bytes,
        request_id=_get_request_id(request),
    )
    return _error_response(413, str(exc), "audio_too_large_error", "file_too_large")


async def _handle_transcription_unavailable(
    request: Request, exc: TranscriptionUnavailableError
) -> JSONResponse:
    logger.info("transcription_unavailable", request_id=_get_request_id(request))
    return _error_response(
        503,
        str(exc),
        "service_unavailable_error",
        "transcription_unavailable",
        suggestion="Add OPENAI_API_KEY to .env to enable automatic transcription",
    )


async def _handle_upload_rejected(
    request: Request, exc: VoiceUploadRejectedError
) -> JSONResponse:
    logger.warning(
        "voice_upload_rejected",
        mime_type=exc.mime_type,
        details=exc.details,
        request_id=_get_request_id(request),
    )
    return _error_response(
        400,
        str(exc),
        "provider_rejected_error",
        "audio_rejected",
        details=exc.details,
        suggestion=exc.suggestion,
    )


async def _handle_provider_timeout(request: Request, exc: ProviderTimeoutError) -> JSONResponse:
    logger.error(
        "provider_timeout",
        operation=exc.operation,
        timeout_seconds=exc.timeout_seconds,
        request_id=_get_request_id(request),
    )
    return _error_response(
        504,
        f"Voice provider did not respond in time ({exc.operation})",
        "provider_timeout_error",
        "gateway_timeout",
    )


async def _handle_provider_unavailable(
    request: Request, exc: ProviderUnavailableError
) -> JSONResponse:
    logger.error(
        "provider_unavailable",
        operation=exc.operation,
        request_id=_get_request_id(request),
    )
    return _error_response(
        503,
        f"Voice provider unreachable ({exc.operation})",
        "provider_unavailable_error",
        "service_unavailable",
        details=exc.payload,
        headers={"Retry-After": "5"},
    )


_PROVIDER_MESSAGES = {
    "create_model": "Failed to upload voice",
    "synthesize": "Failed to generate speech",
    "list_models": "Failed to fetch voices",
    "delete_model": "Failed to delete voice model",
}


async def _handle_provider_error(request: Request, exc: ProviderError) -> JSONResponse:
    logger.error(
        "provider_error",
        operation=exc.operation,
        status_code=exc.status_code,
        payload=exc.payload,
        request_id=_get_request_id(request),
    )
    return _error_response(
        502,
        _PROVIDER_MESSAGES.get(exc.operation, str(exc)),
        "provider_error",
        "bad_gateway",
        details=exc.payload,
    )


async def _handle_voxmod_error(request: Request, exc: VoxmodError) -> JSONResponse:
    logger.error(
        "unhandled_voxmod_error",
        error=str(exc),
        error_type=type(exc).__name__,
        request_id=_get_request_id(request),
        exc_info=True,
    )
    return _error_response(500, "Internal server error", "internal_error", "internal_error")


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "unexpected_error",
        error=str(exc),
        error_type=type(exc).__name__,
        request_id=_get_request_id(request),
        exc_info=True,
    )
    return _error_response(500, "Internal server error", "internal_error", "internal_error")


def register_error_handlers(app: FastAPI) -> None:
    """Registra todos os exception handlers no FastAPI app."""
    app.add_exception_handler(AudioMissingError, _handle_audio_missing)
    app.add_exception_handler(InvalidRequestError, _handle_invalid_request)
    app.add_exception_handler(AudioFormatError, _handle_audio_format_error)
    app.add_exception_handler(AudioTooLargeError, _handle_audio_too_large)
    app.add_exception_handler(TranscriptionUnavailableError, _handle_transcription_unavailable)
    app.add_exception_handler(VoiceUploadRejectedError, _handle_upload_rejected)
    app.add_exception_handler(ProviderTimeoutError, _handle_provider_timeout)
    app.add_exception_handler(ProviderUnavailableError, _handle_provider_unavailable)
    app.add_exception_handler(ProviderError, _handle_provider_error)
    app.add_exception_handler(VoxmodError, _handle_voxmod_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)
