"""FastAPI application factory para o voxmod."""

from __future__ import annotations

import uuid
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI, Request

import voxmod
from voxmod._types import DeploymentMode
from voxmod.audio.transcoder import FFmpegTranscoder
from voxmod.capabilities import probe_capabilities
from voxmod.config.settings import Settings
from voxmod.logging import bind_request_context, clear_request_context, get_logger
from voxmod.pipeline.speech import SpeechGenerator
from voxmod.pipeline.upload import VoiceUploadOrchestrator
from voxmod.providers.fish_audio import FishAudioClient
from voxmod.providers.transcription import WhisperTranscriber
from voxmod.server.constants import API_PREFIX, GENERATED_ROUTE, REQUEST_ID_HEADER
from voxmod.server.error_handlers import register_error_handlers
from voxmod.server.generated import GeneratedAudioStore
from voxmod.server.routes import accounts, health, transcribe, voice
from voxmod.waitlist import WaitlistLog

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Awaitable, Callable

    from fastapi import Response

    from voxmod._types import CapabilitySnapshot

logger = get_logger("server.app")


def create_app(
    settings: Settings | None = None,
    *,
    capabilities: CapabilitySnapshot | None = None,
    cloning_client: FishAudioClient | None = None,
    transcoder: FFmpegTranscoder | None = None,
    transcriber: WhisperTranscriber | None = None,
    waitlist: WaitlistLog | None = None,
) -> FastAPI:
    """Cria a aplicacao FastAPI.

    Componentes omitidos sao construidos a partir de settings. Testes
    injetam fakes e um CapabilitySnapshot fixo para evitar o probe.

    Args:
        settings: Configuracao do processo (default: Settings.from_env()).
        capabilities: Snapshot pronto. None executa o probe no ffmpeg.
        cloning_client: Cliente do provider de clonagem/TTS.
        transcoder: Transcoder WebM/OGG -> WAV.
        transcriber: Cliente de transcricao automatica.
        waitlist: Log de inscricoes do waitlist.

    Returns:
        FastAPI application configurada.
    """
    settings = settings or Settings.from_env()

    if transcoder is None:
        transcoder = FFmpegTranscoder(
            settings.ffmpeg_binary,
            available=capabilities.transcoding_available if capabilities else None,
        )
    if capabilities is None:
        capabilities = probe_capabilities(settings, transcoder)

    if transcriber is None:
        transcriber = WhisperTranscriber(
            settings.openai_api_key if settings.transcription_configured else None,
            model=settings.transcription_model,
            language=settings.transcription_language,
            timeout=settings.provider_timeout_s,
        )

    owns_cloning_client = cloning_client is None
    if cloning_client is None:
        cloning_client = FishAudioClient(
            settings.fish_audio_api_key,
            base_url=settings.fish_audio_base_url,
            timeout=settings.provider_timeout_s,
        )

    persistent = settings.deployment_mode == DeploymentMode.PERSISTENT

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "app_started",
            mode=settings.deployment_mode.value,
            transcoding_available=capabilities.transcoding_available,
            transcription_available=capabilities.transcription_available,
        )
        yield
        if owns_cloning_client:
            await app.state.cloning_client.aclose()
        logger.info("app_stopped")

    app = FastAPI(
        title="voxmod",
        version=voxmod.__version__,
        description="Clonagem de voz a partir de uma amostra curta e sintese de fala",
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.capabilities = capabilities
    app.state.transcoder = transcoder
    app.state.transcriber = transcriber
    app.state.cloning_client = cloning_client
    app.state.orchestrator = VoiceUploadOrchestrator(
        capabilities=capabilities,
        cloning_client=cloning_client,
        transcoder=transcoder,
        transcriber=transcriber,
    )
    app.state.speech_generator = SpeechGenerator(cloning_client)
    if waitlist is None:
        waitlist = WaitlistLog(settings.waitlist_path)
    app.state.waitlist = waitlist
    app.state.audio_store = GeneratedAudioStore(settings.generated_dir) if persistent else None

    if settings.cors_origins:
        from fastapi.middleware.cors import CORSMiddleware

        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def request_context(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
        request.state.request_id = request_id
        clear_request_context()
        bind_request_context(request_id=request_id, path=request.url.path)
        try:
            response = await call_next(request)
        finally:
            clear_request_context()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response

    register_error_handlers(app)

    app.include_router(health.router, prefix=API_PREFIX)
    app.include_router(transcribe.router, prefix=API_PREFIX)
    app.include_router(voice.router, prefix=API_PREFIX)
    app.include_router(accounts.router, prefix=API_PREFIX)

    if persistent:
        _mount_static(app, settings)

    return app


def _mount_static(app: FastAPI, settings: Settings) -> None:
    """Serve o audio gerado e, se configurado, o frontend estatico.

    Montado depois dos routers para que /api tenha precedencia sobre "/".
    """
    from fastapi.staticfiles import StaticFiles

    settings.generated_dir.mkdir(parents=True, exist_ok=True)
    app.mount(
        GENERATED_ROUTE,
        StaticFiles(directory=settings.generated_dir, check_dir=False),
        name="generated",
    )

    if settings.static_dir is not None:
        if settings.static_dir.is_dir():
            app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
        else:
            logger.warning("static_dir_missing", static_dir=str(settings.static_dir))
