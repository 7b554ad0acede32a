"""Configuracao do servidor carregada de variaveis de ambiente."""

from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError, field_validator

from voxmod._types import DeploymentMode
from voxmod.exceptions import ConfigError

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_PORT = 3000
DEFAULT_FISH_AUDIO_BASE_URL = "https://api.fish.audio"

# Valor de exemplo do .env distribuido; equivale a chave ausente
OPENAI_KEY_PLACEHOLDER = "your_openai_api_key_here"


def _parse_origins(raw: str | None) -> list[str]:
    if not raw:
        return []
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    """Configuracao imutavel do processo.

    Credenciais ausentes nao impedem o startup: sem OPENAI_API_KEY a
    transcricao fica desabilitada; sem FISH_AUDIO_API_KEY o servidor sobe,
    mas as chamadas ao provider falham.
    """

    model_config = {"frozen": True}

    openai_api_key: str | None = None
    fish_audio_api_key: str | None = None
    fish_audio_base_url: str = DEFAULT_FISH_AUDIO_BASE_URL
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    deployment_mode: DeploymentMode = DeploymentMode.PERSISTENT
    upload_dir: Path = Path("uploads")
    generated_dir: Path = Path("generated")
    waitlist_path: Path | None = Path("waitlist.jsonl")
    static_dir: Path | None = None
    cors_origins: list[str] = []
    ffmpeg_binary: str = "ffmpeg"
    provider_timeout_s: float | None = 120.0
    transcription_language: str = "en"
    transcription_model: str = "whisper-1"

    @field_validator("port")
    @classmethod
    def port_must_be_valid(cls, v: int) -> int:
        if not 0 < v < 65536:
            msg = f"Porta invalida: {v}"
            raise ValueError(msg)
        return v

    @property
    def transcription_configured(self) -> bool:
        key = self.openai_api_key
        return bool(key) and key != OPENAI_KEY_PLACEHOLDER

    @property
    def cloning_configured(self) -> bool:
        return bool(self.fish_audio_api_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Constroi Settings a partir do ambiente.

        No modo serverless os diretorios default ficam em /tmp e o waitlist
        nao e gravado em disco (o filesystem nao sobrevive entre invocacoes).

        Raises:
            ConfigError: Se algum valor nao puder ser interpretado.
        """
        env = os.environ if environ is None else environ

        raw_mode = env.get("VOXMOD_DEPLOYMENT_MODE", DeploymentMode.PERSISTENT.value)
        try:
            mode = DeploymentMode(raw_mode.strip().lower())
        except ValueError:
            valid = ", ".join(m.value for m in DeploymentMode)
            raise ConfigError(
                "VOXMOD_DEPLOYMENT_MODE", f"'{raw_mode}' invalido. Valores aceitos: {valid}"
            ) from None

        serverless = mode == DeploymentMode.SERVERLESS
        default_upload = "/tmp/uploads" if serverless else "uploads"  # noqa: S108
        default_generated = "/tmp/generated" if serverless else "generated"  # noqa: S108

        waitlist_raw = env.get("VOXMOD_WAITLIST_PATH")
        if waitlist_raw is not None:
            waitlist_path: Path | None = Path(waitlist_raw) if waitlist_raw else None
        else:
            waitlist_path = None if serverless else Path("waitlist.jsonl")

        static_raw = env.get("VOXMOD_STATIC_DIR")
        timeout_raw = env.get("VOXMOD_PROVIDER_TIMEOUT_S", "120")

        try:
            timeout = float(timeout_raw) if timeout_raw.strip() else None
            if timeout is not None and timeout <= 0:
                timeout = None
            return cls(
                openai_api_key=env.get("OPENAI_API_KEY") or None,
                fish_audio_api_key=env.get("FISH_AUDIO_API_KEY") or None,
                fish_audio_base_url=env.get("FISH_AUDIO_BASE_URL", DEFAULT_FISH_AUDIO_BASE_URL),
                host=env.get("VOXMOD_HOST", "127.0.0.1"),
                port=int(env.get("PORT", str(DEFAULT_PORT))),
                deployment_mode=mode,
                upload_dir=Path(env.get("VOXMOD_UPLOAD_DIR", default_upload)),
                generated_dir=Path(env.get("VOXMOD_GENERATED_DIR", default_generated)),
                waitlist_path=waitlist_path,
                static_dir=Path(static_raw) if static_raw else None,
                cors_origins=_parse_origins(env.get("VOXMOD_CORS_ORIGINS")),
                ffmpeg_binary=env.get("VOXMOD_FFMPEG_BINARY", "ffmpeg"),
                provider_timeout_s=timeout,
                transcription_language=env.get("VOXMOD_TRANSCRIPTION_LANGUAGE", "en"),
            )
        except ValueError as exc:
            # ValidationError do pydantic tambem e ValueError
            setting = "environment"
            if isinstance(exc, ValidationError) and exc.errors():
                setting = str(exc.errors()[0]["loc"][0])
            raise ConfigError(setting, str(exc)) from exc
