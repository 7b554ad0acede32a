"""Pydantic models dos bodies JSON.

Campos obrigatorios sao declarados opcionais de proposito: a validacao de
presenca e feita nas rotas para responder 400 com mensagem legivel, em vez
do 422 generico do FastAPI.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class GenerateSpeechRequest(BaseModel):
    """Body de POST /api/voice/generate."""

    model_config = ConfigDict(populate_by_name=True, protected_namespaces=())

    model_id: str | None = Field(default=None, alias="modelId", description="ID do modelo de voz.")
    text: str | None = Field(default=None, description="Texto a ser sintetizado.")


class SignupRequest(BaseModel):
    """Body de POST /api/auth/signup (stub, nada e persistido)."""

    name: str | None = None
    email: str | None = None
    password: str | None = None
    type: str | None = None


class WaitlistRequest(BaseModel):
    """Body de POST /api/waitlist."""

    email: str | None = None
    type: str | None = None
