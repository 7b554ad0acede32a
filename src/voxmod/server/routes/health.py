"""Health check e capability report."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from voxmod._types import CapabilitySnapshot  # noqa: TC001
from voxmod.capabilities import capabilities_payload, health_payload
from voxmod.config.settings import Settings  # noqa: TC001
from voxmod.server.dependencies import get_capabilities, get_settings

router = APIRouter()


@router.get("/health")
async def health(
    capabilities: CapabilitySnapshot = Depends(get_capabilities),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Liveness com resumo das capacidades opcionais."""
    return health_payload(capabilities, settings.deployment_mode)


@router.get("/capabilities")
async def capabilities(
    capabilities: CapabilitySnapshot = Depends(get_capabilities),  # noqa: B008
    settings: Settings = Depends(get_settings),  # noqa: B008
) -> dict[str, Any]:
    """Snapshot completo de capacidades + metadados estaticos.

    Usado pelo cliente para avisar, antes de gravar, quando o formato do
    browser exige conversao indisponivel no servidor.
    """
    return capabilities_payload(capabilities, settings)
