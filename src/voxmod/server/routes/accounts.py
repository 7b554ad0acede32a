"""Stubs de signup e waitlist. Sem autenticacao real nem persistencia de usuario."""

from __future__ import annotations

import asyncio
import time
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Depends

from voxmod.exceptions import InvalidRequestError
from voxmod.logging import get_logger
from voxmod.server.constants import MIN_PASSWORD_LENGTH
from voxmod.server.dependencies import get_waitlist
from voxmod.server.models.requests import SignupRequest, WaitlistRequest  # noqa: TC001
from voxmod.waitlist import WaitlistLog  # noqa: TC001

router = APIRouter()

logger = get_logger("server.routes.accounts")


@router.post("/auth/signup")
async def signup(body: SignupRequest) -> dict[str, Any]:
    """Aceita o cadastro apos validacao minima e devolve um usuario ficticio.

    Nenhuma credencial e verificada ou gravada.
    """
    if not body.name or not body.email or not body.password:
        raise InvalidRequestError("Name, email, and password are required")

    if len(body.password) < MIN_PASSWORD_LENGTH:
        raise InvalidRequestError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
        )

    logger.info("signup_accepted", email=body.email, type=body.type)

    return {
        "success": True,
        "message": "Account created successfully",
        "user": {
            "id": str(int(time.time() * 1000)),
            "name": body.name,
            "email": body.email,
            "type": body.type,
            "createdAt": datetime.now(timezone.utc).isoformat(),
        },
    }


@router.post("/waitlist")
async def join_waitlist(
    body: WaitlistRequest,
    waitlist: WaitlistLog = Depends(get_waitlist),  # noqa: B008
) -> dict[str, Any]:
    """Registra o email no waitlist (append-only)."""
    if not body.email:
        raise InvalidRequestError("Email is required")

    loop = asyncio.get_running_loop()
    await loop.run_in_executor(None, waitlist.append, body.email, body.type)
    return {"success": True, "message": "Successfully joined waitlist"}
