"""API administrativa: envio manual, conversas e métricas.

Todas as rotas exigem ``Authorization: Bearer <ADMIN_API_TOKEN>``.
Sem token configurado a API responde 503.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from pydantic import BaseModel, Field

from config.settings import get_base_settings
from utils.phone import format_phone_number, mask_phone

logger = logging.getLogger(__name__)

_BEARER_PREFIX = "bearer "


def require_admin_token(request: Request) -> None:
    """Dependency de autenticação (comparação em tempo constante)."""
    settings = request.app.state.services.admin_settings
    if not settings.enabled:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin API disabled",
        )

    header = request.headers.get("authorization", "")
    token = header[len(_BEARER_PREFIX):] if header.lower().startswith(_BEARER_PREFIX) else ""
    if not token or not hmac.compare_digest(token.encode(), settings.api_token.encode()):
        logger.warning("admin_auth_failed", extra={"path": request.url.path})
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )


router = APIRouter(dependencies=[Depends(require_admin_token)])


class ManualMessageRequest(BaseModel):
    """Corpo de POST /admin/messages."""

    phone_number: str = Field(min_length=1)
    message: str = Field(min_length=1)
    media_url: str | None = None


def _normalize_phone(phone: str) -> str:
    normalized = format_phone_number(phone, get_base_settings().default_country_code)
    if normalized is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid phone number")
    return normalized


# ──────────────────────────────────────────────────────────────────────────────
# Mensagens
# ──────────────────────────────────────────────────────────────────────────────


@router.post("/messages")
async def send_manual_message(request: Request, body: ManualMessageRequest) -> dict[str, Any]:
    services = request.app.state.services
    result = await services.manual_message.execute(
        body.phone_number,
        body.message,
        media_url=body.media_url,
    )
    if not result.success:
        logger.info(
            "admin_manual_message_failed",
            extra={"recipient": mask_phone(body.phone_number), "error_kind": str(result.error_kind)},
        )
    return result.to_dict()


# ──────────────────────────────────────────────────────────────────────────────
# Conversas
# ──────────────────────────────────────────────────────────────────────────────


@router.get("/conversations")
async def list_conversations(
    request: Request,
    limit: int = Query(default=50, ge=1, le=500),
    min_messages: int = Query(default=1, ge=0),
) -> dict[str, Any]:
    """Conversas do cache, completadas pelo store persistente até ``limit``."""
    conversations = await request.app.state.services.context_store.active_conversations(
        limit=limit,
        min_messages=min_messages,
    )
    return {"total": len(conversations), "conversations": conversations}


# Declarada antes de /{phone} para não ser capturada como telefone
@router.get("/conversations/export")
async def export_conversations(
    request: Request,
    phone: str | None = Query(default=None),
) -> dict[str, Any]:
    customer_id = _normalize_phone(phone) if phone else None
    return await request.app.state.services.context_store.export_all(customer_id)


@router.get("/conversations/{phone}")
async def get_conversation(
    request: Request,
    phone: str,
    limit: int | None = Query(default=None, ge=1),
) -> dict[str, Any]:
    """Histórico e padrões de um cliente (recarrega do store persistente se preciso)."""
    customer_id = _normalize_phone(phone)
    context_store = request.app.state.services.context_store
    messages = await context_store.get(customer_id, limit)
    patterns = await context_store.analyze_patterns(customer_id)
    return {
        "phone_number": customer_id,
        "message_count": len(messages),
        "messages": [message.to_dict() for message in messages],
        "patterns": patterns,
    }


@router.delete("/conversations/{phone}")
async def clear_conversation(request: Request, phone: str) -> dict[str, Any]:
    customer_id = _normalize_phone(phone)
    removed = await request.app.state.services.context_store.clear(customer_id)
    return {"phone_number": customer_id, "cleared": removed}


# ──────────────────────────────────────────────────────────────────────────────
# Métricas
# ──────────────────────────────────────────────────────────────────────────────


@router.get("/metrics")
async def get_metrics(request: Request) -> dict[str, Any]:
    services = request.app.state.services
    return {
        "delivery": services.delivery_service.snapshot(),
        "generation": services.response_service.stats(),
        "context": services.context_store.stats(),
        "background_tasks": services.runner.active_count,
    }


@router.post("/metrics/reset")
async def reset_metrics(request: Request) -> dict[str, Any]:
    request.app.state.services.delivery_service.reset()
    logger.info("admin_metrics_reset")
    return {"status": "reset"}
