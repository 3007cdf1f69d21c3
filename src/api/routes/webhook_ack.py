"""Ack HTTP imediato + ingestão em background (comum a todos os webhooks).

A resposta 200 é enviada antes de qualquer validação: assinatura inválida
ou payload malformado são tratados apenas no controller, via logs.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from fastapi.responses import JSONResponse
from starlette.background import BackgroundTask

from app.coordinators.webhook_ingestion import RawWebhook
from app.observability import resolve_correlation_id

if TYPE_CHECKING:
    from fastapi import Request

    from app.coordinators.webhook_ingestion import WebhookIngestionController

logger = logging.getLogger(__name__)


async def acknowledge_webhook(
    request: Request,
    controller: WebhookIngestionController,
    *,
    url: str = "",
) -> JSONResponse:
    """Captura o request bruto, responde 200 e agenda a ingestão."""
    correlation_id = resolve_correlation_id(request.headers)
    raw = RawWebhook(
        body=await request.body(),
        headers=dict(request.headers),
        url=url,
        correlation_id=correlation_id,
    )
    logger.info(
        "webhook_received",
        extra={
            "channel": controller.channel,
            "correlation_id": correlation_id,
            "body_bytes": len(raw.body),
        },
    )
    return JSONResponse(
        content={"status": "received", "correlation_id": correlation_id},
        background=BackgroundTask(controller.ingest, raw),
    )
