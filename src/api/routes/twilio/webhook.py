"""Endpoint de mensagens inbound do WhatsApp via Twilio.

Endpoints:
- POST /webhook/whatsapp: recebe mensagem (form-encoded)

Twilio assina a URL pública completa; atrás de proxy a URL é reconstruída
a partir de X-Forwarded-* ou de TWILIO_WEBHOOK_BASE_URL.
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.connectors.twilio.signature import build_signed_url
from api.routes.webhook_ack import acknowledge_webhook

router = APIRouter()


@router.post("")
async def receive_whatsapp_message(request: Request) -> JSONResponse:
    """Ack imediato; validação e processamento ocorrem em background."""
    services = request.app.state.services
    url = build_signed_url(
        request.headers,
        request.url.path,
        request.url.query,
        public_base_url=services.twilio_webhook_base_url,
    )
    return await acknowledge_webhook(request, services.twilio_controller, url=url)
