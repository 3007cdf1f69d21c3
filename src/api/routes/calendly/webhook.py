"""Endpoint de eventos de agendamento do Calendly.

Endpoints:
- POST /webhook/calendly: invitee.created | invitee.canceled | invitee.rescheduled
"""

from __future__ import annotations

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.routes.webhook_ack import acknowledge_webhook

router = APIRouter()


@router.post("")
async def receive_scheduling_event(request: Request) -> JSONResponse:
    return await acknowledge_webhook(request, request.app.state.services.calendly_controller)
