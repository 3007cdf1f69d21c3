"""Agregador de rotas: registra os routers de cada origem.

Uso:
    from api.routes import create_api_router

    app = FastAPI()
    app.include_router(create_api_router())
"""

from __future__ import annotations

from fastapi import APIRouter

from api.routes.admin.router import router as admin_router
from api.routes.calendly.webhook import router as calendly_router
from api.routes.health.router import router as health_router
from api.routes.twilio.webhook import router as twilio_router


def create_api_router() -> APIRouter:
    """Cria router principal com todos os sub-routers registrados."""
    api_router = APIRouter()

    # Health checks (sem prefixo para /health e /ready na raiz)
    api_router.include_router(health_router, tags=["health"])

    api_router.include_router(twilio_router, prefix="/webhook/whatsapp", tags=["whatsapp"])
    api_router.include_router(calendly_router, prefix="/webhook/calendly", tags=["calendly"])
    api_router.include_router(admin_router, prefix="/admin", tags=["admin"])

    return api_router
