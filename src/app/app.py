"""Entrypoint da aplicação (assistente de citas via WhatsApp).

Este módulo é o ponto de entrada principal do serviço.
Inicializa o bootstrap e expõe a aplicação ASGI (FastAPI).

Uso (produção):
    uvicorn app.app:app --host 0.0.0.0 --port 8080

Uso (desenvolvimento):
    uvicorn app.app:app --reload --host 0.0.0.0 --port 8080

Cloud Run:
    O container deve expor a porta 8080 (padrão do Cloud Run).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import create_api_router
from app.bootstrap import SERVICE_NAME, initialize_app, validate_runtime_settings
from app.bootstrap.dependencies import build_services
from config.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from app.bootstrap.dependencies import ServiceContainer

# Inicializar logging ANTES de qualquer import que use logger
initialize_app()

logger = get_logger(__name__)

DRAIN_TIMEOUT_SECONDS = 30.0


def create_app(services: ServiceContainer | None = None) -> FastAPI:
    """Cria e configura a aplicação FastAPI.

    Args:
        services: Container pronto (testes). Se None, é montado no startup
            a partir das settings.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Startup: valida settings, monta serviços e inicia varreduras.

        Shutdown: para varreduras, drena tasks pendentes e fecha clientes.
        """
        logger.info("app_starting", extra={"service": SERVICE_NAME})
        validate_runtime_settings()
        container = services if services is not None else build_services()
        app.state.services = container
        container.maintenance.start()

        yield

        logger.info("app_shutting_down", extra={"service": SERVICE_NAME})
        await container.maintenance.stop()
        cancelled = await container.runner.drain(timeout_seconds=DRAIN_TIMEOUT_SECONDS)
        await container.aclose()
        logger.info(
            "app_stopped",
            extra={"service": SERVICE_NAME, "cancelled_tasks": cancelled},
        )

    fastapi_app = FastAPI(
        title="Asistente de Citas",
        description="Atendimento WhatsApp com IA e notificações de agendamento",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
    )

    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    fastapi_app.include_router(create_api_router())

    # Disponível antes do lifespan quando injetado (ASGITransport não dispara startup)
    if services is not None:
        fastapi_app.state.services = services

    logger.info("app_configured", extra={"service": SERVICE_NAME})
    return fastapi_app


# Aplicação ASGI exposta para uvicorn
app = create_app()


def main() -> None:
    """Entrypoint para execução direta (desenvolvimento)."""
    import uvicorn

    logger.info("app_dev_server_starting", extra={"service": SERVICE_NAME})
    uvicorn.run(
        "app.app:app",
        host="0.0.0.0",
        port=8080,
        reload=True,
    )


if __name__ == "__main__":
    main()
