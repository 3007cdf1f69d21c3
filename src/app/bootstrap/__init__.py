"""Bootstrap da aplicação: inicialização e wiring.

Este módulo é o composition root: configura logging, valida settings e
conecta implementações concretas aos protocolos.

Uso:
    from app.bootstrap import initialize_app, validate_runtime_settings

    initialize_app()
    validate_runtime_settings()
"""

from __future__ import annotations

import logging
import os

from app.observability import get_correlation_id
from config.logging import configure_logging
from config.settings import (
    get_admin_settings,
    get_base_settings,
    get_calendly_settings,
    get_conversation_settings,
    get_dedupe_settings,
    get_delivery_settings,
    get_firestore_settings,
    get_openai_settings,
    get_twilio_settings,
)

# Nome do serviço para logs e métricas
SERVICE_NAME = "asistente_citas"

# Nível de log padrão (pode ser sobrescrito por env)
DEFAULT_LOG_LEVEL = "INFO"
STRICT_VALIDATION_ENVS = {"staging", "production"}

logger = logging.getLogger(__name__)


def initialize_app() -> None:
    """Inicializa logging estruturado JSON com correlation_id.

    Deve ser chamada uma vez no início do serviço.
    """
    log_level = os.getenv("LOG_LEVEL", DEFAULT_LOG_LEVEL).upper()

    configure_logging(
        level=log_level,
        service_name=SERVICE_NAME,
        correlation_id_getter=get_correlation_id,
    )


def initialize_test_app() -> None:
    """Inicializa a aplicação para testes (logging em DEBUG)."""
    configure_logging(
        level="DEBUG",
        service_name=f"{SERVICE_NAME}_test",
        correlation_id_getter=get_correlation_id,
    )


def collect_settings_errors() -> list[str]:
    """Agrega erros de validação de todas as settings."""
    base = get_base_settings()
    errors: list[str] = []
    errors.extend(f"base: {error}" for error in base.validate())
    errors.extend(f"dedupe: {error}" for error in get_dedupe_settings().validate(base))
    errors.extend(f"conversation: {error}" for error in get_conversation_settings().validate())
    errors.extend(f"delivery: {error}" for error in get_delivery_settings().validate())
    errors.extend(f"twilio: {error}" for error in get_twilio_settings().validate())
    errors.extend(f"calendly: {error}" for error in get_calendly_settings().validate())
    errors.extend(f"openai: {error}" for error in get_openai_settings().validate())
    errors.extend(
        f"firestore: {error}" for error in get_firestore_settings().validate(base.gcp_project)
    )
    errors.extend(f"admin: {error}" for error in get_admin_settings().validate())
    return errors


def validate_runtime_settings() -> None:
    """Valida settings obrigatórias no startup.

    Em `staging`/`production` falha rápido para impedir boot inválido.
    Em `development`/`test` mantém alerta sem bloquear execução local.
    """
    environment = get_base_settings().environment
    strict_mode = environment in STRICT_VALIDATION_ENVS
    errors = collect_settings_errors()

    if not errors:
        logger.info(
            "settings_validated",
            extra={"component": "bootstrap", "result": "ok", "environment": environment},
        )
        return

    logger.warning(
        "settings_validation_failed",
        extra={
            "component": "bootstrap",
            "result": "failed",
            "environment": environment,
            "error_count": len(errors),
            "errors": errors,
        },
    )
    if strict_mode:
        details = "\n".join(f"- {error}" for error in errors)
        raise RuntimeError(f"Configuração inválida para {environment}:\n{details}")
