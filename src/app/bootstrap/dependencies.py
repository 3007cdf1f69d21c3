"""Factories de stores e serviços: composition root.

Centraliza a criação das implementações concretas a partir das settings
e monta o ServiceContainer publicado em ``app.state.services``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from ai.config.business_profile import load_business_profile
from api.connectors.twilio.http_client import TwilioMessagingClient
from api.routes.webhook_runtime_tasks import BackgroundTaskRunner
from app.bootstrap.clients import (
    create_async_redis_client,
    create_firestore_client,
    create_twilio_http_client,
)
from app.coordinators.webhook_ingestion import (
    CalendlyIngestionController,
    TwilioIngestionController,
)
from app.infra.ai.openai_generator import OpenAITextGenerator
from app.infra.stores import (
    FirestoreExchangeStore,
    MemoryDedupeStore,
    MemoryExchangeStore,
    RedisDedupeStore,
)
from app.services import (
    ConversationContextStore,
    GenerativeResponseService,
    MaintenanceScheduler,
    OutboundDeliveryService,
    RateLimiter,
    ResponseCache,
    SweepJob,
)
from app.use_cases import (
    ProcessInboundMessageUseCase,
    ProcessSchedulingEventUseCase,
    SendManualMessageUseCase,
)
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

if TYPE_CHECKING:
    from app.protocols.dedupe import AsyncDedupeProtocol
    from app.protocols.exchange_store import ExchangeStoreProtocol
    from app.protocols.messaging_transport import MessagingTransportProtocol
    from app.protocols.text_generator import TextGeneratorProtocol
    from config.settings import (
        AdminSettings,
        BaseSettings,
        DedupeSettings,
        FirestoreSettings,
        OpenAISettings,
    )

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Serviços de runtime compartilhados pelas rotas (um por processo)."""

    context_store: ConversationContextStore
    response_service: GenerativeResponseService
    delivery_service: OutboundDeliveryService
    exchange_store: ExchangeStoreProtocol
    dedupe: AsyncDedupeProtocol
    runner: BackgroundTaskRunner
    twilio_controller: TwilioIngestionController
    calendly_controller: CalendlyIngestionController
    manual_message: SendManualMessageUseCase
    maintenance: MaintenanceScheduler
    admin_settings: AdminSettings
    twilio_webhook_base_url: str = ""
    closeables: tuple[Any, ...] = ()

    async def aclose(self) -> None:
        """Fecha clientes externos (shutdown)."""
        for resource in self.closeables:
            try:
                await resource.aclose()
            except Exception as exc:
                logger.warning(
                    "service_close_failed",
                    extra={"resource": type(resource).__name__, "error_type": type(exc).__name__},
                )


# ──────────────────────────────────────────────────────────────────────────────
# Store Factories
# ──────────────────────────────────────────────────────────────────────────────


def create_exchange_store(
    settings: FirestoreSettings,
    base: BaseSettings,
) -> ExchangeStoreProtocol:
    """Cria store de histórico conforme EXCHANGE_STORE_BACKEND.

    - "memory": MemoryExchangeStore (dev/test)
    - "firestore": FirestoreExchangeStore (staging/production)
    """
    if settings.backend == "firestore":
        client = create_firestore_client(settings.project_id or base.gcp_project)
        store: ExchangeStoreProtocol = FirestoreExchangeStore(
            client,
            exchanges_collection=settings.collection_exchanges,
            scheduling_events_collection=settings.collection_scheduling_events,
        )
        logger.info("exchange_store_created", extra={"backend": "firestore"})
        return store

    if not base.is_development:
        logger.warning(
            "memory_store_in_non_dev",
            extra={"backend": "memory", "environment": base.environment},
        )
    logger.info("exchange_store_created", extra={"backend": "memory"})
    return MemoryExchangeStore()


def create_dedupe_store(settings: DedupeSettings, base: BaseSettings) -> AsyncDedupeProtocol:
    """Cria store de dedupe conforme DEDUPE_BACKEND (memory|redis)."""
    if settings.backend == "redis":
        store: AsyncDedupeProtocol = RedisDedupeStore(create_async_redis_client(base))
        logger.info("dedupe_store_created", extra={"backend": "redis"})
        return store

    logger.info("dedupe_store_created", extra={"backend": "memory"})
    return MemoryDedupeStore()


def create_text_generator(settings: OpenAISettings) -> TextGeneratorProtocol | None:
    """Cria backend OpenAI; None quando desabilitado ou sem chave."""
    if not settings.enabled or not settings.api_key:
        logger.warning(
            "text_generator_disabled",
            extra={"enabled": settings.enabled, "has_api_key": bool(settings.api_key)},
        )
        return None
    return OpenAITextGenerator(settings=settings)


# ──────────────────────────────────────────────────────────────────────────────
# Container
# ──────────────────────────────────────────────────────────────────────────────


def build_services(
    *,
    exchange_store: ExchangeStoreProtocol | None = None,
    dedupe: AsyncDedupeProtocol | None = None,
    generator: TextGeneratorProtocol | None = None,
    transport: MessagingTransportProtocol | None = None,
) -> ServiceContainer:
    """Monta o grafo de serviços a partir das settings.

    Os parâmetros permitem injetar implementações (testes/scripts); os
    ausentes são criados pelas factories conforme o ambiente.
    """
    base = get_base_settings()
    conversation = get_conversation_settings()
    delivery = get_delivery_settings()
    openai_settings = get_openai_settings()
    twilio = get_twilio_settings()
    dedupe_settings = get_dedupe_settings()

    closeables: list[Any] = []
    if exchange_store is None:
        exchange_store = create_exchange_store(get_firestore_settings(), base)
    if dedupe is None:
        dedupe = create_dedupe_store(dedupe_settings, base)
        if isinstance(dedupe, RedisDedupeStore):
            closeables.append(dedupe)
    if generator is None:
        generator = create_text_generator(openai_settings)
        if isinstance(generator, OpenAITextGenerator):
            closeables.append(generator)
    if transport is None:
        twilio_client = TwilioMessagingClient(twilio, create_twilio_http_client(twilio))
        closeables.append(twilio_client)
        transport = twilio_client

    context_store = ConversationContextStore(
        exchange_store,
        max_messages=conversation.max_messages,
        retention_seconds=conversation.retention_seconds,
        reload_limit=conversation.reload_limit,
    )
    response_service = GenerativeResponseService(
        generator,
        ResponseCache(
            ttl_seconds=openai_settings.cache_ttl_seconds,
            max_entries=openai_settings.cache_max_entries,
        ),
        model=openai_settings.model,
        default_max_tokens=openai_settings.max_tokens,
        default_temperature=openai_settings.temperature,
        timeout_seconds=openai_settings.timeout_seconds,
    )
    rate_limiter = RateLimiter(delivery.max_per_window, delivery.window_seconds)
    delivery_service = OutboundDeliveryService(
        transport,
        rate_limiter,
        max_attempts=delivery.max_attempts,
        base_delay_seconds=delivery.base_delay_seconds,
        jitter_seconds=delivery.jitter_seconds,
        timeout_seconds=twilio.request_timeout_seconds,
        max_body_length=delivery.max_body_length,
        default_country=base.default_country_code,
    )

    inbound_use_case = ProcessInboundMessageUseCase(
        context_store=context_store,
        response_service=response_service,
        delivery_service=delivery_service,
        exchange_store=exchange_store,
        profile_loader=load_business_profile,
        history_messages=conversation.prompt_history_messages,
    )
    scheduling_use_case = ProcessSchedulingEventUseCase(
        context_store=context_store,
        response_service=response_service,
        delivery_service=delivery_service,
        exchange_store=exchange_store,
        profile_loader=load_business_profile,
    )

    runner = BackgroundTaskRunner()
    maintenance = MaintenanceScheduler(
        [
            SweepJob(
                "conversation_context",
                conversation.cleanup_interval_seconds,
                context_store.evict_expired,
            ),
            SweepJob(
                "response_cache",
                response_service.cache.ttl_seconds,
                response_service.cache.evict_expired,
            ),
            SweepJob("rate_windows", rate_limiter.window_seconds, rate_limiter.evict_expired),
        ]
    )

    return ServiceContainer(
        context_store=context_store,
        response_service=response_service,
        delivery_service=delivery_service,
        exchange_store=exchange_store,
        dedupe=dedupe,
        runner=runner,
        twilio_controller=TwilioIngestionController(
            settings=twilio,
            runner=runner,
            handler=inbound_use_case.execute,
            dedupe=dedupe,
            dedupe_ttl_seconds=dedupe_settings.ttl_seconds,
            default_country=base.default_country_code,
        ),
        calendly_controller=CalendlyIngestionController(
            settings=get_calendly_settings(),
            runner=runner,
            handler=scheduling_use_case.execute,
            default_country=base.default_country_code,
        ),
        manual_message=SendManualMessageUseCase(
            context_store=context_store,
            delivery_service=delivery_service,
        ),
        maintenance=maintenance,
        admin_settings=get_admin_settings(),
        twilio_webhook_base_url=twilio.webhook_base_url,
        closeables=tuple(closeables),
    )
