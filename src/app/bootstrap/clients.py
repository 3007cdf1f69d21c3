"""Factories de clientes externos: Redis, Firestore e HTTP do Twilio."""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from google.cloud.firestore import Client as FirestoreClient
    from redis.asyncio import Redis as AsyncRedis

    from config.settings import BaseSettings, TwilioSettings

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# Redis Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_async_redis_client(base: BaseSettings) -> AsyncRedis:
    """Cria cliente Redis assíncrono.

    Raises:
        ValueError: Se REDIS_URL não configurado
    """
    from redis.asyncio import Redis as AsyncRedis

    if not base.redis_url:
        msg = "REDIS_URL não configurado"
        raise ValueError(msg)

    client: AsyncRedis = AsyncRedis.from_url(
        base.redis_url,
        decode_responses=False,
        socket_timeout=5.0,
        socket_connect_timeout=5.0,
    )

    logger.info("async_redis_client_created")
    return client


# ──────────────────────────────────────────────────────────────────────────────
# Firestore Client Factory
# ──────────────────────────────────────────────────────────────────────────────


@lru_cache(maxsize=1)
def create_firestore_client(project_id: str) -> FirestoreClient:
    """Cria cliente Firestore (singleton por projeto)."""
    from google.cloud import firestore

    client = firestore.Client(project=project_id or None)
    logger.info("firestore_client_created", extra={"project": project_id})
    return client


# ──────────────────────────────────────────────────────────────────────────────
# HTTP Client Factory
# ──────────────────────────────────────────────────────────────────────────────


def create_twilio_http_client(settings: TwilioSettings) -> httpx.AsyncClient:
    """Cria cliente httpx compartilhado pelos envios ao Twilio."""
    return httpx.AsyncClient(
        timeout=settings.request_timeout_seconds,
        limits=httpx.Limits(max_connections=50, max_keepalive_connections=10),
    )
