"""Agregador de settings do Asistente Citas.

Re-exporta todas as settings e funções de cada módulo.
Organização por domínio para isolamento de mudanças.
"""

from __future__ import annotations

# Admin settings
from config.settings.admin import AdminSettings, get_admin_settings

# AI/LLM settings
from config.settings.ai import OpenAISettings, get_openai_settings

# Base settings
from config.settings.base import (
    BaseSettings,
    ConversationSettings,
    DedupeBackend,
    DedupeSettings,
    Environment,
    get_base_settings,
    get_conversation_settings,
    get_dedupe_settings,
)

# Webhook source settings
from config.settings.calendly import (
    SUPPORTED_EVENTS,
    CalendlySettings,
    get_calendly_settings,
)

# Delivery settings
from config.settings.delivery import DeliverySettings, get_delivery_settings

# Infrastructure settings
from config.settings.infra import (
    ExchangeStoreBackend,
    FirestoreSettings,
    get_firestore_settings,
)
from config.settings.twilio import (
    TWILIO_API_BASE_URL,
    TWILIO_API_VERSION,
    TwilioSettings,
    get_twilio_settings,
)

__all__ = [
    "SUPPORTED_EVENTS",
    "TWILIO_API_BASE_URL",
    "TWILIO_API_VERSION",
    "AdminSettings",
    "BaseSettings",
    "CalendlySettings",
    "ConversationSettings",
    "DedupeBackend",
    "DedupeSettings",
    "DeliverySettings",
    "Environment",
    "ExchangeStoreBackend",
    "FirestoreSettings",
    "OpenAISettings",
    "TwilioSettings",
    "get_admin_settings",
    "get_base_settings",
    "get_calendly_settings",
    "get_conversation_settings",
    "get_dedupe_settings",
    "get_delivery_settings",
    "get_firestore_settings",
    "get_openai_settings",
    "get_twilio_settings",
]
