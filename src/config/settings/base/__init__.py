"""Agregador de settings base.

Re-exporta todas as settings base para uso externo.
"""

from __future__ import annotations

from config.settings.base.conversation import (
    ConversationSettings,
    get_conversation_settings,
)
from config.settings.base.core import (
    BaseSettings,
    Environment,
    get_base_settings,
)
from config.settings.base.dedupe import (
    DedupeBackend,
    DedupeSettings,
    get_dedupe_settings,
)

__all__ = [
    # Core
    "BaseSettings",
    # Conversation
    "ConversationSettings",
    "DedupeBackend",
    # Dedupe
    "DedupeSettings",
    # Types
    "Environment",
    "get_base_settings",
    "get_conversation_settings",
    "get_dedupe_settings",
]
