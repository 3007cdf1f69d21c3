"""Configuração do pytest para o projeto Asistente Citas."""

import sys
from pathlib import Path

import pytest

# Adiciona src/ ao PYTHONPATH para permitir imports absolutos
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from ai.config.business_profile import load_business_profile  # noqa: E402
from config.settings import (  # noqa: E402
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

_CACHED_LOADERS = (
    get_admin_settings,
    get_base_settings,
    get_calendly_settings,
    get_conversation_settings,
    get_dedupe_settings,
    get_delivery_settings,
    get_firestore_settings,
    get_openai_settings,
    get_twilio_settings,
    load_business_profile,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Settings são lidas via lru_cache; cada teste parte de um cache limpo."""
    for loader in _CACHED_LOADERS:
        loader.cache_clear()
    yield
    for loader in _CACHED_LOADERS:
        loader.cache_clear()
