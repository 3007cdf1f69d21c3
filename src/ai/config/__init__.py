"""Configuração de IA (perfil do negócio)."""

from ai.config.business_profile import (
    BusinessProfile,
    BusinessProfileError,
    load_business_profile,
)

__all__ = [
    "BusinessProfile",
    "BusinessProfileError",
    "load_business_profile",
]
