"""Módulo AI do assistente de citas.

Contém apenas lógica pura de IA (sem IO):
- config: perfil do negócio carregado de YAML
- prompts: montagem dos prompts de conversa e de agendamento
- utils: sanitização de prompts
"""

from ai.config import BusinessProfile, load_business_profile
from ai.prompts import SchedulingDetails, build_conversation_prompt, build_scheduling_prompt
from ai.utils import sanitize_prompt

__all__ = [
    "BusinessProfile",
    "SchedulingDetails",
    "build_conversation_prompt",
    "build_scheduling_prompt",
    "load_business_profile",
    "sanitize_prompt",
]
