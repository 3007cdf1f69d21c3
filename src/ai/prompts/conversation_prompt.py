"""Prompt contextual para mensagens de clientes (canal WhatsApp).

Composição:
- Perfil do negócio e instruções do assistente
- Últimas mensagens do contexto (papel + conteúdo)
- Mensagem atual do cliente
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ai.config.business_profile import BusinessProfile
    from app.domain.conversation import ConversationMessage

HISTORY_MESSAGES = 5
MAX_REPLY_WORDS = 300

_ROLE_LABELS = {"customer": "Cliente", "assistant": "Asistente"}


def build_conversation_prompt(
    profile: BusinessProfile,
    message: str,
    history: Sequence[ConversationMessage] = (),
    *,
    history_messages: int = HISTORY_MESSAGES,
) -> str:
    """Monta prompt com perfil do negócio, histórico recente e mensagem atual."""
    lines = [
        f"Eres el asistente virtual autónomo de {profile.name}.",
        "",
        "INFORMACIÓN DEL NEGOCIO:",
        f"- Nombre: {profile.name}",
        f"- Teléfono: {profile.phone}",
        f"- Email: {profile.email}",
        f"- Dirección: {profile.address}",
    ]
    if profile.booking_url:
        lines.append(f"- Enlace de reservas: {profile.booking_url}")

    if profile.instructions:
        lines += ["", "INSTRUCCIONES:"]
        lines += [f"- {instruction}" for instruction in profile.instructions]

    recent = list(history)[-history_messages:] if history_messages > 0 else []
    if recent:
        lines += ["", "CONTEXTO DE CONVERSACIÓN ANTERIOR:"]
        lines += [f"{_ROLE_LABELS.get(item.role, item.role)}: {item.content}" for item in recent]

    lines += [
        "",
        f'MENSAJE ACTUAL DEL CLIENTE: "{message}"',
        "",
        "Responde de manera apropiada al mensaje del cliente. "
        f"Máximo {MAX_REPLY_WORDS} palabras.",
    ]
    return "\n".join(lines)
