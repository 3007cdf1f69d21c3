"""Modelos de domínio do contexto de conversação."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime  # noqa: TC003 - usado em runtime nos dataclasses
from typing import Any, Literal

MessageRole = Literal["customer", "assistant"]


@dataclass(frozen=True, slots=True)
class ConversationMessage:
    """Mensagem individual de uma conversa (imutável).

    Attributes:
        role: Autor da mensagem (customer|assistant)
        content: Texto da mensagem
        timestamp: Momento da mensagem (UTC)
        message_id: ID da mensagem no provedor (MessageSid) quando houver
        has_media: Se a mensagem inbound trazia mídia
        manual: Se foi enviada manualmente por um operador
        sent_by: Operador responsável por envio manual
    """

    role: MessageRole
    content: str
    timestamp: datetime
    message_id: str | None = None
    has_media: bool = False
    manual: bool = False
    sent_by: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serializa para exportação/admin."""
        return {
            "role": self.role,
            "content": self.content,
            "timestamp": self.timestamp.isoformat(),
            "message_id": self.message_id,
            "has_media": self.has_media,
            "manual": self.manual,
            "sent_by": self.sent_by,
        }
