"""Registros persistidos no store de histórico (auditoria + cold reload)."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime  # noqa: TC003 - usado em runtime nos dataclasses
from typing import Any


@dataclass(frozen=True, slots=True)
class ExchangeRecord:
    """Uma troca cliente → assistente no WhatsApp.

    Também é a fonte da recarga do contexto quando o cache não tem entrada.
    """

    phone_number: str
    message_in: str
    message_out: str | None
    message_in_id: str | None
    message_out_id: str | None
    processed_at: datetime
    message_type: str = "text"
    has_media: bool = False
    success: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Serializa para persistência."""
        data = asdict(self)
        data["processed_at"] = self.processed_at.isoformat()
        return data


@dataclass(frozen=True, slots=True)
class SchedulingEventRecord:
    """Auditoria de um evento de agendamento processado."""

    event_type: str
    invitee_name: str
    invitee_email: str | None
    invitee_phone: str | None
    event_name: str | None
    event_start_time: str | None
    message_sent: bool
    message_content: str | None
    message_id: str | None
    processed_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Serializa para persistência."""
        data = asdict(self)
        data["processed_at"] = self.processed_at.isoformat()
        return data
