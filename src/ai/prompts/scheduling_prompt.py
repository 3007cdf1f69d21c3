"""Prompts de notificação para eventos de agendamento (Calendly)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ai.config.business_profile import BusinessProfile

EVENT_CREATED = "invitee.created"
EVENT_CANCELED = "invitee.canceled"
EVENT_RESCHEDULED = "invitee.rescheduled"

# Limite de palavras por tipo de evento
WORD_LIMITS = {
    EVENT_CREATED: 200,
    EVENT_CANCELED: 150,
    EVENT_RESCHEDULED: 180,
}
DEFAULT_WORD_LIMIT = 150


@dataclass(frozen=True, slots=True)
class SchedulingDetails:
    """Dados do evento usados no prompt."""

    invitee_name: str
    event_name: str = ""
    start_time: str = ""
    cancel_url: str = ""
    reschedule_url: str = ""


def build_scheduling_prompt(
    profile: BusinessProfile,
    event_type: str,
    details: SchedulingDetails,
) -> str:
    """Monta o prompt de notificação para o tipo de evento."""
    base = (
        f"Eres el asistente virtual de {profile.name}. "
        "Responde de manera profesional, amigable y en español."
    )
    limit = WORD_LIMITS.get(event_type, DEFAULT_WORD_LIMIT)
    contact = f"- Información de contacto: {profile.phone}"

    if event_type == EVENT_CREATED:
        body = [
            "Un cliente ha reservado una cita. Genera un mensaje de confirmación que incluya:",
            f"- Saludo personalizado con el nombre: {details.invitee_name}",
            f"- Confirmación de la cita: {details.event_name}",
            f"- Fecha y hora: {details.start_time}",
            *_links(details),
            "- Ofrecimiento de ayuda adicional",
            contact,
            "",
            f"Mantén un tono profesional pero cercano. Máximo {limit} palabras.",
        ]
    elif event_type == EVENT_CANCELED:
        body = [
            "Un cliente ha cancelado su cita. Genera un mensaje que incluya:",
            f"- Saludo personalizado con el nombre: {details.invitee_name}",
            "- Confirmación de la cancelación",
            "- Expresión de comprensión y flexibilidad",
            "- Invitación a reagendar cuando sea conveniente",
            *_booking_link(profile),
            contact,
            "",
            f"Mantén un tono comprensivo y positivo. Máximo {limit} palabras.",
        ]
    elif event_type == EVENT_RESCHEDULED:
        body = [
            "Un cliente ha reprogramado su cita. Genera un mensaje que incluya:",
            f"- Saludo personalizado con el nombre: {details.invitee_name}",
            "- Confirmación del cambio de fecha/hora",
            f"- Nueva fecha y hora: {details.start_time}",
            "- Agradecimiento por avisar del cambio",
            *_links(details),
            contact,
            "",
            f"Mantén un tono agradecido y profesional. Máximo {limit} palabras.",
        ]
    else:
        body = [
            f"Ha ocurrido un evento relacionado con una cita ({event_type}). "
            f"Genera un mensaje profesional y apropiado para el cliente {details.invitee_name}.",
            contact,
            f"Máximo {limit} palabras.",
        ]
    return "\n".join([base, *body])


def _links(details: SchedulingDetails) -> list[str]:
    lines = []
    if details.cancel_url:
        lines.append(f"- Enlace para cancelar: {details.cancel_url}")
    if details.reschedule_url:
        lines.append(f"- Enlace para reprogramar: {details.reschedule_url}")
    return lines


def _booking_link(profile: BusinessProfile) -> list[str]:
    if profile.booking_url:
        return [f"- Enlace para nueva reserva: {profile.booking_url}"]
    return []
