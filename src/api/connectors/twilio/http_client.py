"""Cliente HTTP da REST API do Twilio (envio WhatsApp).

Faz uma única tentativa por chamada; retry, rate limit e classificação
ficam no serviço de entrega. Nunca loga tokens, corpo ou telefone completo.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import httpx

from app.protocols.messaging_transport import MessagingTransportProtocol, TransportError
from utils.phone import mask_phone

if TYPE_CHECKING:
    from config.settings.twilio import TwilioSettings

logger = logging.getLogger(__name__)

WHATSAPP_ADDRESS_PREFIX = "whatsapp:"


class TwilioMessagingClient(MessagingTransportProtocol):
    """Transporte de mensagens WhatsApp via Twilio Messages API.

    Args:
        settings: Credenciais e número remetente
        http_client: Cliente httpx compartilhado (opcional; criado sob demanda)
    """

    def __init__(
        self,
        settings: TwilioSettings,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._http_client = http_client

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self._settings.request_timeout_seconds,
            )
        return self._http_client

    async def aclose(self) -> None:
        """Fecha o cliente HTTP (shutdown)."""
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def send(
        self,
        to: str,
        body: str,
        *,
        media_url: str | None = None,
    ) -> str:
        """Cria mensagem no Twilio e retorna o SID.

        Raises:
            TransportError: Resposta de erro do Twilio ou falha de rede
        """
        form: dict[str, Any] = {
            "From": f"{WHATSAPP_ADDRESS_PREFIX}{self._settings.whatsapp_number}",
            "To": f"{WHATSAPP_ADDRESS_PREFIX}{to}",
            "Body": body,
        }
        if media_url:
            form["MediaUrl"] = media_url

        client = self._get_http_client()
        try:
            response = await client.post(
                self._settings.get_messages_endpoint(),
                data=form,
                auth=(self._settings.account_sid, self._settings.auth_token),
            )
        except httpx.TimeoutException as exc:
            raise TransportError("twilio_timeout") from exc
        except httpx.HTTPError as exc:
            raise TransportError("twilio_connection_error") from exc

        if response.status_code >= 400:
            raise _error_from_response(response)

        data = _safe_json(response)
        message_sid = data.get("sid")
        if not message_sid:
            logger.warning(
                "twilio_missing_sid",
                extra={"to": mask_phone(to), "status_code": response.status_code},
            )
            raise TransportError("twilio_missing_sid", status_code=response.status_code)

        logger.debug(
            "twilio_message_created",
            extra={
                "to": mask_phone(to),
                "status": data.get("status"),
                "message_sid": message_sid,
            },
        )
        return str(message_sid)


def _safe_json(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _error_from_response(response: httpx.Response) -> TransportError:
    """Converte resposta de erro do Twilio em TransportError tipado."""
    data = _safe_json(response)
    raw_code = data.get("code")
    code = raw_code if isinstance(raw_code, int) else None
    logger.warning(
        "twilio_api_error",
        extra={
            "status_code": response.status_code,
            "error_code": code,
            "error_message": str(data.get("message", ""))[:200],
        },
    )
    return TransportError(
        "twilio_api_error",
        code=code,
        status_code=response.status_code,
    )
