"""Settings específicas de Twilio (WhatsApp).

Credenciais da conta, número remetente e parâmetros de webhook/envio.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

# Constantes da REST API
TWILIO_API_BASE_URL: str = "https://api.twilio.com"
TWILIO_API_VERSION: str = "2010-04-01"


@dataclass(frozen=True)
class TwilioSettings:
    """Configurações do canal Twilio WhatsApp.

    Attributes:
        account_sid: SID da conta Twilio
        auth_token: Token de autenticação (também é o secret HMAC do webhook)
        whatsapp_number: Número remetente em E.164 (sem prefixo whatsapp:)
        validate_signature: Se a assinatura X-Twilio-Signature é exigida
        webhook_base_url: URL pública usada na assinatura (atrás de proxy)
        api_base_url: URL base da REST API
        request_timeout_seconds: Timeout por chamada de envio
    """

    account_sid: str = ""
    auth_token: str = ""
    whatsapp_number: str = ""
    validate_signature: bool = True
    webhook_base_url: str = ""

    api_base_url: str = TWILIO_API_BASE_URL
    request_timeout_seconds: float = 15.0

    def get_messages_endpoint(self) -> str:
        """Retorna URL de criação de mensagens da conta.

        Raises:
            ValueError: Se account_sid não configurado.
        """
        if not self.account_sid:
            raise ValueError("account_sid é obrigatório")
        return (
            f"{self.api_base_url}/{TWILIO_API_VERSION}/Accounts/"
            f"{self.account_sid}/Messages.json"
        )

    def validate(self) -> list[str]:
        """Valida configurações mínimas de Twilio.

        Returns:
            Lista de erros de validação (vazia = tudo OK).
        """
        errors: list[str] = []

        if not self.account_sid:
            errors.append("TWILIO_ACCOUNT_SID não configurado")

        if not self.auth_token:
            errors.append("TWILIO_AUTH_TOKEN não configurado")

        if not self.whatsapp_number:
            errors.append("TWILIO_WHATSAPP_NUMBER não configurado")

        if self.request_timeout_seconds <= 0:
            errors.append("TWILIO_TIMEOUT_SECONDS deve ser > 0")

        return errors


def _load_twilio_from_env() -> TwilioSettings:
    """Carrega TwilioSettings de variáveis de ambiente."""
    return TwilioSettings(
        account_sid=os.getenv("TWILIO_ACCOUNT_SID", ""),
        auth_token=os.getenv("TWILIO_AUTH_TOKEN", ""),
        whatsapp_number=os.getenv("TWILIO_WHATSAPP_NUMBER", "").replace("whatsapp:", ""),
        validate_signature=os.getenv("VALIDATE_TWILIO_SIGNATURE", "true").lower()
        in ("true", "1", "yes"),
        webhook_base_url=os.getenv("TWILIO_WEBHOOK_BASE_URL", "").rstrip("/"),
        api_base_url=os.getenv("TWILIO_API_BASE_URL", TWILIO_API_BASE_URL),
        request_timeout_seconds=float(os.getenv("TWILIO_TIMEOUT_SECONDS", "15")),
    )


@lru_cache(maxsize=1)
def get_twilio_settings() -> TwilioSettings:
    """Retorna instância cacheada de TwilioSettings."""
    return _load_twilio_from_env()
