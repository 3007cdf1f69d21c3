"""Protocolo do primitivo de envio de mensagens (provedor outbound)."""

from __future__ import annotations

from abc import ABC, abstractmethod


class TransportError(Exception):
    """Erro do provedor de mensagens, sem dados sensíveis.

    Attributes:
        code: Código de erro do provedor (ex.: 21211), quando informado
        status_code: Status HTTP da resposta, quando houver
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


class MessagingTransportProtocol(ABC):
    """Contrato mínimo de envio: (destinatário, corpo) -> ID do provedor.

    Não garante entrega at-least-once; retry é responsabilidade do chamador.
    """

    @abstractmethod
    async def send(
        self,
        to: str,
        body: str,
        *,
        media_url: str | None = None,
    ) -> str:
        """Envia mensagem e retorna o ID atribuído pelo provedor.

        Args:
            to: Destinatário em E.164
            body: Texto da mensagem
            media_url: URL pública de mídia anexa (opcional)

        Raises:
            TransportError: Provedor recusou ou falhou
        """
