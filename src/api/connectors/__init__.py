"""Connectors por provedor: adapters de borda para APIs externas.

Estrutura:
- twilio/: assinatura de webhook e envio de mensagens WhatsApp
- calendly/: assinatura de webhook
"""

__all__: list[str] = []
