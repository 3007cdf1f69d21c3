"""API: camada de borda e adapters das origens externas.

Responsabilidades:
- Receber webhooks (Twilio, Calendly) e responder ack imediato
- Validar assinaturas
- Normalizar payloads para InboundEvent
- Enviar mensagens via REST do Twilio

Subpastas:
- connectors/: assinatura e clientes HTTP por provedor
- normalizers/: payloads externos → InboundEvent
- routes/: endpoints HTTP (webhooks, health, admin)

NÃO PODE conter: montagem de prompts, regras de conversa, orquestração de use cases.
"""
