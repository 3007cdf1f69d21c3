"""App: orquestração, casos de uso e infraestrutura.

Subpastas:
- bootstrap/: composition root (factories, inicialização, wiring)
- coordinators/: ingestão de webhooks (ack → validação → despacho)
- use_cases/: fluxos de mensagem inbound, agendamento e envio manual
- services/: contexto, geração, cache, rate limit e entrega
- infra/: implementações concretas de IO
- protocols/: contratos/interfaces
- domain/: tipos de domínio
- observability/: correlation_id e métricas via logs

Padrão: app executa; api adapta; ai monta prompts; utils apoia.
"""
