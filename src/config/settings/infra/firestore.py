"""Settings do Firestore.

Configurações para Google Cloud Firestore (histórico de trocas).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Literal

ExchangeStoreBackend = Literal["memory", "firestore"]


@dataclass(frozen=True)
class FirestoreSettings:
    """Configurações do Firestore.

    Attributes:
        project_id: ID do projeto GCP (usa GCP_PROJECT se não definido)
        backend: Backend do store de trocas (memory|firestore)
        collection_exchanges: Collection de trocas WhatsApp
        collection_scheduling_events: Collection de eventos de agendamento
    """

    project_id: str = ""
    backend: ExchangeStoreBackend = "memory"
    collection_exchanges: str = "whatsapp_conversations"
    collection_scheduling_events: str = "calendly_events"

    def validate(self, gcp_project: str) -> list[str]:
        """Valida configurações do Firestore.

        Args:
            gcp_project: Projeto GCP padrão para fallback.

        Returns:
            Lista de erros de validação.
        """
        errors: list[str] = []
        effective_project = self.project_id or gcp_project

        if self.backend == "firestore" and not effective_project:
            errors.append(
                "FIRESTORE_PROJECT_ID ou GCP_PROJECT deve estar configurado"
            )

        if self.backend not in ("memory", "firestore"):
            errors.append(f"EXCHANGE_STORE_BACKEND inválido: {self.backend}")

        return errors


def _load_firestore_from_env() -> FirestoreSettings:
    """Carrega FirestoreSettings de variáveis de ambiente."""
    backend_str = os.getenv("EXCHANGE_STORE_BACKEND", "memory").lower()
    backend: ExchangeStoreBackend = "firestore" if backend_str == "firestore" else "memory"
    return FirestoreSettings(
        project_id=os.getenv("FIRESTORE_PROJECT_ID", ""),
        backend=backend,
        collection_exchanges=os.getenv(
            "FIRESTORE_COLLECTION_EXCHANGES", "whatsapp_conversations"
        ),
        collection_scheduling_events=os.getenv(
            "FIRESTORE_COLLECTION_SCHEDULING_EVENTS", "calendly_events"
        ),
    )


@lru_cache(maxsize=1)
def get_firestore_settings() -> FirestoreSettings:
    """Retorna instância cacheada de FirestoreSettings."""
    return _load_firestore_from_env()
