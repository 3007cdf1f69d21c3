"""Sanitização de prompts antes do envio ao backend generativo.

Responsabilidades:
- Remover caracteres de controle (mantém \\t, \\n e \\r)
- Truncar prompts longos com marcador explícito
- Garantir determinismo (mesma entrada = mesma saída), base do fingerprint
"""

from __future__ import annotations

import re
from typing import Final

MAX_PROMPT_LENGTH: Final[int] = 8000
TRUNCATION_MARKER: Final[str] = "..."

_CONTROL_CHARS: Final[re.Pattern[str]] = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_prompt(text: str | None, max_length: int = MAX_PROMPT_LENGTH) -> str:
    """Limpa o prompt para envio ao LLM.

    Args:
        text: Prompt bruto
        max_length: Tamanho máximo antes do marcador de truncamento

    Returns:
        Prompt sem caracteres de controle, truncado e sem espaços nas bordas.

    Exemplos:
        >>> sanitize_prompt("  Hola\\x00 mundo  ")
        'Hola mundo'
        >>> sanitize_prompt("abcdef", max_length=3)
        'abc...'
    """
    if not text:
        return ""

    cleaned = _CONTROL_CHARS.sub("", text)
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length] + TRUNCATION_MARKER
    return cleaned.strip()
