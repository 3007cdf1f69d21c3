"""Utilitários de IA."""

from ai.utils.sanitizer import MAX_PROMPT_LENGTH, TRUNCATION_MARKER, sanitize_prompt

__all__ = [
    "MAX_PROMPT_LENGTH",
    "TRUNCATION_MARKER",
    "sanitize_prompt",
]
