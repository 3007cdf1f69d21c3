"""Implementações concretas de IO para IA.

ai/ não faz IO direto; o backend generativo concreto vive aqui.
"""

from app.infra.ai.openai_generator import OpenAITextGenerator

__all__ = [
    "OpenAITextGenerator",
]
