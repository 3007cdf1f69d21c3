"""Prompts do assistente."""

from ai.prompts.conversation_prompt import build_conversation_prompt
from ai.prompts.scheduling_prompt import (
    EVENT_CANCELED,
    EVENT_CREATED,
    EVENT_RESCHEDULED,
    SchedulingDetails,
    build_scheduling_prompt,
)

__all__ = [
    "EVENT_CANCELED",
    "EVENT_CREATED",
    "EVENT_RESCHEDULED",
    "SchedulingDetails",
    "build_conversation_prompt",
    "build_scheduling_prompt",
]
