"""Writing assistant integration."""

from __future__ import annotations

from .service import APOLOGY, AssistantService, ChatMessage, ChatSession, format_reply_as_markup

__all__ = [
    "APOLOGY",
    "AssistantService",
    "ChatMessage",
    "ChatSession",
    "format_reply_as_markup",
]
