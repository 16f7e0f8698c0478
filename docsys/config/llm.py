"""Writing assistant configuration."""

from __future__ import annotations

from pydantic import Field

from docsys.config.base import BaseConfig
from docsys.config.utils import resolve_env_reference


class AssistantConfig(BaseConfig):
    """Configuration for the chat-style writing assistant."""

    enabled: bool = Field(True, description="Whether the assistant may be started")
    model: str = Field("gemini/gemini-2.5-flash", min_length=1, description="Model identifier for API calls")
    base_url: str | None = Field(None, description="Optional API base URL; 'stub://' selects the offline stub")
    api_key: str | None = Field("env:API_KEY", description="API key, can use 'env:VAR_NAME' format")
    system_instruction: str = Field(
        "You are a helpful writing assistant.",
        min_length=1,
        description="System instruction sent at the start of every chat",
    )
    temperature: float = Field(1.0, ge=0.0, le=2.0, description="Sampling temperature")

    @property
    def api_key_secret(self) -> str | None:
        """Return the resolved API key, or ``None`` when no credential is available."""

        return resolve_env_reference(self.api_key, required=False)


__all__ = ["AssistantConfig"]
