"""Application-level configuration models."""

from __future__ import annotations

from pydantic import Field

from docsys.config.base import BaseConfig
from docsys.config.llm import AssistantConfig
from docsys.config.share import ShareConfig
from docsys.config.storage import StorageConfig
from docsys.config.web import WebConfig


class AppConfig(BaseConfig):
    """Top-level runtime configuration for the entire application."""

    logging_level: str = Field("INFO", description="Log level: DEBUG, INFO, WARNING, ERROR")
    storage: StorageConfig = Field(default_factory=StorageConfig, description="Durable slot configuration")
    share: ShareConfig = Field(default_factory=ShareConfig, description="Share link configuration")
    assistant: AssistantConfig | None = Field(None, description="Writing assistant configuration")
    web: WebConfig | None = Field(None, description="HTTP API configuration")


__all__ = ["AppConfig"]
