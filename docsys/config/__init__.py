"""Configuration namespace for docsys."""

from __future__ import annotations

from .app import AppConfig
from .base import BaseConfig, load_config
from .llm import AssistantConfig
from .share import ShareConfig
from .storage import DEFAULT_STORAGE_KEY, StorageConfig
from .utils import resolve_env_reference
from .web import WebAuthConfig, WebConfig

__all__ = [
    "BaseConfig",
    "AppConfig",
    "load_config",
    "AssistantConfig",
    "ShareConfig",
    "StorageConfig",
    "DEFAULT_STORAGE_KEY",
    "WebAuthConfig",
    "WebConfig",
    "resolve_env_reference",
]
