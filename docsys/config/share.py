"""Share-link configuration."""

from __future__ import annotations

from pydantic import Field, field_validator

from docsys.config.base import BaseConfig


class ShareConfig(BaseConfig):
    """Settings for building and importing share links."""

    base_url: str = Field(
        "http://localhost:8000/",
        min_length=1,
        description="Application location that share tokens are appended to",
    )
    title_prefix: str = Field("Shared: ", description="Prefix marking imported documents")

    @field_validator("base_url")
    @classmethod
    def _drop_fragment(cls, value: str) -> str:
        return value.split("#", 1)[0]


__all__ = ["ShareConfig"]
