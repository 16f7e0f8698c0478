"""Chat-style writing assistant backed by LiteLLM."""

from __future__ import annotations

import itertools
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any, Protocol

import litellm
from loguru import logger

from docsys.config.llm import AssistantConfig
from docsys.errors import AssistantError

APOLOGY = "Sorry, an error occurred."


@dataclass(slots=True)
class ChatMessage:
    role: str
    text: str
    id: int


class _ChatClient(Protocol):
    def complete(self, messages: list[dict[str, str]]) -> str:
        ...

    def stream(self, messages: list[dict[str, str]]) -> Iterator[str]:
        ...


@dataclass(slots=True)
class _LiteLLMClient:
    """Client that delegates chat calls to LiteLLM."""

    config: AssistantConfig
    api_key: str = field(repr=False)

    def _call_kwargs(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
            "api_key": self.api_key,
        }
        if self.config.base_url:
            kwargs["api_base"] = self.config.base_url
        return kwargs

    def complete(self, messages: list[dict[str, str]]) -> str:
        try:
            response = litellm.completion(**self._call_kwargs(messages))
        except Exception as exc:  # noqa: BLE001
            raise AssistantError(f"Assistant request failed: {exc}") from exc
        content = _extract_content(response)
        if not content:
            raise AssistantError("Assistant returned an empty response")
        return content

    def stream(self, messages: list[dict[str, str]]) -> Iterator[str]:
        try:
            for chunk in litellm.completion(stream=True, **self._call_kwargs(messages)):
                delta = _extract_delta(chunk)
                if delta:
                    yield delta
        except Exception as exc:  # noqa: BLE001
            raise AssistantError(f"Assistant stream failed: {exc}") from exc


@dataclass(slots=True)
class _StubLLMClient:
    """Deterministic offline stand-in used for ``stub://`` base URLs."""

    config: AssistantConfig

    def complete(self, messages: list[dict[str, str]]) -> str:
        last = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")
        return f"[{self.config.model}] {last.strip()}"

    def stream(self, messages: list[dict[str, str]]) -> Iterator[str]:
        reply = self.complete(messages)
        for word in reply.split(" "):
            yield word + " "


def _build_client(config: AssistantConfig) -> _ChatClient | None:
    if config.base_url and config.base_url.strip().lower().startswith("stub://"):
        logger.debug("Using stub assistant client for model {}", config.model)
        return _StubLLMClient(config)

    api_key = config.api_key_secret
    if not api_key:
        logger.error("Assistant API key is not configured; the assistant is unavailable")
        return None
    logger.debug("Using LiteLLM assistant client for model {}", config.model)
    return _LiteLLMClient(config, api_key=api_key)


def _extract_content(response: Any) -> str:
    choices = getattr(response, "choices", None)
    if choices is None and isinstance(response, dict):
        choices = response.get("choices")
    if not choices:
        return ""

    choice = choices[0]
    message = getattr(choice, "message", None)
    if message is None and isinstance(choice, dict):
        message = choice.get("message")
    if message is None:
        return ""

    content = getattr(message, "content", None)
    if content is None and isinstance(message, dict):
        content = message.get("content")
    return str(content).strip() if content else ""


def _extract_delta(chunk: Any) -> str:
    choices = getattr(chunk, "choices", None)
    if choices is None and isinstance(chunk, dict):
        choices = chunk.get("choices")
    if not choices:
        return ""
    delta = getattr(choices[0], "delta", None)
    if delta is None and isinstance(choices[0], dict):
        delta = choices[0].get("delta")
    if delta is None:
        return ""
    content = getattr(delta, "content", None)
    if content is None and isinstance(delta, dict):
        content = delta.get("content")
    return content or ""


class ChatSession:
    """One conversation with the assistant, keeping the visible transcript."""

    def __init__(self, client: _ChatClient, system_instruction: str) -> None:
        self._client = client
        self._system_instruction = system_instruction
        self._ids = itertools.count(1)
        self.messages: list[ChatMessage] = []

    def _history(self) -> list[dict[str, str]]:
        history = [{"role": "system", "content": self._system_instruction}]
        for message in self.messages:
            role = "assistant" if message.role == "model" else "user"
            history.append({"role": role, "content": message.text})
        return history

    def _append(self, role: str, text: str) -> ChatMessage:
        message = ChatMessage(role=role, text=text, id=next(self._ids))
        self.messages.append(message)
        return message

    def send(self, text: str) -> ChatMessage | None:
        """Send ``text`` and return the model's reply; blank input is ignored."""

        text = text.strip()
        if not text:
            return None
        self._append("user", text)
        try:
            reply = self._client.complete(self._history())
        except AssistantError as exc:
            logger.error("Error sending message to assistant: {}", exc)
            return self._append("model", APOLOGY)
        return self._append("model", reply)

    def stream(self, text: str) -> Iterator[str]:
        """Yield the reply as it arrives; the transcript holds the full reply afterwards."""

        text = text.strip()
        if not text:
            return
        self._append("user", text)
        history = self._history()
        reply = self._append("model", "")
        try:
            for delta in self._client.stream(history):
                reply.text += delta
                yield delta
        except AssistantError as exc:
            logger.error("Error streaming assistant reply: {}", exc)
            self.messages.remove(reply)
            self._append("model", APOLOGY)
            return
        reply.text = reply.text.strip()


class AssistantService:
    """Starts chat sessions when a credential is configured."""

    def __init__(self, config: AssistantConfig | None) -> None:
        self.config = config
        self._client: _ChatClient | None = None
        if config is None or not config.enabled:
            logger.info("Writing assistant is disabled")
        else:
            self._client = _build_client(config)

    def is_configured(self) -> bool:
        return self._client is not None

    def start_chat(self) -> ChatSession | None:
        if self._client is None or self.config is None:
            return None
        return ChatSession(self._client, self.config.system_instruction)


def format_reply_as_markup(text: str) -> str:
    """Wrap a reply into paragraphs ready to be inserted into a page."""

    return "<p>" + text.replace("\n", "</p><p>") + "</p>"


__all__ = [
    "APOLOGY",
    "AssistantService",
    "ChatMessage",
    "ChatSession",
    "format_reply_as_markup",
]
