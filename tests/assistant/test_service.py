from __future__ import annotations

from collections.abc import Iterator
from typing import Any

import litellm
import pytest

from docsys.assistant import APOLOGY, AssistantService, ChatSession, format_reply_as_markup
from docsys.config.llm import AssistantConfig
from docsys.errors import AssistantError


class RecordingClient:
    def __init__(self, reply: str = "ok") -> None:
        self.reply = reply
        self.calls: list[list[dict[str, str]]] = []

    def complete(self, messages: list[dict[str, str]]) -> str:
        self.calls.append(list(messages))
        return self.reply

    def stream(self, messages: list[dict[str, str]]) -> Iterator[str]:
        self.calls.append(list(messages))
        yield self.reply


class FailingClient:
    def complete(self, messages: list[dict[str, str]]) -> str:
        raise AssistantError("boom")

    def stream(self, messages: list[dict[str, str]]) -> Iterator[str]:
        raise AssistantError("boom")
        yield ""  # pragma: no cover


def _stub_config(**overrides: Any) -> AssistantConfig:
    return AssistantConfig(base_url="stub://local", model="test-model", **overrides)


def test_service_unavailable_without_section() -> None:
    service = AssistantService(None)

    assert not service.is_configured()
    assert service.start_chat() is None


def test_service_unavailable_when_disabled() -> None:
    assert not AssistantService(_stub_config(enabled=False)).is_configured()


def test_service_unavailable_without_api_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("API_KEY", raising=False)

    assert not AssistantService(AssistantConfig()).is_configured()


def test_stub_chat_replies_with_model_name() -> None:
    session = AssistantService(_stub_config()).start_chat()
    assert session is not None

    reply = session.send("  Improve this  ")

    assert reply is not None
    assert reply.text == "[test-model] Improve this"
    assert [(m.role, m.id) for m in session.messages] == [("user", 1), ("model", 2)]


def test_blank_message_is_ignored() -> None:
    session = ChatSession(RecordingClient(), "sys")

    assert session.send("   ") is None
    assert session.messages == []


def test_history_includes_system_instruction_and_turns() -> None:
    client = RecordingClient(reply="fine")
    session = ChatSession(client, "You are a helpful writing assistant.")

    session.send("first")
    session.send("second")

    assert client.calls[-1] == [
        {"role": "system", "content": "You are a helpful writing assistant."},
        {"role": "user", "content": "first"},
        {"role": "assistant", "content": "fine"},
        {"role": "user", "content": "second"},
    ]


def test_failed_request_appends_apology() -> None:
    session = ChatSession(FailingClient(), "sys")

    reply = session.send("hello")

    assert reply is not None
    assert reply.text == APOLOGY
    assert [m.role for m in session.messages] == ["user", "model"]


def test_stream_collects_full_reply() -> None:
    session = AssistantService(_stub_config()).start_chat()
    assert session is not None

    streamed = "".join(session.stream("hello world"))

    assert streamed.strip() == "[test-model] hello world"
    assert session.messages[-1].text == "[test-model] hello world"


def test_stream_failure_replaces_partial_reply_with_apology() -> None:
    session = ChatSession(FailingClient(), "sys")

    assert list(session.stream("hello")) == []
    assert [m.text for m in session.messages] == ["hello", APOLOGY]


def test_litellm_client_extracts_content(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "secret")
    seen: dict[str, Any] = {}

    def fake_completion(**kwargs: Any) -> dict[str, Any]:
        seen.update(kwargs)
        return {"choices": [{"message": {"content": " Tightened. "}}]}

    monkeypatch.setattr(litellm, "completion", fake_completion)
    session = AssistantService(AssistantConfig()).start_chat()
    assert session is not None

    reply = session.send("shorten this")

    assert reply is not None and reply.text == "Tightened."
    assert seen["model"] == "gemini/gemini-2.5-flash"
    assert seen["api_key"] == "secret"


def test_litellm_errors_become_apology(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("API_KEY", "secret")

    def broken_completion(**kwargs: Any) -> Any:
        raise RuntimeError("network down")

    monkeypatch.setattr(litellm, "completion", broken_completion)
    session = AssistantService(AssistantConfig()).start_chat()
    assert session is not None

    reply = session.send("hi")

    assert reply is not None and reply.text == APOLOGY


def test_format_reply_as_markup() -> None:
    assert format_reply_as_markup("a\nb") == "<p>a</p><p>b</p>"
