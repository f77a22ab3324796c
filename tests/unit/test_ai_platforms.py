"""Unit tests for AI platform API-key validation."""

from __future__ import annotations

from typing import Any

import httpx
import pytest

from postanalyzer.integrations.ai_platforms import APIKeyValidator, has_model


class FakeResponse:
    def __init__(self, status_code: int, payload: Any = None) -> None:
        self.status_code = status_code
        self._payload = payload

    def json(self) -> Any:
        if self._payload is None:
            raise ValueError("no json")
        return self._payload


def _install_fake_client(
    monkeypatch: pytest.MonkeyPatch,
    response: FakeResponse | None = None,
    error: Exception | None = None,
) -> dict[str, Any]:
    captured: dict[str, Any] = {}

    class FakeAsyncClient:
        def __init__(self, *args: Any, **kwargs: Any) -> None:
            captured["init"] = kwargs

        async def __aenter__(self) -> "FakeAsyncClient":
            return self

        async def __aexit__(self, *args: Any) -> None:
            return None

        async def get(
            self,
            url: str,
            headers: dict[str, str] | None = None,
            params: dict[str, str] | None = None,
        ) -> FakeResponse:
            captured["get"] = {"url": url, "headers": headers, "params": params}
            if error is not None:
                raise error
            assert response is not None
            return response

    monkeypatch.setattr("postanalyzer.integrations.ai_platforms.httpx.AsyncClient", FakeAsyncClient)
    return captured


@pytest.mark.asyncio
async def test_valid_groq_key_reports_model_info(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(
        monkeypatch,
        FakeResponse(200, {"data": [{"id": "llama-3.1-8b-instant"}, {"id": "whisper-large-v3"}]}),
    )

    result = await APIKeyValidator(timeout=10.0).validate("groq", "gsk_test")

    assert result.valid
    assert result.info == {
        "models_available": 2,
        "includes_mixtral": False,
        "includes_llama": True,
    }
    assert captured["get"]["url"] == "https://api.groq.com/openai/v1/models"
    assert captured["get"]["headers"]["Authorization"] == "Bearer gsk_test"
    assert captured["init"]["timeout"] == 10.0


@pytest.mark.asyncio
async def test_rejected_openai_key_is_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, FakeResponse(401, {"error": {"message": "bad key"}}))

    result = await APIKeyValidator().validate("chatgpt", "sk-wrong")

    assert not result.valid
    assert result.message == "Invalid OpenAI API key. Please check your key and try again."


@pytest.mark.asyncio
async def test_gemini_key_is_sent_as_query_parameter(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = _install_fake_client(monkeypatch, FakeResponse(403, {"error": {}}))

    result = await APIKeyValidator().validate("gemini", "AIza-test")

    assert not result.valid
    assert captured["get"]["params"] == {"key": "AIza-test"}
    assert "Authorization" not in captured["get"]["headers"]


@pytest.mark.asyncio
async def test_connection_failure_is_reported_not_raised(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, error=httpx.ConnectError("unreachable"))

    result = await APIKeyValidator().validate("chatgpt", "sk-test")

    assert not result.valid
    assert result.message == (
        "Failed to connect to OpenAI API. Please check your internet connection."
    )


@pytest.mark.asyncio
async def test_unexpected_status_is_invalid(monkeypatch: pytest.MonkeyPatch) -> None:
    _install_fake_client(monkeypatch, FakeResponse(503))

    result = await APIKeyValidator().validate("groq", "gsk_test")

    assert not result.valid
    assert result.message == "Unexpected response from Groq API: 503"


@pytest.mark.asyncio
async def test_unknown_platform_is_invalid() -> None:
    result = await APIKeyValidator().validate("claude", "key")

    assert not result.valid
    assert result.message == "Unknown platform"


def test_has_model_ignores_malformed_entries() -> None:
    models = ["gpt-4", {"id": None}, {"name": "models/gemini-pro"}, {"id": "GPT-4o"}]

    assert has_model(models, "gpt-4")
    assert has_model(models, "gemini")
    assert not has_model(models, "mixtral")
