import pytest
import requests

from backend import llm
from backend.config import get_settings, mask_key
from backend.llm import (
    AuthenticationError,
    ConfigurationError,
    OpenRouterClient,
    QuotaExceededError,
    UpstreamError,
    UpstreamRateLimitError,
)


class FakeResponse:
    def __init__(self, status_code=200, body=None, text=""):
        self.status_code = status_code
        self._body = body
        self.text = text

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


def completion(content):
    return {"choices": [{"message": {"role": "assistant", "content": content}}]}


@pytest.fixture
def calls(monkeypatch):
    recorded = []

    def install(response=None, error=None):
        def fake_post(url, json=None, headers=None, timeout=None):
            recorded.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
            if error is not None:
                raise error
            return response

        monkeypatch.setattr(llm.requests, "post", fake_post)
        return recorded

    return install


def make_client(key="sk-test-key-123456"):
    return OpenRouterClient(api_key=key, api_url="https://example.test/v1/chat", model="test/model", timeout=5)


def test_returns_first_choice_verbatim(calls):
    recorded = calls(FakeResponse(body=completion("  {\"plan\": {}}\n")))
    assert make_client().complete("make me a plan") == "  {\"plan\": {}}\n"

    sent = recorded[0]
    assert sent["url"] == "https://example.test/v1/chat"
    assert sent["headers"]["Authorization"] == "Bearer sk-test-key-123456"
    assert sent["timeout"] == 5
    body = sent["json"]
    assert body["model"] == "test/model"
    assert body["temperature"] == 0.7
    assert body["max_tokens"] == 2000
    assert [m["role"] for m in body["messages"]] == ["system", "user"]
    assert "certified fitness trainer and nutritionist" in body["messages"][0]["content"]
    assert body["messages"][1]["content"] == "make me a plan"


def test_missing_key_never_calls_network(calls):
    recorded = calls(FakeResponse(body=completion("x")))
    with pytest.raises(ConfigurationError) as exc:
        make_client(key="").complete("prompt")
    assert exc.value.message == "OpenRouter API key not configured"
    assert recorded == []


@pytest.mark.parametrize(
    "status, error_cls, http_status",
    [
        (401, AuthenticationError, 500),
        (429, UpstreamRateLimitError, 429),
        (402, QuotaExceededError, 402),
    ],
)
def test_status_codes_are_classified(calls, status, error_cls, http_status):
    calls(FakeResponse(status_code=status, body={"error": {"message": "nope"}}))
    with pytest.raises(error_cls) as exc:
        make_client().complete("prompt")
    assert exc.value.status_code == http_status


def test_server_error_is_generic(calls):
    calls(FakeResponse(status_code=503, text="upstream unavailable"))
    with pytest.raises(UpstreamError) as exc:
        make_client().complete("prompt")
    assert exc.value.status_code == 500
    assert exc.value.details == "Request failed with status code 503"


def test_timeout_is_generic(calls):
    recorded = calls(error=requests.Timeout("read timed out"))
    with pytest.raises(UpstreamError) as exc:
        make_client().complete("prompt")
    assert "read timed out" in exc.value.details
    assert len(recorded) == 1


def test_malformed_body_is_generic(calls):
    calls(FakeResponse(body={"choices": []}))
    with pytest.raises(UpstreamError):
        make_client().complete("prompt")


def test_from_settings_reads_environment(monkeypatch):
    monkeypatch.setenv("OPENROUTER_API_KEY", " sk-env ")
    monkeypatch.setenv("OPENROUTER_API_URL", "https://proxy.test/chat")
    monkeypatch.setenv("OPENROUTER_MODEL", "vendor/model")
    client = OpenRouterClient.from_settings(get_settings())
    assert client.api_key == "sk-env"
    assert client.api_url == "https://proxy.test/chat"
    assert client.model == "vendor/model"


def test_settings_defaults(monkeypatch):
    for name in ("OPENROUTER_API_URL", "OPENROUTER_MODEL", "PORT", "RATE_LIMIT_MAX_REQUESTS"):
        monkeypatch.delenv(name, raising=False)
    settings = get_settings()
    assert settings.openrouter_api_url == "https://openrouter.ai/api/v1/chat/completions"
    assert settings.port == 5000
    assert settings.rate_limit_max_requests == 10
    assert settings.rate_limit_window_seconds == 900


@pytest.mark.parametrize(
    "value, expected",
    [(None, ""), ("", ""), ("abc", "***"), ("12345678", "********"), ("sk-or-v1-xyz9876", "sk-o...9876")],
)
def test_mask_key(value, expected):
    assert mask_key(value) == expected
